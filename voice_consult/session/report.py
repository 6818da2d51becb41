"""
Report submission at the end of a call.

The trigger itself is stateless; the call session guarantees it is invoked at
most once per call.
"""

import logging
from typing import Any, Iterable, Protocol

from pydantic import ValidationError

from voice_consult.config.constants import LOGGER_NAME
from voice_consult.exceptions import ReportSubmissionError
from voice_consult.models.assistant import ReportRequest
from voice_consult.models.session import SessionDetail
from voice_consult.models.transcript import Utterance

logger = logging.getLogger(LOGGER_NAME)


class ReportClient(Protocol):
    async def generate_report(self, request: ReportRequest) -> Any:
        ...


class ReportTrigger:
    """Packages a finished transcript and sends it for report generation."""

    def __init__(self, client: ReportClient):
        self.client = client

    async def submit(
        self,
        session_id: str,
        descriptor: SessionDetail,
        transcript: Iterable[Utterance],
    ) -> Any:
        """
        Submit the finalized transcript and return the generated report.

        Args:
            session_id: Session the call belongs to
            descriptor: Session detail the call was started with
            transcript: Finalized utterances in chronological order

        Returns:
            The report payload returned by the collaborator

        Raises:
            ReportSubmissionError: If the request cannot be built or fails
        """
        try:
            request = ReportRequest(
                messages=list(transcript),
                sessionDetail=descriptor,
                sessionId=session_id,
            )
        except ValidationError as e:
            raise ReportSubmissionError(f"Invalid report request: {e}") from e

        logger.info(
            f"Submitting report for session {session_id} with {len(request.messages)} messages"
        )
        try:
            report = await self.client.generate_report(request)
        except ReportSubmissionError:
            raise
        except Exception as e:
            raise ReportSubmissionError(f"Report generation failed: {e}") from e

        logger.debug(f"Report generated for session {session_id}: {report}")
        return report
