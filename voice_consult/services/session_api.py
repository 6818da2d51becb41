"""
HTTP client for the session and report backend.

Requests are made with ``requests`` on a worker thread so the event loop keeps
delivering channel events while the backend responds.
"""

import asyncio
import logging
from typing import Any

import requests
from pydantic import ValidationError

from voice_consult.config.constants import (
    HTTP_TIMEOUT,
    LOGGER_NAME,
    MEDICAL_REPORT_PATH,
    SESSION_DETAIL_PATH,
)
from voice_consult.exceptions import ReportSubmissionError, SessionLookupError
from voice_consult.models.assistant import ReportRequest
from voice_consult.models.session import SessionDetail

logger = logging.getLogger(LOGGER_NAME)


class SessionApiClient:
    """
    Client for the session lookup and report generation endpoints.
    """

    def __init__(self, base_url: str, timeout: float = HTTP_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def get_session_detail(self, session_id: str) -> SessionDetail:
        """
        Fetch the session detail (persona, prompt, voice) for a session.

        Raises:
            SessionLookupError: On network failure, unknown session or bad payload
        """
        url = f"{self.base_url}{SESSION_DETAIL_PATH}"
        try:
            response = await asyncio.to_thread(
                requests.get,
                url,
                params={"sessionId": session_id},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Session lookup failed for {session_id}: {e}")
            raise SessionLookupError(f"Could not load session {session_id}") from e

        if response.status_code == 404:
            raise SessionLookupError(f"Session {session_id} not found", not_found=True)
        if response.status_code != 200:
            logger.error(f"Session lookup error ({response.status_code}): {response.text}")
            raise SessionLookupError(f"Could not load session {session_id}")

        try:
            data = response.json()
        except ValueError as e:
            raise SessionLookupError(f"Invalid session detail for {session_id}") from e
        if not data:
            raise SessionLookupError(f"Session {session_id} not found", not_found=True)

        try:
            return SessionDetail.model_validate(data)
        except ValidationError as e:
            logger.error(f"Invalid session detail for {session_id}: {e}")
            raise SessionLookupError(f"Invalid session detail for {session_id}") from e

    async def generate_report(self, request: ReportRequest) -> Any:
        """
        Ask the backend to generate a consultation report.

        Returns:
            The report payload returned by the backend

        Raises:
            ReportSubmissionError: On network failure or a non-2xx response
        """
        url = f"{self.base_url}{MEDICAL_REPORT_PATH}"
        try:
            response = await asyncio.to_thread(
                requests.post,
                url,
                json=request.to_payload(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ReportSubmissionError(f"Could not reach report service: {e}") from e

        if not 200 <= response.status_code < 300:
            logger.error(f"Report generation error ({response.status_code}): {response.text}")
            raise ReportSubmissionError(f"Report service returned {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise ReportSubmissionError("Report service returned invalid JSON") from e
