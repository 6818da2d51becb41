"""
Models module for data structures used by the voice consultation service.

Key components:
- session: Session descriptor and persona models returned by the session
  lookup collaborator.
- transcript: Utterances and transcript events produced while a call runs.
- call: Call state enum, notifications and the call snapshot read model.
- assistant: Inline assistant configuration sent to the voice provider and
  the report request sent to the report collaborator.

Usage examples:
```python
from voice_consult.models.session import SessionDetail

detail = SessionDetail(**response.json())
print(detail.selectedDoctor.specialist)
```
"""

from voice_consult.models.assistant import AssistantConfig, ReportRequest
from voice_consult.models.call import CallSnapshot, CallState, Notification, NotificationLevel
from voice_consult.models.session import DoctorAgent, SessionDetail
from voice_consult.models.transcript import LiveUtterance, TranscriptEvent, Utterance
