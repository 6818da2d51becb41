"""
Services module for the backend collaborators of the voice consultation service.

Key components:
- session_api: SessionApiClient, fetching session details and requesting
  consultation reports from the backend API.

Usage examples:
```python
from voice_consult.services.session_api import SessionApiClient

client = SessionApiClient("http://localhost:3000")
detail = await client.get_session_detail("8d1b...")
```
"""
