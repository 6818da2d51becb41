"""
Configuration module for the voice consultation service.

Key components:
- constants: Event kinds, provider defaults and persona defaults shared
  across modules.
- settings: Environment-based runtime settings (credentials, URLs, timeouts).
- logging_config: Console and rotating file logging for the application logger.

Usage examples:
```python
from voice_consult.config.constants import LOGGER_NAME, EVENT_CALL_START
from voice_consult.config.logging_config import configure_logging
from voice_consult.config.settings import load_settings

logger = configure_logging()
settings = load_settings()
```
"""
