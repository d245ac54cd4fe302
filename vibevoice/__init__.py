"""Top-level package for the VibeVoice text-to-speech client.

The main entry points are `VibeVoiceClient` for direct API calls and
`VibeVoiceManager` for generation with storage and background jobs.
"""

from loguru import logger

from .client import VibeVoiceClient
from .config import ConfigLoader, VibeVoiceConfig
from .errors import (
    AuthenticationError,
    GenerationError,
    GenericServiceError,
    RateLimitError,
    ServiceConnectionError,
    StreamingDisabledError,
    ValidationError,
    VibeVoiceError,
)
from .manager import VibeVoiceManager
from .models.datatypes import AudioResult, ConversationLine, Voice

logger.disable("vibevoice")

__all__ = [
    "AudioResult",
    "AuthenticationError",
    "ConfigLoader",
    "ConversationLine",
    "GenerationError",
    "GenericServiceError",
    "RateLimitError",
    "ServiceConnectionError",
    "StreamingDisabledError",
    "ValidationError",
    "VibeVoiceClient",
    "VibeVoiceConfig",
    "VibeVoiceError",
    "VibeVoiceManager",
    "Voice",
    "__version__",
]

__version__ = "0.1.0"
