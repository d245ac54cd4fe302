"""Shared typed data models for VibeVoice.

This package contains the immutable request/response records used by the
client, the manager, and the CLI.
"""

from .datatypes import AudioResult, ConversationLine, GenerationRequest, Voice

__all__ = [
    "AudioResult",
    "ConversationLine",
    "GenerationRequest",
    "Voice",
]
