"""HTTP layer for the VibeVoice API.

This package contains the requests-based transport, failure classification,
and the lazy audio stream.
"""

from .classifier import classify_http_failure, classify_transport_failure
from .streaming import AudioStream
from .transport import HttpTransport

__all__ = [
    "AudioStream",
    "HttpTransport",
    "classify_http_failure",
    "classify_transport_failure",
]
