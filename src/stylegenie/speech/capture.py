"""
Optional speech-to-text capability.

Components take an ``Optional[SpeechCapture]``; ``None`` means the runtime
has no recognizer, and voice entry is disabled rather than failing later.
"""

from typing import Optional, Protocol, runtime_checkable

from stylegenie.utils.errors import UnsupportedCapabilityError
from stylegenie.utils.helpers import safe_trim

UNSUPPORTED_MESSAGE = "Voice notes are not supported on this device."


@runtime_checkable
class SpeechCapture(Protocol):
    async def listen(self) -> Optional[str]:
        """Capture one utterance and return its finalized transcript."""
        ...


def require_capture(capture: Optional[SpeechCapture]) -> SpeechCapture:
    if capture is None:
        raise UnsupportedCapabilityError(UNSUPPORTED_MESSAGE)
    return capture


def append_transcript(existing: Optional[str], transcript: Optional[str]) -> str:
    """Space-join a finalized transcript onto existing text (never replaces)."""
    transcript = safe_trim(transcript)
    if not transcript:
        return existing or ""
    return f"{existing} {transcript}" if existing else transcript
