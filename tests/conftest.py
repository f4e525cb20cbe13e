"""
Shared fixtures: a controllable clock, a scripted speech recognizer and
fast settings.
"""
import sys
import os
from datetime import datetime, timedelta

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

from stylegenie.config.settings import Settings


class FakeClock:
    """Callable clock that only moves when told to"""

    def __init__(self, start: datetime, step: timedelta = timedelta(0)):
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


class FakeSpeech:
    """Speech capture that replays queued transcripts"""

    def __init__(self, *transcripts):
        self.transcripts = list(transcripts)

    async def listen(self):
        return self.transcripts.pop(0) if self.transcripts else None


@pytest.fixture
def settings():
    return Settings(
        DATA_DIR="data-test",
        PREFILL_DEBOUNCE_MS=10,
        SUMMARY_DELAY_MS=0,
        TIMER_TICK_SECONDS=0,
        SUPABASE_URL="",
        SUPABASE_ANON_KEY="",
    )


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 6, 15, 9, 0))
