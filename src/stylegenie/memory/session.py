"""
Per-form consultation workflow: debounced name prefill, voice notes and the
save-and-generate action, with the status/error state a form displays.
"""

import asyncio
from typing import Any, Dict, Optional
from loguru import logger

from stylegenie.config.settings import Settings
from stylegenie.memory.models import ConsultationForm, RenderedArtifacts, SaveOutcome
from stylegenie.memory.resolver import ClientMemoryResolver, apply_prefill
from stylegenie.speech.capture import SpeechCapture, append_transcript, require_capture
from stylegenie.store.models import ConsultationRecord
from stylegenie.utils.error_handler import ErrorHandler
from stylegenie.utils.errors import StyleGenieError
from stylegenie.utils.helpers import safe_trim


class ConsultationSession:
    """State behind one consultation form."""

    def __init__(self, resolver: ClientMemoryResolver, settings: Settings,
                 owner: Optional[str] = None, speech: Optional[SpeechCapture] = None):
        self.resolver = resolver
        self.settings = settings
        self.speech = speech
        self._owner = owner

        self.form = ConsultationForm()
        self.last_visit: Optional[ConsultationRecord] = None
        self.artifacts: Optional[RenderedArtifacts] = None

        self.status_msg = ""
        self.error_msg = ""
        self.loading_memory = False
        self.saving = False
        self.listening = False

        self._pending: Optional[asyncio.Task] = None

    @property
    def voice_enabled(self) -> bool:
        return self.speech is not None

    @property
    def has_summary(self) -> bool:
        return self.artifacts is not None

    async def owner(self) -> str:
        if not self._owner:
            self._owner = await self.resolver.gateway.current_user_email()
        return self._owner

    def edit_form(self, updates: Dict[str, Any]) -> ConsultationForm:
        """Apply typed field values; the name field goes through name_changed."""
        fields = {key: value for key, value in updates.items() if key != "client_name"}
        self.form = self.form.model_copy(update=fields)
        if "client_name" in updates:
            self.name_changed(updates["client_name"] or "")
        return self.form

    def reset(self, forget_owner: bool = False) -> None:
        """Start a blank form, dropping any pending lookup"""
        if forget_owner:
            self._owner = None
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None
        self.form = ConsultationForm()
        self.last_visit = None
        self.artifacts = None
        self.status_msg = ""
        self.error_msg = ""

    # Prefill

    def name_changed(self, name: str) -> None:
        """Record a keystroke in the name field and (re)schedule the lookup.

        Only the latest input is looked up: a pending lookup is cancelled,
        and a response whose query no longer matches the field is discarded.
        Must be called from a running event loop.
        """
        self.form = self.form.model_copy(update={'client_name': name})

        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

        query = safe_trim(name)
        if len(query) < self.settings.PREFILL_MIN_CHARS:
            return

        loop = asyncio.get_running_loop()
        self._pending = loop.create_task(self._prefill_after_delay(query))

    async def wait_for_prefill(self) -> None:
        """Wait until the scheduled lookup (if any) has finished."""
        if self._pending is not None:
            await asyncio.gather(self._pending, return_exceptions=True)

    def _is_stale(self, query: str) -> bool:
        return safe_trim(self.form.client_name) != query

    async def _prefill_after_delay(self, query: str) -> None:
        await asyncio.sleep(self.settings.PREFILL_DEBOUNCE_MS / 1000)

        self.loading_memory = True
        self.error_msg = ""
        self.status_msg = ""
        try:
            owner = await self.owner()
            outcome = await self.resolver.lookup(owner, query)
        except StyleGenieError as e:
            if not self._is_stale(query):
                self.error_msg = ErrorHandler.user_message(e)
                ErrorHandler.handle_error(e, {'action': 'prefill', 'query': query})
            return
        finally:
            self.loading_memory = False

        if self._is_stale(query):
            logger.debug(f"Discarding stale prefill for '{query}'")
            return

        if outcome.client is None:
            self.last_visit = None
            return

        self.form = apply_prefill(self.form, outcome)
        self.last_visit = outcome.last_visit
        self.status_msg = "Loaded last visit + saved memory." if outcome.last_visit else "Loaded saved client memory."

    # Voice

    async def dictate(self) -> str:
        """Capture one utterance and append it to the voice notes."""
        capture = require_capture(self.speech)
        self.error_msg = ""
        self.listening = True
        try:
            transcript = await capture.listen()
        finally:
            self.listening = False

        self.form = self.form.model_copy(
            update={'voice_notes': append_transcript(self.form.voice_notes, transcript)}
        )
        return self.form.voice_notes

    # Save

    async def save_and_generate(self) -> Optional[SaveOutcome]:
        """Run the save transaction; failures end up in ``error_msg``."""
        self.saving = True
        self.error_msg = ""
        self.status_msg = ""
        try:
            owner = await self.owner()
            outcome = await self.resolver.save_and_generate(owner, self.form)
        except StyleGenieError as e:
            self.error_msg = ErrorHandler.user_message(e)
            ErrorHandler.handle_error(e, {'action': 'save_and_generate', 'client': self.form.client_name})
            return None
        finally:
            self.saving = False

        self.artifacts = outcome.artifacts
        self.last_visit = outcome.last_visit
        self.status_msg = "Saved. Client memory updated."
        return outcome
