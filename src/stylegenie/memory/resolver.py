"""
Client memory: find-or-create the client, recall the most recent visit and
merge it with the current session into the two rendered artifacts.
"""

from datetime import datetime
from typing import Callable, Optional
from loguru import logger

from stylegenie.config.response_templates import ResponseTemplates
from stylegenie.memory.models import ConsultationForm, PrefillOutcome, RenderedArtifacts, SaveOutcome
from stylegenie.store.gateway import StoreGateway
from stylegenie.store.models import ClientRecord, ConsultationCreate, ConsultationRecord
from stylegenie.utils.errors import ValidationError
from stylegenie.utils.helpers import or_none, safe_trim


def apply_prefill(form: ConsultationForm, outcome: PrefillOutcome) -> ConsultationForm:
    """Fill empty form fields from a lookup result. Typed text is never replaced."""
    if outcome.client is None:
        return form

    client = outcome.client
    previous = outcome.last_visit
    candidates = {
        'client_phone': client.phone,
        'client_email': client.email,
        'extra_notes': client.notes,
    }
    if previous is not None:
        candidates.update({
            'cut_details': previous.hair_history,
            'formulas': previous.products_used,
            'aftercare': previous.lifestyle_notes,
            'hair_goals': previous.hair_goals,
        })

    updates = {
        field: value
        for field, value in candidates.items()
        if value and not safe_trim(getattr(form, field))
    }
    return form.model_copy(update=updates)


class ClientMemoryResolver:
    """Client identity and visit recall on top of a store gateway."""

    def __init__(self, gateway: StoreGateway, clock: Callable[[], datetime] = datetime.now):
        self.gateway = gateway
        self.clock = clock

    async def resolve_client(self, owner: str, name: str, phone: Optional[str] = None,
                             email: Optional[str] = None) -> ClientRecord:
        """Find the client by case-insensitive name or create it.

        Supplied contact values win only when non-empty; an update is written
        only when the merged values differ from what is stored.
        """
        name = safe_trim(name)
        if not name:
            raise ValidationError("Client name is required.")

        existing = await self.gateway.find_client_by_name(owner, name)
        if existing is not None:
            next_phone = or_none(phone) or existing.phone or None
            next_email = or_none(email) or existing.email or None

            if next_phone != existing.phone or next_email != existing.email:
                logger.info(f"🔄 Updating contact details for client {existing.id}")
                return await self.gateway.update_client(
                    existing.id, {'phone': next_phone, 'email': next_email}
                )
            return existing

        created = await self.gateway.insert_client(
            owner, name, phone=or_none(phone), email=or_none(email), notes=None
        )
        logger.info(f"✅ Client created: {created.id}")
        return created

    async def load_last_visit(self, owner: str, client_id: str) -> Optional[ConsultationRecord]:
        return await self.gateway.latest_consultation(owner, client_id)

    @staticmethod
    def build_artifacts(form: ConsultationForm,
                        previous: Optional[ConsultationRecord] = None) -> RenderedArtifacts:
        return RenderedArtifacts(
            client_summary=ResponseTemplates.client_summary(form, previous),
            stylist_sheet=ResponseTemplates.stylist_sheet(form, previous),
        )

    async def lookup(self, owner: str, name: str) -> PrefillOutcome:
        """Read-only recall for prefill: the client and its latest visit, if any."""
        query = safe_trim(name)
        client = await self.gateway.find_client_by_name(owner, query)
        if client is None:
            return PrefillOutcome(query=query)
        last_visit = await self.load_last_visit(owner, client.id)
        return PrefillOutcome(query=query, client=client, last_visit=last_visit)

    async def save_and_generate(self, owner: str, form: ConsultationForm) -> SaveOutcome:
        """Record one visit and refresh the client's long-term memory.

        Steps run in order and the first failure aborts the rest. Writes
        already made stay in place: a failure after the consultation insert
        leaves the visit recorded without the long-term notes update.
        """
        client = await self.resolve_client(owner, form.client_name, form.client_phone, form.client_email)

        previous = await self.load_last_visit(owner, client.id)
        artifacts = self.build_artifacts(form, previous)

        consultation = await self.gateway.insert_consultation(ConsultationCreate(
            user_email=owner,
            client_id=client.id,
            client_name=or_none(form.client_name),
            client_phone=or_none(form.client_phone),
            client_notes=or_none(form.voice_notes),
            hair_history=or_none(form.cut_details),
            products_used=or_none(form.formulas),
            lifestyle_notes=or_none(form.aftercare),
            extra_notes=or_none(form.extra_notes),
            hair_goals=or_none(form.hair_goals),
            ai_summary=artifacts.client_summary or None,
            visit_date=self.clock(),
        ))
        logger.info(f"✅ Consultation {consultation.id} saved for client {client.id}")

        memory = ResponseTemplates.long_term_memory(form)
        client = await self.gateway.update_client(client.id, {'notes': memory})

        refreshed = await self.load_last_visit(owner, client.id)

        return SaveOutcome(
            client=client,
            consultation=consultation,
            artifacts=artifacts,
            long_term_memory=memory,
            last_visit=refreshed,
        )
