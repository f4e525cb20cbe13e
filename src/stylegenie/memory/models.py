"""
Shapes the consultation form works with.
"""

from typing import Optional
from pydantic import BaseModel

from stylegenie.store.models import ClientRecord, ConsultationRecord


class ConsultationForm(BaseModel):
    """Current-session values as typed (or dictated) by the stylist."""
    client_name: str = ""
    client_phone: str = ""
    client_email: str = ""
    service_type: str = ""

    voice_notes: str = ""     # talk-to-text result, editable
    cut_details: str = ""     # saved to hair_history
    formulas: str = ""        # saved to products_used
    aftercare: str = ""       # saved to lifestyle_notes
    hair_goals: str = ""      # saved to hair_goals
    extra_notes: str = ""     # saved to extra_notes


class RenderedArtifacts(BaseModel):
    client_summary: str
    stylist_sheet: str


class PrefillOutcome(BaseModel):
    """Result of one name lookup, before it is merged into the form."""
    query: str
    client: Optional[ClientRecord] = None
    last_visit: Optional[ConsultationRecord] = None


class SaveOutcome(BaseModel):
    client: ClientRecord
    consultation: ConsultationRecord
    artifacts: RenderedArtifacts
    long_term_memory: str
    last_visit: Optional[ConsultationRecord] = None
