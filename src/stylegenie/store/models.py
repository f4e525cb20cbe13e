"""
Record shapes of the two store collections, `clients` and `consultations`.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class ClientRecord(BaseModel):
    id: str
    user_email: str
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class ConsultationCreate(BaseModel):
    """Insert payload for one visit; the store assigns id and created_at."""
    user_email: str
    client_id: str
    client_name: Optional[str] = None
    client_phone: Optional[str] = None

    client_notes: Optional[str] = None      # voice notes
    hair_history: Optional[str] = None      # cut details
    products_used: Optional[str] = None     # formulas/technical
    lifestyle_notes: Optional[str] = None   # aftercare
    extra_notes: Optional[str] = None
    hair_goals: Optional[str] = None
    ai_summary: Optional[str] = None

    visit_date: datetime


class ConsultationRecord(ConsultationCreate):
    id: str
    visit_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
