"""
Appointment records kept on the device.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel


class AppointmentStatus(str, Enum):
    BOOKED = "booked"
    COMPLETED = "completed"
    NO_SHOW = "no-show"


class Appointment(BaseModel):
    id: str
    name: str
    formula: str = ""
    notes: str = ""
    date: str                                # YYYY-MM-DD
    time: str                                # HH:MM (24h)
    status: AppointmentStatus = AppointmentStatus.BOOKED
    timer_end: Optional[datetime] = None     # when the processing timer ends
    summary: Optional[str] = None
    aftercare: Optional[str] = None
    service_key: Optional[str] = None
    suggested_rebook: Optional[str] = None   # display string, e.g. "Feb 10, 10:00 AM"

    @property
    def sort_key(self):
        return (self.date, self.time)


class TimerInfo(BaseModel):
    id: str
    name: str
    label: str
    done: bool
    remaining_seconds: int


def generate_appointment_id(now: Optional[datetime] = None) -> str:
    """Generate unique appointment ID."""
    now = now or datetime.now()
    return f"APT-{now.strftime('%Y%m%d')}-{uuid.uuid4().hex[:12].upper()}"
