"""
Appointment state tracker: status transitions with rebook suggestions,
processing timers, schedule views and per-appointment notes/summaries.
Every mutation rewrites the whole list to device storage.
"""

import asyncio
import math
from datetime import datetime, timedelta
from typing import AsyncIterator, Callable, Dict, List, Optional, Union
from loguru import logger

from stylegenie.appointments.models import (
    Appointment,
    AppointmentStatus,
    TimerInfo,
    generate_appointment_id,
)
from stylegenie.config.business_rules import (
    DEFAULT_REBOOK_TIME,
    DEFAULT_REBOOK_WEEKS,
    MAX_TIMER_MINUTES,
    REBOOK_WEEKS,
    SERVICE_TEMPLATES,
    STATUS_LABELS,
)
from stylegenie.config.response_templates import ResponseTemplates
from stylegenie.config.settings import Settings
from stylegenie.speech.capture import SpeechCapture, append_transcript, require_capture
from stylegenie.storage.appointment_repository import AppointmentRepository
from stylegenie.utils.date_time_parser import DateTimeParser
from stylegenie.utils.errors import AppointmentNotFoundError, ValidationError
from stylegenie.utils.helpers import safe_trim


def template_defaults(service_key: Optional[str]) -> Optional[Dict[str, str]]:
    """Default formula/notes for a service template, or None if unknown."""
    template = SERVICE_TEMPLATES.get(service_key or "")
    if template is None:
        return None
    return {
        'formula': template['default_formula'],
        'notes': template['default_notes'],
    }


def status_label(status: Union[AppointmentStatus, str]) -> str:
    return STATUS_LABELS.get(AppointmentStatus(status).value, 'Booked')


def format_timer_label(remaining_seconds: int) -> str:
    minutes, seconds = divmod(max(0, remaining_seconds), 60)
    return f"{minutes}:{seconds:02d}"


class AppointmentTracker:
    """Service for managing the device's appointments."""

    def __init__(self, repository: AppointmentRepository, settings: Settings,
                 speech: Optional[SpeechCapture] = None,
                 clock: Callable[[], datetime] = datetime.now):
        self.repository = repository
        self.settings = settings
        self.speech = speech
        self.clock = clock

        self.appointments: Dict[str, Appointment] = {
            appointment.id: appointment for appointment in repository.load()
        }
        self.recording_id: Optional[str] = None
        self.summarizing_id: Optional[str] = None
        logger.info(f"Loaded {len(self.appointments)} saved appointments")

    @property
    def voice_enabled(self) -> bool:
        return self.speech is not None

    # Creation and lookup

    def create_appointment(self, name: str, date: str, time: str, formula: str = "",
                           notes: str = "", service_key: Optional[str] = None) -> Appointment:
        """Create a new booked appointment."""
        name, date, time = safe_trim(name), safe_trim(date), safe_trim(time)
        if not name or not date or not time:
            raise ValidationError("Client name, date and time are required.")
        if DateTimeParser.parse_date(date) is None:
            raise ValidationError("Date must use YYYY-MM-DD format.")
        if DateTimeParser.parse_time(time) is None:
            raise ValidationError("Time must use 24-hour HH:MM format.")

        appointment = Appointment(
            id=self._new_id(),
            name=name,
            formula=safe_trim(formula),
            notes=safe_trim(notes),
            date=date,
            time=time,
            status=AppointmentStatus.BOOKED,
            service_key=service_key if service_key in SERVICE_TEMPLATES else None,
        )
        self.appointments[appointment.id] = appointment
        self._save()
        logger.info(f"✅ Appointment created: {appointment.id} for {date} {time}")
        return appointment

    def get_appointment(self, appointment_id: str) -> Appointment:
        appointment = self.appointments.get(appointment_id)
        if appointment is None:
            logger.warning(f"❌ Appointment not found: {appointment_id}")
            raise AppointmentNotFoundError(f"Appointment {appointment_id} not found")
        return appointment

    def _new_id(self) -> str:
        appointment_id = generate_appointment_id(self.clock())
        while appointment_id in self.appointments:
            appointment_id = generate_appointment_id(self.clock())
        return appointment_id

    # Status

    def update_status(self, appointment_id: str, status: Union[AppointmentStatus, str]) -> Appointment:
        """Move to any status. Completed sets the rebook suggestion, booked clears it,
        no-show leaves it as is."""
        appointment = self.get_appointment(appointment_id)
        status = AppointmentStatus(status)

        appointment.status = status
        if status == AppointmentStatus.COMPLETED:
            appointment.suggested_rebook = self.build_suggested_rebook(appointment)
        elif status == AppointmentStatus.BOOKED:
            appointment.suggested_rebook = None

        self._save()
        logger.info(f"🔄 Appointment {appointment_id} is now {status.value}")
        return appointment

    def build_suggested_rebook(self, appointment: Appointment) -> str:
        weeks = REBOOK_WEEKS.get(appointment.service_key or "", DEFAULT_REBOOK_WEEKS)

        base = DateTimeParser.combine(appointment.date, appointment.time or DEFAULT_REBOOK_TIME)
        if base is None:
            base = self.clock()

        return DateTimeParser.format_rebook(base + timedelta(weeks=weeks))

    # Timers

    def start_timer(self, appointment_id: str, minutes: float) -> Appointment:
        if not 0 < minutes <= MAX_TIMER_MINUTES:
            raise ValidationError(f"Timer length must be between 0 and {MAX_TIMER_MINUTES} minutes.")
        appointment = self.get_appointment(appointment_id)
        appointment.timer_end = self.clock() + timedelta(minutes=minutes)
        self._save()
        logger.info(f"⏱️ Timer started for {appointment_id}: {minutes} min")
        return appointment

    def clear_timer(self, appointment_id: str) -> Appointment:
        appointment = self.get_appointment(appointment_id)
        appointment.timer_end = None
        self._save()
        return appointment

    def timer_info(self, appointment: Appointment, now: Optional[datetime] = None) -> Optional[TimerInfo]:
        """Remaining time derived from the stored end time; done at or below zero."""
        if appointment.timer_end is None:
            return None
        now = now or self.clock()
        diff_seconds = math.floor((appointment.timer_end - now).total_seconds())
        remaining = max(0, diff_seconds)
        return TimerInfo(
            id=appointment.id,
            name=appointment.name,
            label=format_timer_label(remaining),
            done=diff_seconds <= 0,
            remaining_seconds=remaining,
        )

    def active_timers(self, now: Optional[datetime] = None) -> List[TimerInfo]:
        now = now or self.clock()
        return [
            self.timer_info(appointment, now)
            for appointment in self.sorted_appointments()
            if appointment.timer_end is not None
        ]

    async def timer_ticks(self, max_ticks: Optional[int] = None) -> AsyncIterator[List[TimerInfo]]:
        """Yield the active-timer strip once per shared tick."""
        ticks = 0
        while max_ticks is None or ticks < max_ticks:
            yield self.active_timers()
            ticks += 1
            await asyncio.sleep(self.settings.TIMER_TICK_SECONDS)

    # Views

    def sorted_appointments(self) -> List[Appointment]:
        return sorted(self.appointments.values(), key=lambda appointment: appointment.sort_key)

    def todays_appointments(self) -> List[Appointment]:
        today = self.clock().date().isoformat()
        return [a for a in self.sorted_appointments() if a.date == today]

    def upcoming_appointments(self) -> List[Appointment]:
        """Strictly after today; past dates show in neither view."""
        today = self.clock().date().isoformat()
        return [a for a in self.sorted_appointments() if a.date > today]

    def color_history(self) -> List[Appointment]:
        """Latest appointment with a formula, per client name."""
        latest: Dict[str, Appointment] = {}
        for appointment in self.sorted_appointments():
            if not appointment.formula:
                continue
            latest[appointment.name] = appointment
        return list(latest.values())

    # Notes and summaries

    def append_transcript(self, appointment_id: str, transcript: str) -> Appointment:
        """Append dictated text; any generated summary/aftercare no longer applies."""
        appointment = self.get_appointment(appointment_id)
        if not safe_trim(transcript):
            return appointment
        appointment.notes = append_transcript(appointment.notes, transcript)
        appointment.summary = None
        appointment.aftercare = None
        self._save()
        return appointment

    async def dictate(self, appointment_id: str) -> Appointment:
        capture = require_capture(self.speech)
        self.get_appointment(appointment_id)

        self.recording_id = appointment_id
        try:
            transcript = await capture.listen()
        finally:
            self.recording_id = None
        return self.append_transcript(appointment_id, transcript or "")

    async def summarize(self, appointment_id: str) -> Appointment:
        """Generate the summary and aftercare text after a short delay.

        The text is built from the notes/formula as they were when requested.
        """
        appointment = self.get_appointment(appointment_id)
        if not appointment.notes and not appointment.formula:
            raise ValidationError("No notes or formula to summarize yet.")

        summary = ResponseTemplates.appointment_summary(appointment.name, appointment.notes, appointment.formula)
        aftercare = ResponseTemplates.aftercare()

        self.summarizing_id = appointment_id
        try:
            await asyncio.sleep(self.settings.SUMMARY_DELAY_MS / 1000)
        finally:
            self.summarizing_id = None

        appointment.summary = summary
        appointment.aftercare = aftercare
        self._save()
        return appointment

    def _save(self):
        self.repository.save(list(self.appointments.values()))
