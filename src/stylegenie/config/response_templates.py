"""
Text templates for the consultation artifacts and appointment summaries.
"""

from typing import List, Optional

from stylegenie.config.business_rules import (
    AFTERCARE_LINES,
    DEFAULT_CLIENT_LABEL,
    DEFAULT_SERVICE_LABEL,
    PLACEHOLDER,
)
from stylegenie.memory.models import ConsultationForm
from stylegenie.store.models import ConsultationRecord
from stylegenie.utils.date_time_parser import DateTimeParser
from stylegenie.utils.helpers import safe_trim


def _or_placeholder(value: Optional[str]) -> str:
    return safe_trim(value) or PLACEHOLDER


def _visit_label(previous: ConsultationRecord, unknown: str) -> str:
    moment = previous.visit_date
    if moment is None:
        return unknown
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return DateTimeParser.format_visit(moment)


class ResponseTemplates:
    """Templates for rendered consultation output."""

    @staticmethod
    def client_summary(form: ConsultationForm, previous: Optional[ConsultationRecord] = None) -> str:
        """Client-facing summary. The notes section is dropped entirely when empty."""
        name = safe_trim(form.client_name) or DEFAULT_CLIENT_LABEL
        service = safe_trim(form.service_type) or DEFAULT_SERVICE_LABEL

        lines: List[str] = [f"{name} is booked for: {service}.", ""]

        if previous is not None:
            lines += [
                f"Last time ({_visit_label(previous, 'unknown date')}):",
                f"- Cut details: {_or_placeholder(previous.hair_history)}",
                f"- Formulas: {_or_placeholder(previous.products_used)}",
                f"- Aftercare: {_or_placeholder(previous.lifestyle_notes)}",
                f"- Goals: {_or_placeholder(previous.hair_goals)}",
            ]
        else:
            lines.append("No prior visit found yet.")

        lines += [
            "",
            "Today's plan:",
            f"- Service: {service}",
            f"- Cut details: {_or_placeholder(form.cut_details)}",
            f"- Formulas/technical: {_or_placeholder(form.formulas)}",
            f"- Aftercare: {_or_placeholder(form.aftercare)}",
            f"- Goals: {_or_placeholder(form.hair_goals)}",
        ]

        voice = safe_trim(form.voice_notes)
        extra = safe_trim(form.extra_notes)
        if voice or extra:
            lines += ["", "Notes:"]
            if voice:
                lines.append(f"- Voice: {voice}")
            if extra:
                lines.append(f"- Extra: {extra}")

        return "\n".join(lines)

    @staticmethod
    def stylist_sheet(form: ConsultationForm, previous: Optional[ConsultationRecord] = None) -> str:
        """Technical sheet. Every field is printed, with placeholders when empty."""
        lines: List[str] = [
            f"Client: {_or_placeholder(form.client_name)}",
            f"Phone: {_or_placeholder(form.client_phone)}",
            f"Email: {_or_placeholder(form.client_email)}",
            "",
            "LAST VISIT:",
        ]

        if previous is not None:
            lines += [
                f"- Date: {_visit_label(previous, 'unknown')}",
                f"- Cut details: {_or_placeholder(previous.hair_history)}",
                f"- Formulas: {_or_placeholder(previous.products_used)}",
                f"- Aftercare: {_or_placeholder(previous.lifestyle_notes)}",
                f"- Goals: {_or_placeholder(previous.hair_goals)}",
            ]
        else:
            lines.append("- None found yet.")

        voice = safe_trim(form.voice_notes)
        extra = safe_trim(form.extra_notes)
        lines += [
            "",
            "TODAY:",
            f"- Service: {_or_placeholder(form.service_type)}",
            f"- Cut details: {_or_placeholder(form.cut_details)}",
            f"- Formulas/technical: {_or_placeholder(form.formulas)}",
            f"- Aftercare: {_or_placeholder(form.aftercare)}",
            f"- Goals: {_or_placeholder(form.hair_goals)}",
            "",
            "NOTES:",
            f"Voice: {voice}" if voice else "Voice: (none)",
            f"Extra: {extra}" if extra else "Extra: (none)",
        ]
        return "\n".join(lines)

    @staticmethod
    def long_term_memory(form: ConsultationForm) -> str:
        """Condensed digest written over the client's long-term notes."""
        labelled = [
            ("Cut details", form.cut_details),
            ("Formulas/technical", form.formulas),
            ("Aftercare", form.aftercare),
            ("Goals", form.hair_goals),
            ("Notes", form.extra_notes),
        ]
        lines = [f"Last service: {_or_placeholder(form.service_type)}"]
        lines += [f"{label}: {safe_trim(value)}" for label, value in labelled if safe_trim(value)]
        return "\n".join(lines)

    @staticmethod
    def appointment_summary(name: str, notes: str, formula: str) -> str:
        notes = safe_trim(notes)
        formula = safe_trim(formula)
        base = f"Client {name} preferences: {notes}" if notes else f"Client {name} had a color service."
        formula_line = f" Formula used: {formula}." if formula else ""
        return f"{base}{formula_line}".strip()

    @staticmethod
    def aftercare() -> str:
        return "\n".join(AFTERCARE_LINES)
