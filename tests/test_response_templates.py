"""
Tests for the rendered consultation artifacts
"""
import sys
import os
from datetime import datetime

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

from stylegenie.config.response_templates import ResponseTemplates
from stylegenie.memory.models import ConsultationForm
from stylegenie.store.models import ConsultationRecord


@pytest.fixture
def previous():
    return ConsultationRecord(
        id="c-1",
        user_email="stylist@example.com",
        client_id="client-1",
        hair_history="Blunt bob",
        products_used="6N + 10vol",
        lifestyle_notes=None,
        hair_goals="Grow out",
        visit_date=datetime(2025, 1, 5, 14, 30),
    )


class TestClientSummary:

    def test_notes_section_omitted_when_empty(self):
        """Client summary drops Notes entirely; it never prints placeholders there"""
        form = ConsultationForm(client_name="Ana", service_type="Cut")
        summary = ResponseTemplates.client_summary(form)

        assert "Notes:" not in summary
        assert "(none)" not in summary
        assert summary.endswith("- Goals: N/A")

    def test_full_layout_without_prior_visit(self):
        form = ConsultationForm(client_name="Ana", service_type="Cut", cut_details="#2 on sides")
        summary = ResponseTemplates.client_summary(form)

        assert summary == "\n".join([
            "Ana is booked for: Cut.",
            "",
            "No prior visit found yet.",
            "",
            "Today's plan:",
            "- Service: Cut",
            "- Cut details: #2 on sides",
            "- Formulas/technical: N/A",
            "- Aftercare: N/A",
            "- Goals: N/A",
        ])

    def test_notes_lists_only_present_entries(self):
        form = ConsultationForm(client_name="Ana", extra_notes="Prefers mornings")
        summary = ResponseTemplates.client_summary(form)

        assert summary.endswith("Notes:\n- Extra: Prefers mornings")
        assert "- Voice:" not in summary

    def test_defaults_for_missing_name_and_service(self):
        summary = ResponseTemplates.client_summary(ConsultationForm())
        assert summary.startswith("this client is booked for: a hair service.")

    def test_prior_visit_block(self, previous):
        form = ConsultationForm(client_name="Ana", service_type="Cut")
        summary = ResponseTemplates.client_summary(form, previous)

        assert "Last time (Jan 5, 2025, 2:30 PM):" in summary
        assert "- Cut details: Blunt bob" in summary
        assert "- Aftercare: N/A" in summary
        assert "No prior visit" not in summary

    def test_prior_visit_without_date(self, previous):
        previous.visit_date = None
        summary = ResponseTemplates.client_summary(ConsultationForm(client_name="Ana"), previous)
        assert "Last time (unknown date):" in summary


class TestStylistSheet:

    def test_empty_notes_print_placeholders(self):
        sheet = ResponseTemplates.stylist_sheet(ConsultationForm(client_name="Ana"))

        assert "Voice: (none)" in sheet
        assert "Extra: (none)" in sheet
        assert sheet.endswith("NOTES:\nVoice: (none)\nExtra: (none)")

    def test_headers_and_contact(self, previous):
        form = ConsultationForm(client_name="Ana", client_phone="555-0101", voice_notes="wants fringe")
        sheet = ResponseTemplates.stylist_sheet(form, previous)

        assert sheet.startswith("Client: Ana\nPhone: 555-0101\nEmail: N/A\n\nLAST VISIT:\n- Date: Jan 5, 2025, 2:30 PM")
        assert "\nTODAY:\n- Service: N/A" in sheet
        assert "Voice: wants fringe" in sheet

    def test_no_prior_visit(self):
        sheet = ResponseTemplates.stylist_sheet(ConsultationForm())
        assert "LAST VISIT:\n- None found yet." in sheet
        assert sheet.startswith("Client: N/A")


class TestDigests:

    def test_long_term_memory_skips_empty_fields(self):
        form = ConsultationForm(service_type="Gloss", aftercare="Purple shampoo weekly", extra_notes="VIP")
        assert ResponseTemplates.long_term_memory(form) == (
            "Last service: Gloss\nAftercare: Purple shampoo weekly\nNotes: VIP"
        )

    def test_appointment_summary(self):
        assert ResponseTemplates.appointment_summary("Ana", "likes cool tones", "7N") == \
            "Client Ana preferences: likes cool tones Formula used: 7N."
        assert ResponseTemplates.appointment_summary("Ana", "", "") == "Client Ana had a color service."

    def test_aftercare_has_three_lines(self):
        assert len(ResponseTemplates.aftercare().splitlines()) == 3
