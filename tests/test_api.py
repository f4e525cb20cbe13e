"""
Tests for the HTTP surface
"""
import sys
import os
from datetime import datetime, timedelta

import httpx
import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

from stylegenie.billing.checkout import CheckoutClient
from stylegenie.main import create_app
from stylegenie.storage.local_storage import LocalStorage
from stylegenie.store.memory_gateway import InMemoryStoreGateway

from conftest import FakeClock


def relay(request):
    return httpx.Response(200, json={"url": "https://pay.test/session/1"})


def build_app(settings):
    clock = FakeClock(datetime(2025, 6, 15, 9, 0), timedelta(seconds=1))
    return create_app(
        settings,
        gateway=InMemoryStoreGateway("stylist@example.com", clock=clock),
        storage=LocalStorage(),
        checkout=CheckoutClient(settings, transport=httpx.MockTransport(relay)),
        clock=clock,
    )


@pytest.fixture
def client(settings):
    with TestClient(build_app(settings)) as test_client:
        yield test_client


class TestConsultationEndpoints:

    def test_save_then_lookup(self, client):
        form = {
            "client_name": "Ana Lopez",
            "client_phone": "555-0101",
            "service_type": "Balayage",
            "formulas": "7N + 20vol",
        }
        response = client.post("/api/consultations", json=form)
        assert response.status_code == 200
        data = response.json()
        assert data["artifacts"]["client_summary"].startswith("Ana Lopez is booked for: Balayage.")
        assert "Voice: (none)" in data["artifacts"]["stylist_sheet"]

        lookup = client.get("/api/clients/lookup", params={"name": "ana lopez"}).json()
        assert lookup["found"] is True
        assert lookup["client"]["phone"] == "555-0101"
        assert lookup["last_visit"]["products_used"] == "7N + 20vol"

        session = client.get("/api/session").json()
        assert session["email"] == "stylist@example.com"

    def test_unknown_client_lookup(self, client):
        lookup = client.get("/api/clients/lookup", params={"name": "Nobody"}).json()
        assert lookup == {"found": False, "query": "Nobody", "client": None, "last_visit": None}

    def test_missing_name_is_validation_error(self, client):
        response = client.post("/api/consultations", json={"client_name": "  "})
        assert response.status_code == 422
        body = response.json()
        assert body["error_type"] == "validation_error"
        assert body["response"] == "Client name is required."
        assert body["error_id"].startswith("ERR-")

    def test_preview_writes_nothing(self, client):
        response = client.post("/api/consultations/preview", json={"client_name": "Ana"})
        assert response.status_code == 200
        assert "No prior visit found yet." in response.json()["client_summary"]
        assert client.get("/api/clients/lookup", params={"name": "Ana"}).json()["found"] is False


class TestConsultationForm:

    def save_ana(self, client):
        client.post("/api/consultations", json={
            "client_name": "Ana Lopez",
            "client_phone": "555-0101",
            "cut_details": "Long layers",
            "formulas": "7N + 20vol",
        })

    def test_name_entry_fills_only_empty_fields(self, client):
        self.save_ana(client)

        client.patch("/api/consultations/form", json={"formulas": "typed today"})
        client.patch("/api/consultations/form", json={"client_name": "ana lopez"})
        state = client.get("/api/consultations/form", params={"wait": True}).json()

        assert state["form"]["client_name"] == "ana lopez"
        assert state["form"]["client_phone"] == "555-0101"
        assert state["form"]["cut_details"] == "Long layers"
        assert state["form"]["formulas"] == "typed today"
        assert state["form"]["extra_notes"].startswith("Last service: N/A")
        assert state["last_visit"]["products_used"] == "7N + 20vol"
        assert state["status_msg"] == "Loaded last visit + saved memory."
        assert state["error_msg"] == ""

    def test_superseded_name_is_not_looked_up(self, settings):
        slow = settings.model_copy(update={"PREFILL_DEBOUNCE_MS": 500})
        with TestClient(build_app(slow)) as client:
            self.save_ana(client)
            client.patch("/api/consultations/form", json={"client_name": "Ana Lopez"})
            client.patch("/api/consultations/form", json={"client_name": "A"})
            state = client.get("/api/consultations/form", params={"wait": True}).json()

        assert state["form"]["client_name"] == "A"
        assert state["form"]["client_phone"] == ""
        assert state["last_visit"] is None

    def test_save_from_form(self, client):
        client.patch("/api/consultations/form", json={"client_name": "Bea", "service_type": "Gloss"})
        state = client.post("/api/consultations/form/save").json()

        assert state["status_msg"] == "Saved. Client memory updated."
        assert state["artifacts"]["client_summary"].startswith("Bea is booked for: Gloss.")
        assert state["last_visit"]["client_name"] == "Bea"

    def test_save_failure_is_shown_inline(self, client):
        state = client.post("/api/consultations/form/save").json()
        assert state["error_msg"] == "Client name is required."
        assert state["artifacts"] is None

    def test_reset(self, client):
        client.patch("/api/consultations/form", json={"formulas": "7N"})
        state = client.delete("/api/consultations/form").json()
        assert state["form"]["formulas"] == ""


class TestAppointmentEndpoints:

    def test_booking_lifecycle(self, client):
        created = client.post("/api/appointments", json={
            "name": "Ana", "date": "2025-06-15", "time": "14:30", "service_key": "tonerGloss",
            "formula": "9V gloss",
        }).json()
        assert created["status"] == "booked"
        assert created["display_time"] == "2:30 PM"
        assert created["display_date"] == "Jun 15"

        completed = client.post(f"/api/appointments/{created['id']}/status", json={"status": "completed"}).json()
        assert completed["suggested_rebook"] == "Jul 13, 2:30 PM"
        assert completed["status_label"] == "Completed"

        timed = client.post(f"/api/appointments/{created['id']}/timer", json={"minutes": 25}).json()
        assert timed["timer"]["done"] is False

        listing = client.get("/api/appointments").json()
        assert [a["id"] for a in listing["today"]] == [created["id"]]
        assert listing["upcoming"] == []
        assert listing["color_history"][0]["formula"] == "9V gloss"
        assert len(listing["timers"]) == 1

        cleared = client.delete(f"/api/appointments/{created['id']}/timer").json()
        assert cleared["timer"] is None

    def test_notes_and_summary(self, client):
        created = client.post("/api/appointments", json={"name": "Bea", "date": "2025-06-16", "time": "10:00"}).json()

        noted = client.post(f"/api/appointments/{created['id']}/notes", json={"transcript": "loves copper"}).json()
        assert noted["notes"] == "loves copper"

        summarized = client.post(f"/api/appointments/{created['id']}/summary").json()
        assert summarized["summary"] == "Client Bea preferences: loves copper"

    def test_summary_without_content(self, client):
        created = client.post("/api/appointments", json={"name": "Cy", "date": "2025-06-16", "time": "10:00"}).json()
        response = client.post(f"/api/appointments/{created['id']}/summary")
        assert response.status_code == 422

    def test_unknown_appointment(self, client):
        response = client.post("/api/appointments/APT-nope/status", json={"status": "completed"})
        assert response.status_code == 404
        assert response.json()["error_type"] == "appointment_not_found"

    @pytest.mark.parametrize("body", [
        '{"minutes": 0}',
        '{"minutes": 1e12}',
        '{"minutes": Infinity}',
    ])
    def test_out_of_range_timer(self, client, body):
        created = client.post("/api/appointments", json={"name": "Di", "date": "2025-06-16", "time": "10:00"}).json()
        response = client.post(
            f"/api/appointments/{created['id']}/timer",
            content=body,
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 422
        assert client.get(f"/api/appointments/{created['id']}").json()["timer"] is None

    def test_templates(self, client):
        templates = client.get("/api/appointments/templates").json()
        balayage = next(t for t in templates if t["key"] == "balayage")
        assert balayage["rebook_weeks"] == 12
        assert balayage["formula"].startswith("Hand-painted")


class TestCheckoutEndpoints:

    def test_checkout_then_success(self, client):
        started = client.post("/api/checkout").json()
        assert started == {"url": "https://pay.test/session/1", "is_pro": False}

        assert client.post("/api/checkout/success").json() == {"is_pro": True}
        assert client.post("/api/checkout").json()["url"] is None
        assert client.get("/api/session").json()["is_pro"] is True

    def test_logout_clears_session(self, client):
        client.post("/api/consultations", json={"client_name": "Ana"})
        client.post("/api/checkout/success")
        client.patch("/api/consultations/form", json={"formulas": "7N"})

        assert client.post("/api/session/logout").json() == {"email": None, "is_pro": False}
        assert client.get("/api/session").json() == {"email": None, "is_pro": False}
        assert client.get("/api/consultations/form").json()["form"]["formulas"] == ""


def test_health(client):
    body = client.get("/api/health").json()
    assert set(body["dependencies"]) == {"store", "checkout_relay", "disk_space"}
    assert body["status"] in ("healthy", "degraded")
