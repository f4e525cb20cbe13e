"""
Tests for device storage, the appointment blob migration and the session cache
"""
import sys
import os
import json

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

from stylegenie.config.business_rules import APPOINTMENTS_STORAGE_KEY, PRO_STATUS_STORAGE_KEY
from stylegenie.storage.appointment_repository import AppointmentRepository
from stylegenie.storage.local_storage import LocalStorage
from stylegenie.storage.session_cache import SessionCache

LEGACY_BLOB = [
    {
        "id": 1733140000000,
        "name": "Ana",
        "formula": "7N",
        "notes": "",
        "date": "2025-01-01",
        "time": "10:00",
        "status": "completed",
        "timerEnd": None,
        "serviceKey": "balayage",
        "suggestedRebook": "Mar 26, 10:00 AM",
    },
    {
        "id": 1733140000001,
        "name": "Bea",
        "formula": "",
        "notes": "trim",
        "date": "2025-01-02",
        "time": "11:00",
        "status": "booked",
    },
]


def test_local_storage_persists_to_file(tmp_path):
    path = tmp_path / "nested" / "device.json"
    storage = LocalStorage(path)
    storage.set_item("greeting", "hello")
    storage.set_item("drop", "me")
    storage.remove_item("drop")

    reopened = LocalStorage(path)
    assert reopened.get_item("greeting") == "hello"
    assert reopened.get_item("drop") is None


def test_corrupt_file_starts_empty(tmp_path):
    path = tmp_path / "device.json"
    path.write_text("{not json", encoding="utf-8")
    assert LocalStorage(path).keys() == []


def test_legacy_array_is_migrated():
    storage = LocalStorage()
    storage.set_item(APPOINTMENTS_STORAGE_KEY, json.dumps(LEGACY_BLOB))
    repository = AppointmentRepository(storage)

    appointments = repository.load()

    assert [a.id for a in appointments] == ["1733140000000", "1733140000001"]
    assert appointments[0].service_key == "balayage"
    assert appointments[0].suggested_rebook == "Mar 26, 10:00 AM"
    assert appointments[1].timer_end is None

    repository.save(appointments)
    saved = json.loads(storage.get_item(APPOINTMENTS_STORAGE_KEY))
    assert saved["schema_version"] == 2
    assert saved["appointments"][0]["service_key"] == "balayage"


def test_legacy_timer_is_converted_to_local_time():
    blob = [dict(LEGACY_BLOB[1], timerEnd="2025-01-02T11:30:00.000Z")]
    storage = LocalStorage()
    storage.set_item(APPOINTMENTS_STORAGE_KEY, json.dumps(blob))

    appointment = AppointmentRepository(storage).load()[0]
    assert appointment.timer_end is not None
    assert appointment.timer_end.tzinfo is None


def test_unreadable_blob_loads_empty():
    storage = LocalStorage()
    storage.set_item(APPOINTMENTS_STORAGE_KEY, "[[[")
    assert AppointmentRepository(storage).load() == []

    storage.set_item(APPOINTMENTS_STORAGE_KEY, json.dumps({"unexpected": True}))
    assert AppointmentRepository(storage).load() == []


def test_bad_entries_are_skipped():
    storage = LocalStorage()
    storage.set_item(APPOINTMENTS_STORAGE_KEY, json.dumps({
        "schema_version": 2,
        "appointments": [{"id": "x"}, dict(LEGACY_BLOB[1], id="APT-1")],
    }))
    assert [a.id for a in AppointmentRepository(storage).load()] == ["APT-1"]


def test_session_cache():
    storage = LocalStorage()
    cache = SessionCache(storage)

    assert cache.is_pro() is False
    cache.set_pro(True)
    cache.remember_email("stylist@example.com")
    assert storage.get_item(PRO_STATUS_STORAGE_KEY) == "true"
    assert cache.cached_email() == "stylist@example.com"

    cache.clear()
    assert cache.is_pro() is False
    assert cache.cached_email() is None
