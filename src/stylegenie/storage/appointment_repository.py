"""
Persistence of the full appointment list in device storage.

Stored shape (version 2):
    {"schema_version": 2, "appointments": [<appointment>, ...]}

Version 1 was an unversioned JSON array with camelCase keys and numeric
(creation-timestamp) ids; it is migrated forward on load.
"""

import json
from datetime import datetime
from typing import Any, Dict, List
from loguru import logger
from pydantic import ValidationError as ModelValidationError

from stylegenie.appointments.models import Appointment
from stylegenie.config.business_rules import APPOINTMENTS_SCHEMA_VERSION, APPOINTMENTS_STORAGE_KEY
from stylegenie.storage.local_storage import LocalStorage
from stylegenie.utils.date_time_parser import DateTimeParser
from stylegenie.utils.helpers import safe_json_dumps

LEGACY_KEYS = {
    'timerEnd': 'timer_end',
    'serviceKey': 'service_key',
    'suggestedRebook': 'suggested_rebook',
}


def _to_local_naive(value: Any) -> Any:
    """Legacy timers were stored as UTC ISO strings ('...Z')."""
    if not isinstance(value, str):
        return value
    moment = DateTimeParser.parse_timestamp(value)
    if moment is None:
        return None
    if moment.tzinfo is not None:
        moment = moment.astimezone().replace(tzinfo=None)
    return moment


def migrate_v1(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    migrated = []
    for item in items:
        if not isinstance(item, dict):
            continue
        record = {LEGACY_KEYS.get(key, key): value for key, value in item.items()}
        record['id'] = str(record.get('id', ''))
        record['timer_end'] = _to_local_naive(record.get('timer_end'))
        migrated.append(record)
    return migrated


MIGRATIONS = {
    1: migrate_v1,
}


class AppointmentRepository:
    """Loads and saves the appointment list as one blob."""

    def __init__(self, storage: LocalStorage, key: str = APPOINTMENTS_STORAGE_KEY):
        self.storage = storage
        self.key = key

    def load(self) -> List[Appointment]:
        raw = self.storage.get_item(self.key)
        if not raw:
            return []

        try:
            blob = json.loads(raw)
        except ValueError as e:
            logger.error(f"Failed to load saved appointments: {e}")
            return []

        version, items = self._unwrap(blob)
        if items is None:
            logger.error("Saved appointments have an unexpected shape; starting empty")
            return []

        if version > APPOINTMENTS_SCHEMA_VERSION:
            logger.warning(f"Saved appointments use newer schema v{version}; loading known fields only")
        for step in range(version, APPOINTMENTS_SCHEMA_VERSION):
            migrate = MIGRATIONS.get(step)
            if migrate is None:
                continue
            items = migrate(items)
            logger.info(f"Migrated saved appointments from schema v{step} to v{step + 1}")

        appointments = []
        for item in items:
            try:
                appointments.append(Appointment(**item))
            except (ModelValidationError, TypeError) as e:
                logger.warning(f"Skipping unreadable saved appointment: {e}")
        return appointments

    def save(self, appointments: List[Appointment]) -> None:
        blob = {
            'schema_version': APPOINTMENTS_SCHEMA_VERSION,
            'saved_at': datetime.now(),
            'appointments': [appointment.model_dump(mode='json') for appointment in appointments],
        }
        self.storage.set_item(self.key, safe_json_dumps(blob))

    @staticmethod
    def _unwrap(blob: Any):
        if isinstance(blob, list):
            return 1, blob
        if isinstance(blob, dict) and isinstance(blob.get('appointments'), list):
            return int(blob.get('schema_version', 1)), blob['appointments']
        return 0, None
