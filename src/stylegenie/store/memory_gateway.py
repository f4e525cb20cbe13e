"""
In-process store used for local development and tests.
Mirrors the hosted service's rules: one client per (owner, lower(name)) and
recency ordering on visit_date then created_at.
"""

import uuid
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple
from loguru import logger

from stylegenie.store.gateway import StoreGateway
from stylegenie.store.models import ClientRecord, ConsultationCreate, ConsultationRecord
from stylegenie.utils.errors import StoreError


class InMemoryStoreGateway(StoreGateway):
    """Dictionary-backed implementation of the store contract."""

    CLIENT_FIELDS = ('name', 'phone', 'email', 'notes')

    def __init__(self, owner_email: Optional[str] = "stylist@example.com",
                 clock: Callable[[], datetime] = datetime.now):
        self.owner_email = owner_email
        self.clock = clock
        self.clients: Dict[str, ClientRecord] = {}
        self.consultations: List[Tuple[int, ConsultationRecord]] = []
        self.writes: List[Tuple[str, str]] = []
        self._sequence = 0

    async def current_user_email(self) -> str:
        if not self.owner_email:
            raise StoreError("No logged-in user email found. Please log in again.")
        return self.owner_email

    async def find_client_by_name(self, owner: str, name: str) -> Optional[ClientRecord]:
        wanted = name.strip().lower()
        for client in self.clients.values():
            if client.user_email == owner and client.name.lower() == wanted:
                return client.model_copy()
        return None

    async def insert_client(self, owner: str, name: str, phone: Optional[str] = None,
                            email: Optional[str] = None, notes: Optional[str] = None) -> ClientRecord:
        if await self.find_client_by_name(owner, name) is not None:
            raise StoreError(f"duplicate key value violates unique constraint for client '{name}'")

        client = ClientRecord(
            id=str(uuid.uuid4()),
            user_email=owner,
            name=name,
            phone=phone,
            email=email,
            notes=notes,
            created_at=self.clock(),
        )
        self.clients[client.id] = client
        self.writes.append(('insert_client', client.id))
        logger.debug(f"Inserted client {client.id}")
        return client.model_copy()

    async def update_client(self, client_id: str, fields: Dict[str, Any]) -> ClientRecord:
        client = self.clients.get(client_id)
        if client is None:
            raise StoreError(f"Client {client_id} not found")

        unknown = set(fields) - set(self.CLIENT_FIELDS)
        if unknown:
            raise StoreError(f"Unknown client columns: {', '.join(sorted(unknown))}")

        updated = client.model_copy(update=fields)
        self.clients[client_id] = updated
        self.writes.append(('update_client', client_id))
        return updated.model_copy()

    async def latest_consultation(self, owner: str, client_id: str) -> Optional[ConsultationRecord]:
        matches = [
            (seq, record) for seq, record in self.consultations
            if record.user_email == owner and record.client_id == client_id
        ]
        if not matches:
            return None

        def recency(entry):
            seq, record = entry
            return (record.visit_date or datetime.min, record.created_at or datetime.min, seq)

        _, latest = max(matches, key=recency)
        return latest.model_copy()

    async def insert_consultation(self, data: ConsultationCreate) -> ConsultationRecord:
        if data.client_id not in self.clients:
            raise StoreError(f"Client {data.client_id} not found")
        for _, record in self.consultations:
            if (record.user_email, record.client_id, record.visit_date) == \
                    (data.user_email, data.client_id, data.visit_date):
                raise StoreError("A consultation already exists for this client at this time")

        self._sequence += 1
        record = ConsultationRecord(
            **data.model_dump(),
            id=str(uuid.uuid4()),
            created_at=self.clock(),
        )
        self.consultations.append((self._sequence, record))
        self.writes.append(('insert_consultation', record.id))
        return record.model_copy()
