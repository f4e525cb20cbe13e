"""
Contract of the remote data service the client memory workflow depends on.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from stylegenie.store.models import ClientRecord, ConsultationCreate, ConsultationRecord


class StoreGateway(ABC):
    """Async access to the `clients` and `consultations` collections.

    Every method raises ``StoreError`` when the underlying call fails.
    Lookups return ``None`` when nothing matches; absence is not a fault.
    """

    @abstractmethod
    async def current_user_email(self) -> str:
        """Email of the logged-in practitioner (the owner scope)."""

    @abstractmethod
    async def find_client_by_name(self, owner: str, name: str) -> Optional[ClientRecord]:
        """Case-insensitive exact name match within the owner's clients."""

    @abstractmethod
    async def insert_client(
        self,
        owner: str,
        name: str,
        phone: Optional[str] = None,
        email: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> ClientRecord:
        ...

    @abstractmethod
    async def update_client(self, client_id: str, fields: Dict[str, Any]) -> ClientRecord:
        ...

    @abstractmethod
    async def latest_consultation(self, owner: str, client_id: str) -> Optional[ConsultationRecord]:
        """Most recent visit: visit_date desc, then created_at desc."""

    @abstractmethod
    async def insert_consultation(self, data: ConsultationCreate) -> ConsultationRecord:
        ...

    async def health_check(self) -> Dict[str, Any]:
        return {"healthy": True}

    async def close(self):
        """Release any held connections."""
