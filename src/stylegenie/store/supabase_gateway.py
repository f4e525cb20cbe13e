import httpx
from datetime import timezone
from typing import Any, Dict, Optional, Type, TypeVar
from loguru import logger
from pydantic import BaseModel, ValidationError as ModelValidationError

from stylegenie.config.settings import Settings
from stylegenie.store.gateway import StoreGateway
from stylegenie.store.models import ClientRecord, ConsultationCreate, ConsultationRecord
from stylegenie.utils.errors import StoreError

CONSULTATION_COLUMNS = (
    "id,user_email,client_id,client_name,client_phone,client_notes,hair_history,"
    "products_used,lifestyle_notes,extra_notes,hair_goals,ai_summary,visit_date,created_at"
)

RecordT = TypeVar("RecordT", bound=BaseModel)


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so an ilike filter is an exact, case-insensitive match"""
    return value.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')


class SupabaseGateway(StoreGateway):
    """Store gateway over the hosted PostgREST interface"""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        headers = {
            "apikey": settings.SUPABASE_ANON_KEY,
            "Authorization": f"Bearer {settings.SUPABASE_ACCESS_TOKEN or settings.SUPABASE_ANON_KEY}",
            "Content-Type": "application/json",
        }
        self.client = httpx.AsyncClient(
            base_url=settings.SUPABASE_URL.rstrip('/'),
            headers=headers,
            timeout=settings.STORE_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def current_user_email(self) -> str:
        if not self.settings.SUPABASE_ACCESS_TOKEN:
            raise StoreError("No logged-in user email found. Please log in again.")
        data = await self._request("GET", "/auth/v1/user")
        email = data.get("email") if isinstance(data, dict) else None
        if not email:
            raise StoreError("No logged-in user email found. Please log in again.")
        return email

    async def find_client_by_name(self, owner: str, name: str) -> Optional[ClientRecord]:
        rows = await self._request("GET", "/rest/v1/clients", params={
            "select": "*",
            "user_email": f"eq.{owner}",
            "name": f"ilike.{escape_like(name.strip())}",
            "limit": "1",
        })
        return self._first(rows, ClientRecord, "client lookup")

    async def insert_client(self, owner: str, name: str, phone: Optional[str] = None,
                            email: Optional[str] = None, notes: Optional[str] = None) -> ClientRecord:
        rows = await self._request(
            "POST", "/rest/v1/clients",
            json=[{"user_email": owner, "name": name, "phone": phone, "email": email, "notes": notes}],
            headers={"Prefer": "return=representation"},
        )
        logger.info(f"Client created for {owner}")
        return self._record(ClientRecord, self._single(rows, "client insert"), "client insert")

    async def update_client(self, client_id: str, fields: Dict[str, Any]) -> ClientRecord:
        rows = await self._request(
            "PATCH", "/rest/v1/clients",
            params={"id": f"eq.{client_id}"},
            json=fields,
            headers={"Prefer": "return=representation"},
        )
        return self._record(ClientRecord, self._single(rows, "client update"), "client update")

    async def latest_consultation(self, owner: str, client_id: str) -> Optional[ConsultationRecord]:
        rows = await self._request("GET", "/rest/v1/consultations", params={
            "select": CONSULTATION_COLUMNS,
            "user_email": f"eq.{owner}",
            "client_id": f"eq.{client_id}",
            "order": "visit_date.desc,created_at.desc",
            "limit": "1",
        })
        return self._first(rows, ConsultationRecord, "consultation lookup")

    async def insert_consultation(self, data: ConsultationCreate) -> ConsultationRecord:
        # timestamptz columns read an offset-less literal as UTC; naive times are local
        visit_date = data.visit_date.astimezone(timezone.utc)
        payload = data.model_copy(update={"visit_date": visit_date}).model_dump(mode="json")
        rows = await self._request(
            "POST", "/rest/v1/consultations",
            json=[payload],
            headers={"Prefer": "return=representation"},
        )
        return self._record(ConsultationRecord, self._single(rows, "consultation insert"), "consultation insert")

    async def health_check(self) -> Dict[str, Any]:
        try:
            response = await self.client.get("/rest/v1/", timeout=5.0)
            return {
                "healthy": response.status_code < 500,
                "status_code": response.status_code,
                "response_time": f"{response.elapsed.total_seconds():.3f}s"
            }
        except httpx.HTTPError as e:
            return {"healthy": False, "error": str(e)}

    async def close(self):
        await self.client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        """Single attempt; any failure becomes a StoreError"""
        try:
            response = await self.client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Store {method} {path} failed: {e}")
            raise StoreError(f"Store request failed: {e}") from e

        if response.status_code >= 400:
            message = self._error_message(response)
            logger.error(f"Store {method} {path} returned {response.status_code}: {message}")
            raise StoreError(message, {"status_code": response.status_code})

        try:
            return response.json()
        except ValueError as e:
            raise StoreError(f"Malformed store response from {path}") from e

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text[:200] or f"Store returned {response.status_code}"
        if isinstance(body, dict):
            return body.get("message") or body.get("msg") or body.get("error") or str(body)[:200]
        return str(body)[:200]

    @staticmethod
    def _single(rows: Any, operation: str) -> Dict[str, Any]:
        if not isinstance(rows, list) or not rows:
            raise StoreError(f"Empty response for {operation}")
        return rows[0]

    @staticmethod
    def _record(model: Type[RecordT], row: Any, operation: str) -> RecordT:
        if not isinstance(row, dict):
            raise StoreError(f"Malformed row in {operation} response")
        try:
            return model(**row)
        except ModelValidationError as e:
            logger.error(f"Store {operation} returned an unexpected row: {e}")
            raise StoreError(f"Malformed row in {operation} response") from e

    def _first(self, rows: Any, model: Type[RecordT], operation: str) -> Optional[RecordT]:
        """First row of a filtered read, or None when nothing matched"""
        if not isinstance(rows, list):
            raise StoreError(f"Malformed {operation} response")
        return self._record(model, rows[0], operation) if rows else None
