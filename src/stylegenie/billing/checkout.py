import httpx
from typing import Any, Dict, Optional
from loguru import logger

from stylegenie.config.settings import Settings
from stylegenie.storage.session_cache import SessionCache
from stylegenie.utils.errors import ExternalServiceError


class CheckoutClient:
    """Client for the checkout relay that opens payment sessions"""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.base_url = settings.CHECKOUT_RELAY_URL.rstrip('/')
        self.client = httpx.AsyncClient(
            timeout=settings.CHECKOUT_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def create_checkout_session(self) -> str:
        """Ask the relay for a session and return the redirect URL (single attempt)"""
        url = f"{self.base_url}{self.settings.CHECKOUT_ENDPOINT}"
        try:
            response = await self.client.post(url, json={}, headers={"Content-Type": "application/json"})
        except httpx.HTTPError as e:
            logger.error(f"Error starting checkout: {e}")
            raise ExternalServiceError("Could not reach the checkout server") from e

        if not response.is_success:
            logger.error(f"Checkout failed. Status: {response.status_code} Body: {response.text[:200]}")
            raise ExternalServiceError(
                f"Checkout server returned {response.status_code}",
                {"status_code": response.status_code},
            )

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Checkout returned a non-JSON body: {response.text[:200]}")
            raise ExternalServiceError("Malformed checkout response") from e

        checkout_url = data.get("url") if isinstance(data, dict) else None
        if not checkout_url:
            logger.error(f"No checkout URL returned from server: {data}")
            raise ExternalServiceError("No checkout URL returned from server")

        logger.info("Checkout session created")
        return checkout_url

    @staticmethod
    def mark_upgraded(session_cache: SessionCache) -> None:
        """Called when the provider redirects back with success"""
        session_cache.set_pro(True)
        logger.info("Pro status activated")

    async def health_check(self) -> Dict[str, Any]:
        try:
            response = await self.client.get(self.base_url, timeout=5.0)
            return {
                "healthy": response.status_code < 500,
                "status_code": response.status_code,
                "response_time": f"{response.elapsed.total_seconds():.3f}s"
            }
        except httpx.HTTPError as e:
            return {
                "healthy": False,
                "error": str(e)
            }

    async def close(self):
        await self.client.aclose()
