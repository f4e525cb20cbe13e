from typing import Dict
from datetime import datetime
from pathlib import Path
import psutil
from loguru import logger

from stylegenie.billing.checkout import CheckoutClient
from stylegenie.config.settings import Settings
from stylegenie.store.gateway import StoreGateway


class HealthChecker:
    """Health of the store, the checkout relay and the storage volume"""

    def __init__(self, settings: Settings, gateway: StoreGateway, checkout: CheckoutClient):
        self.settings = settings
        self.dependencies = [
            ("store", gateway.health_check),
            ("checkout_relay", checkout.health_check),
            ("disk_space", self._check_disk_space),
        ]

    async def check_health(self) -> Dict:
        """Check health of all dependencies"""
        health_status = {
            "status": "healthy",
            "timestamp": datetime.now().isoformat(),
            "service": self.settings.APP_NAME,
            "dependencies": {}
        }

        for dep_name, check_func in self.dependencies:
            try:
                result = check_func()
                if hasattr(result, "__await__"):
                    result = await result
                health_status["dependencies"][dep_name] = result

                if not result.get("healthy", False) and health_status["status"] == "healthy":
                    health_status["status"] = "degraded"

            except Exception as e:
                logger.error(f"Health check failed for {dep_name}: {e}")
                health_status["dependencies"][dep_name] = {
                    "healthy": False,
                    "error": str(e),
                    "timestamp": datetime.now().isoformat()
                }
                health_status["status"] = "unhealthy"

        return health_status

    def _check_disk_space(self) -> Dict:
        """Free space on the volume holding device storage"""
        data_dir = Path(self.settings.DATA_DIR)
        target = data_dir if data_dir.exists() else Path.cwd()
        disk = psutil.disk_usage(str(target))
        free_percent = (disk.free / disk.total) * 100

        return {
            "healthy": free_percent > 10,
            "total_gb": round(disk.total / (1024**3), 2),
            "free_gb": round(disk.free / (1024**3), 2),
            "free_percent": round(free_percent, 2)
        }
