from typing import Optional

from stylegenie.config.business_rules import EMAIL_STORAGE_KEY, PRO_STATUS_STORAGE_KEY
from stylegenie.storage.local_storage import LocalStorage


class SessionCache:
    """Display-only session state kept on the device (never used for auth)"""

    def __init__(self, storage: LocalStorage):
        self.storage = storage

    def is_pro(self) -> bool:
        return self.storage.get_item(PRO_STATUS_STORAGE_KEY) == "true"

    def set_pro(self, value: bool) -> None:
        if value:
            self.storage.set_item(PRO_STATUS_STORAGE_KEY, "true")
        else:
            self.storage.remove_item(PRO_STATUS_STORAGE_KEY)

    def cached_email(self) -> Optional[str]:
        return self.storage.get_item(EMAIL_STORAGE_KEY)

    def remember_email(self, email: str) -> None:
        self.storage.set_item(EMAIL_STORAGE_KEY, email)

    def clear(self) -> None:
        """Logout: forget the display email and the pro flag"""
        self.storage.remove_item(EMAIL_STORAGE_KEY)
        self.storage.remove_item(PRO_STATUS_STORAGE_KEY)
