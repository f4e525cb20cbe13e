from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # App Settings
    APP_NAME: str = "StyleGenie Consultation Tracker"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    # Device storage
    DATA_DIR: str = "data"
    STORAGE_FILE: str = "local_storage.json"

    # Persistent store (hosted Postgres behind PostgREST)
    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: str = ""
    SUPABASE_ACCESS_TOKEN: str = ""
    STORE_TIMEOUT_SECONDS: float = 10.0

    # Checkout relay
    CHECKOUT_RELAY_URL: str = "http://localhost:4242"
    CHECKOUT_ENDPOINT: str = "/create-checkout-session"
    CHECKOUT_TIMEOUT_SECONDS: float = 15.0

    # Client memory
    PREFILL_DEBOUNCE_MS: int = 500
    PREFILL_MIN_CHARS: int = 2

    # Appointments
    SUMMARY_DELAY_MS: int = 600
    TIMER_TICK_SECONDS: float = 1.0

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"

    @property
    def store_configured(self) -> bool:
        return bool(self.SUPABASE_URL and self.SUPABASE_ANON_KEY)
