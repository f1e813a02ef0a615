from functools import lru_cache
from pathlib import Path
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

TREASURY_RATES_URL = (
    "https://api.fiscaldata.treasury.gov/services/api/fiscal_service"
    "/v1/accounting/od/rates_of_exchange"
)


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG, DATA_DIR, DB_FILENAME, CURRENCY_API_URL, DEFAULT_API_KEY).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "Purchase Transactions API"
    debug: bool = False
    log_level: Optional[str] = None  # e.g. WARNING; overrides debug
    version: str = "0.1.0"

    # Data & persistence
    data_dir: Path = Path("data")
    db_filename: str = "purchases.sqlite3"
    db_path: Optional[Path] = None  # derived if not provided

    # Treasury reporting rates of exchange
    currency_api_url: str = TREASURY_RATES_URL
    http_timeout_seconds: float = 10.0

    # Auth / CORS
    default_api_key: Optional[str] = None
    cors_allow_origins: List[str] = ["*"]

    def init_post_load(self) -> None:
        """Finalize derived fields and ensure directories exist."""
        if self.db_path is None:
            self.db_path = self.data_dir / self.db_filename
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        url = (self.currency_api_url or "").strip()
        if not url.startswith(("http://", "https://")):
            raise ValueError(
                f"currency_api_url must be an http(s) URL, got '{self.currency_api_url}'"
            )
        self.currency_api_url = url


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
