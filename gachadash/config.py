from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


PLACEHOLDER_SUPABASE_URL = "https://your-project.supabase.co"
PLACEHOLDER_SUPABASE_KEY = "your-anon-key-here"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file="gachadash/.env",
        env_file_encoding="utf-8",
        extra="allow",
    )
    # Application
    APP_NAME: str = "Gacha Admin Dashboard API"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Upstream purchase / leaderboard / report API
    GACHA_API_BASE_URL: str = "https://api-pull.gacha.game/api"
    PACK_PURCHASES_PATH: str = "/admin/pack-purchases"
    ADMIN_PASSWORD: str = ""
    API_TIMEOUT_SECONDS: float = 10.0
    REPORT_ID: str = "dd3b02be-f916-4857-8103-e263d01c3248"
    REPORT_TIMEOUT_SECONDS: float = 30.0
    REPORT_RETRIES: int = 1
    REPORT_RETRY_DELAY_SECONDS: float = 2.0

    # Mock fallback (used when the purchase API is unreachable)
    MOCK_FALLBACK_ENABLED: bool = True
    MOCK_TRANSACTION_COUNT: int = 50
    MOCK_HISTORY_DAYS: int = 90
    MOCK_FREE_PACK_PROBABILITY: float = 0.3

    # Hosted store (Supabase PostgREST)
    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: str = ""
    SUPABASE_TIMEOUT_SECONDS: float = 10.0

    # Redis cache
    REDIS_ENABLED: bool = False
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: Optional[str] = None
    LEADERBOARD_CACHE_TTL_SECONDS: int = 60
    REPORT_CACHE_TTL_SECONDS: int = 300

    # Presentation
    TIMEZONE: str = "UTC"
    LEADERBOARD_TOP_N: int = 50
    DEFAULT_WALLET: str = "0xfc006b59d81504832cfa4f3d40be17224663d4e9"
    DEFAULT_TAGS: List[str] = [
        "abstract farmer",
        "collectors",
        "rip packs",
        "outside abstract",
    ]

    @property
    def supabase_configured(self) -> bool:
        """True when both Supabase credentials are set to non-placeholder values"""

        url = self.SUPABASE_URL
        key = self.SUPABASE_ANON_KEY
        return bool(
            url
            and url != PLACEHOLDER_SUPABASE_URL
            and "placeholder" not in url
            and key
            and key != PLACEHOLDER_SUPABASE_KEY
            and "placeholder" not in key
        )

    @property
    def admin_password_status(self) -> str:
        if not self.ADMIN_PASSWORD:
            return "***missing***"
        return f"***set (length: {len(self.ADMIN_PASSWORD)})***"


settings = Settings()
