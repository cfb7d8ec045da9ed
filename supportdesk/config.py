"""
SupportDesk - Configuration Management
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings"""

    # FastAPI
    fastapi_env: str = "development"
    fastapi_host: str = "0.0.0.0"
    fastapi_port: int = 8000

    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: str = ""
    attachments_bucket: str = "ticket-attachments"
    max_attachment_bytes: int = 10 * 1024 * 1024

    # Authentication
    admin_api_key: str = ""
    admin_email_domain: str = "spybee.com.co"

    # Status synchronization
    status_update_timeout_seconds: float = 12.0
    refresh_delay_seconds: float = 1.0
    drag_grace_seconds: float = 0.5
    notification_history_size: int = 50

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False
    )

    @property
    def supabase_admin_key(self) -> str:
        """Service role key when configured, anon key otherwise"""
        return self.supabase_service_role_key or self.supabase_key


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
