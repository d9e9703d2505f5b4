"""Configuration management using Pydantic Settings"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PESA_SHIELD_",
        extra="ignore",
    )

    # Local key-value storage for the behavior profile
    database_url: str = "sqlite:///./pesa_shield.db"
    profile_storage_key: str = "user_behavior_profile"

    # Service
    service_name: str = "pesa-shield"
    log_level: str = "INFO"
    timezone: str = "Africa/Dar_es_Salaam"

    # Risk engine
    max_recent_alerts: int = 50
    critical_risk_threshold: float = 0.95
    high_risk_threshold: float = 0.80
    medium_risk_threshold: float = 0.60

    # Skips device collection when set
    device_fingerprint_override: Optional[str] = None


settings = Settings()
