"""
Core configuration settings for the rail control center service.
"""
from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API settings
    api_v1_prefix: str = "/api"
    project_name: str = "Rail Control Center"
    version: str = "0.1.0"

    # Remote AI scheduling model
    ai_model_endpoint: Optional[str] = None
    ai_model_api_key: Optional[str] = None
    ai_model_timeout_seconds: float = 10.0
    ai_model_max_retries: int = 0

    # Backend predictor used by the data management screen
    predictor_url: str = "http://localhost:5000/predict"
    predictor_timeout_seconds: float = 10.0

    # Synthetic recommendation settings
    eta_hour_rollover: bool = False
    random_seed: Optional[int] = None

    # Simulated dashboard metrics
    metrics_tick_seconds: float = 10.0
    realtime_metrics_enabled: bool = False

    debug: bool = False
    log_level: str = "INFO"

    model_config = ConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )


settings = Settings()
