from pydantic_settings import BaseSettings, SettingsConfigDict


class CeleryConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="CELERY_")

    broker_url: str = "redis://localhost:6379/0"


class SchedulerConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SCHEDULER_")

    log_level: str = "INFO"
    timezone: str = "Africa/Accra"
    devotional_hour: int = 6
    devotional_minute: int = 0
    event_reminder_hour: int = 8
    event_reminder_minute: int = 0
    user_page_size: int = 500
