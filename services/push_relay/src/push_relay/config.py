from pydantic_settings import BaseSettings, SettingsConfigDict


class RelayConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PUSH_RELAY_")

    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"
    # Development mode: error responses include the exception message.
    debug: bool = False
