from urllib.parse import quote_plus

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PostgresConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="POSTGRES_")

    host: str = "localhost"
    port: int = 5432
    database: str = "church"
    user: str = "postgres"
    password: str = "postgres"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def dsn(self) -> str:
        return (
            f"postgresql://{quote_plus(self.user)}:{quote_plus(self.password)}"
            f"@{self.host}:{self.port}/{self.database}"
        )


class ExpoConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="EXPO_")

    push_url: str = "https://exp.host/--/api/v2/push/send"
    access_token: str | None = None
    timeout_seconds: float = 30.0
    max_batch_size: int = 100


class CleanupConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="TOKEN_CLEANUP_")

    max_workers: int = 8
