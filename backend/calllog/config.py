from pathlib import Path
from typing import List
from urllib.parse import quote_plus

from pydantic_settings import BaseSettings

# Fixed ceiling for JSON and form-encoded request bodies
MAX_BODY_BYTES = 10 * 1024 * 1024


class Settings(BaseSettings):
    host: str = "0.0.0.0"
    port: int = 3000

    # Full connection string, e.g. postgresql+asyncpg://user:pw@host/db.
    # When empty the URL is built from the postgres_* fields below.
    database_url: str = ""

    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_db: str = "calllog"
    postgres_user: str = "calllog"
    postgres_password: str = ""

    # Pre-built frontend bundle served for every non-API path
    static_dir: Path = Path("public")

    cors_origins: List[str] = ["*"]

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def sqlalchemy_url(self) -> str:
        if self.database_url:
            return self.database_url
        password = quote_plus(self.postgres_password)
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )


settings = Settings()
