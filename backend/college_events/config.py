from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    data_path: Path = Path.home() / "CollegeEvents"
    session_ttl_seconds: int = 3600
    max_upload_bytes: int = 10 * 1024 * 1024  # 10 MiB
    min_password_length: int = 8
    api_prefix: str = "/api"
    host: str = "127.0.0.1"
    port: int = 5000

    @property
    def db_path(self) -> Path:
        return self.data_path / "db.sqlite"

    @property
    def upload_dir(self) -> Path:
        return self.data_path / "uploads"

    model_config = {"env_prefix": "EVENTS_"}


settings = Settings()
