from functools import lru_cache
from pydantic_settings import BaseSettings
import os


class Settings(BaseSettings):
    app_name: str = "Jobboard"
    backend_cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./jobboard.db")
    log_level: str = "INFO"

    page_size_default: int = 10
    page_size_max: int = 50
    cover_note_max_length: int = 1000
    message_max_length: int = 2000

    # Off keeps PATCH permissive: any status may overwrite any other.
    enforce_status_transitions: bool = False

    message_poll_interval_seconds: float = 30.0
    persona_store_path: str = os.path.join("~", ".jobboard", "persona.json")

    class Config:
        env_file = ".env"


@lru_cache()
def get_settings():
    return Settings()


settings = get_settings()
