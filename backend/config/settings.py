from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    supabase_url: str = ""
    supabase_key: str = ""
    cors_origins: list[str] = ["http://localhost:3000"]
    submit_rate_limit_max: int = 20
    submit_rate_limit_window_seconds: int = 3600
    sprint_cost: float = 10_000
    log_level: str = "INFO"

    class Config:
        env_file = ".env"

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)


@lru_cache
def get_settings() -> Settings:
    return Settings()
