from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Database
    database_url: str = "postgresql://localhost:5432/trading_swarm"
    database_echo: bool = False
    
    # CORS
    cors_origins: list[str] = ["http://localhost:4000"]
    
    # Logging
    log_level: str = "INFO"
    
    # Pagination defaults
    default_page_size: int = 20
    max_page_size: int = 200
    recent_trades_limit: int = 10
    
    class Config:
        env_file = ".env"
        extra = "allow"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
