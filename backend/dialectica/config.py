from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # OpenAI
    # Default empty string lets the app (and tests) start without .env;
    # /api/debate refuses to stream until it is set
    openai_api_key: str = ""
    openai_model: str = "gpt-3.5-turbo"
    openai_max_tokens: int = 2000
    openai_temperature: float = 0.7
    openai_base_url: str = "https://api.openai.com/v1"

    # SerpAPI (optional - without a key agents get a mock search result)
    serpapi_key: str = ""
    search_enabled: bool = True
    search_results_per_turn: int = 3
    judge_search_results: int = 2

    # Debate
    # Number of proponent/critic rounds before the judge runs (minimum 1)
    dialectica_turns: int = 3

    # Citation policy
    # False = repair missing/dangling [Sn] markers and keep going
    # True  = reject the turn (and end the debate) on any marker mismatch
    strict_citations: bool = False

    # Streaming
    # How often (seconds) the stream checks whether the client went away
    stream_poll_interval: float = 1.0

    # Server
    cors_origins: list[str] = ["*"]
    public_dir: str = "public"
    port: int = 3000
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env")


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
