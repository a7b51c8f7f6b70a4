import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field


def _split(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


class Settings(BaseModel):
    """Runtime configuration, built once at startup and passed down explicitly."""

    # ---- AI recommendations (OpenAI-compatible chat completions)
    ai_api_key: Optional[str] = None
    ai_base_url: str = "https://openrouter.ai/api/v1"
    ai_model: str = "meta-llama/llama-3.3-8b-instruct:free"
    ai_temperature: float = 0.3
    ai_max_tokens: int = 1500
    ai_timeout: float = 25.0
    app_url: str = "http://localhost:5000"

    # ---- signal providers
    ssl_labs_url: str = "https://api.ssllabs.com/api/v3"
    ssl_timeout: float = 30.0
    headers_timeout: float = 10.0
    max_redirects: int = 5
    safe_browsing_api_key: Optional[str] = None
    safe_browsing_timeout: float = 5.0

    # ---- app
    cors_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"]
    )
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        env = os.environ
        defaults = cls()
        return cls(
            ai_api_key=env.get("OPENROUTER_API_KEY") or None,
            ai_base_url=env.get("AI_BASE_URL", defaults.ai_base_url),
            ai_model=env.get("AI_MODEL", defaults.ai_model),
            ai_temperature=env.get("AI_TEMPERATURE", defaults.ai_temperature),
            ai_max_tokens=env.get("AI_MAX_TOKENS", defaults.ai_max_tokens),
            ai_timeout=env.get("AI_TIMEOUT", defaults.ai_timeout),
            app_url=env.get("APP_URL", defaults.app_url),
            ssl_labs_url=env.get("SSL_LABS_URL", defaults.ssl_labs_url),
            ssl_timeout=env.get("SSL_TIMEOUT", defaults.ssl_timeout),
            headers_timeout=env.get("HEADERS_TIMEOUT", defaults.headers_timeout),
            max_redirects=env.get("MAX_REDIRECTS", defaults.max_redirects),
            safe_browsing_api_key=env.get("GOOGLE_SAFE_BROWSING_API_KEY") or None,
            safe_browsing_timeout=env.get("SAFE_BROWSING_TIMEOUT", defaults.safe_browsing_timeout),
            cors_origins=_split(env["CORS_ORIGINS"]) if env.get("CORS_ORIGINS") else defaults.cors_origins,
            log_level=env.get("LOG_LEVEL", defaults.log_level).upper(),
        )
