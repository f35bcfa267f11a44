from pydantic_settings import BaseSettings
from dotenv import load_dotenv
from pathlib import Path
import logging

_logger = logging.getLogger(__name__)

# Look for .env in the project root (parent of the flashcards package)
_project_dir = Path(__file__).parent.parent.parent
_env_path = _project_dir / ".env"

if _env_path.exists():
    load_dotenv(_env_path, override=False)
    _logger.info(f"Loaded .env file from: {_env_path}")
else:
    # Fallback to current directory
    _current_env = Path(".env")
    if _current_env.exists():
        load_dotenv(_current_env, override=False)
        _logger.info(f"Loaded .env file from: {_current_env.absolute()}")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = ""

    # API
    api_v1_prefix: str = "/api"

    # CORS
    cors_origins: list[str] = ["*"]

    # Runtime
    environment: str = "production"
    log_level: str = "INFO"

    # OpenRouter chat-completion gateway
    openrouter_api_key: str = ""
    openrouter_api_url: str = "https://openrouter.ai/api/v1"
    openrouter_model: str = "openai/gpt-4o-mini"
    openrouter_timeout_seconds: float = 60.0
    openrouter_temperature: float = 0.3
    openrouter_max_tokens: int = 2000
    # Serve deterministic proposals instead of calling the gateway
    openrouter_mock_enabled: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in ("development", "dev", "local")

    @property
    def sqlalchemy_database_url(self) -> str:
        # SQLAlchemy prefers postgresql:// over postgres://
        if self.database_url.startswith("postgres://"):
            return self.database_url.replace("postgres://", "postgresql://", 1)
        return self.database_url


# Create settings instance
settings = Settings()

# Validate required DATABASE_URL
if not settings.database_url:
    raise ValueError("DATABASE_URL environment variable is required")
