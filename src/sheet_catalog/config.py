"""
Configuration management for the sheet catalog build.

Loads settings from environment variables (and a project-root .env file)
with sensible defaults. SHEET_ID is the only required setting.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings

from .errors import ConfigError

# Load .env file from project root
_project_root = Path(__file__).parent.parent.parent
_env_file = _project_root / '.env'
if _env_file.exists():
    load_dotenv(_env_file)

# gviz export honours the sheet name; /export?format=csv often returns the first tab only
DEFAULT_CSV_URL_TEMPLATE = (
    'https://docs.google.com/spreadsheets/d/{sheet_id}/gviz/tq?tqx=out:csv&sheet={sheet}'
)


class Settings(BaseSettings):
    """Build settings loaded from environment variables."""

    # Source
    SHEET_ID: str = Field(min_length=1)
    SHEET_CSV_URL_TEMPLATE: str = DEFAULT_CSV_URL_TEMPLATE
    HTTP_TIMEOUT_SECONDS: float = Field(default=30, ge=1, le=300)

    # Output
    OUTPUT_PATH: str = 'data.json'

    # Parsing policy
    ALLOW_EMPTY_TABLES: bool = False
    CASE_SENSITIVE_HEADERS: bool = False
    REQUIRE_COMPANY_ID: bool = True

    # Logging
    LOG_LEVEL: str = 'INFO'
    LOG_JSON: bool = False


def load_settings(**overrides: Any) -> Settings:
    """
    Build Settings, converting validation failures into ConfigError.

    Args:
        **overrides: Values that take precedence over the environment
            (e.g. from command-line flags). None values are ignored.

    Raises:
        ConfigError: If a required setting is absent or a value is invalid
    """
    values = {k: v for k, v in overrides.items() if v is not None}
    try:
        return Settings(**values)
    except ValidationError as e:
        keys = sorted({str(err['loc'][0]) for err in e.errors() if err.get('loc')})
        # An empty SHEET_ID= line in .env counts as absent
        missing = [
            str(err['loc'][0])
            for err in e.errors()
            if err.get('type') in ('missing', 'string_too_short')
        ]
        if missing:
            message = f"Missing required configuration: {', '.join(missing)}"
        else:
            message = f"Invalid configuration: {', '.join(keys)}"
        raise ConfigError(message, context={'keys': keys}) from e


@lru_cache
def get_settings() -> Settings:
    """Cached settings singleton."""
    return load_settings()
