"""
Runtime configuration.

Settings are read from environment variables prefixed with DECIDUOUS_
and from a `.env` file in the working directory:

- DECIDUOUS_THEME: style theme used when a document does not pick one
- DECIDUOUS_ENGINE: Graphviz layout program (dot, neato, ...)
- DECIDUOUS_PNG_DPI: resolution of exported PNG images
- DECIDUOUS_LOG_LEVEL: logging level for the command line tool
- DECIDUOUS_WATCH_INTERVAL: seconds between checks in `deciduous watch`
"""

from functools import lru_cache
from typing import Literal
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration for compiling and rendering threat trees."""

    theme: Literal['default', 'classic', 'accessible'] = 'default'
    engine: str = 'dot'
    # Twice the Graphviz default of 72 dpi.
    png_dpi: int = Field(default=144, gt=0)
    log_level: str = 'WARNING'
    watch_interval: float = Field(default=1.0, gt=0)

    model_config = SettingsConfigDict(
        env_prefix='DECIDUOUS_',
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
