# ============================================================================
# src/prescription_sync/config/logging_config.py
# ============================================================================
"""
Logging Settings
- Log level
- Output format
"""

from pathlib import Path
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings


class LoggingSettings(BaseSettings):
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level"
    )
    LOG_FORMAT_JSON: bool = Field(
        default=False,
        description="Emit JSON lines instead of plain text"
    )
    LOG_FILE: Optional[Path] = Field(
        default=None,
        description="Optional log file in addition to stdout"
    )


logging_settings = LoggingSettings()
