"""Configuration module for the note janitor."""

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from the project root .env file.
# Anchored to __file__ so it works regardless of the process CWD.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
load_dotenv(_PROJECT_ROOT / ".env")

# User-level config, shared by every notes directory
_USER_ENV = Path.home() / ".note-janitor" / ".env"
load_dotenv(_USER_ENV)


logger = logging.getLogger(__name__)

_TRUE_VALUES = ("true", "1", "yes")


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in _TRUE_VALUES


class JanitorConfig(BaseModel):
    """Configuration for janitor runs."""

    # Root of the notes tree to tidy
    notes_dir: Path = Field(
        default_factory=lambda: Path(os.getenv("NOTE_JANITOR_NOTES_DIR", "."))
    )
    # File extension identifying notes
    extension: str = Field(
        default_factory=lambda: os.getenv("NOTE_JANITOR_EXTENSION", ".md")
    )
    # Keep the note extension in generated reference targets
    include_extensions: bool = Field(
        default_factory=lambda: _env_flag("NOTE_JANITOR_INCLUDE_EXTENSIONS", "false")
    )
    generate_headings: bool = Field(
        default_factory=lambda: _env_flag("NOTE_JANITOR_GENERATE_HEADINGS", "true")
    )
    generate_references: bool = Field(
        default_factory=lambda: _env_flag("NOTE_JANITOR_GENERATE_REFERENCES", "true")
    )
    # Raise on a damaged //begin ... //end block instead of working around it
    strict_blocks: bool = Field(
        default_factory=lambda: _env_flag("NOTE_JANITOR_STRICT_BLOCKS", "false")
    )
    log_level: str = Field(
        default_factory=lambda: os.getenv("NOTE_JANITOR_LOG_LEVEL", "INFO").upper()
    )
    # When set, logs are also written to a rotating file in this directory
    log_dir: Optional[Path] = Field(
        default_factory=lambda: (
            Path(os.getenv("NOTE_JANITOR_LOG_DIR"))
            if os.getenv("NOTE_JANITOR_LOG_DIR")
            else None
        )
    )

    model_config = {"validate_assignment": True}

    @field_validator("extension")
    @classmethod
    def _validate_extension(cls, value: str) -> str:
        if not value.startswith(".") or len(value) < 2:
            raise ValueError(f"extension must look like '.md', got {value!r}")
        return value.lower()

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        value = value.upper()
        if value not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level {value!r}")
        return value

    def get_notes_dir(self) -> Path:
        """Get the absolute notes directory."""
        return self.notes_dir.expanduser().resolve()


# Create a global config instance
config = JanitorConfig()
