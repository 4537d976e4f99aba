"""Service layer for the note janitor."""

from note_janitor.services.janitor_service import (
    JanitorReport,
    JanitorResult,
    JanitorService,
)

__all__ = ["JanitorReport", "JanitorResult", "JanitorService"]
