from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from .models import Note
from .repository import NotesRepository


logger = logging.getLogger(__name__)


DEFAULT_NOTES = [
    {"id": "123", "name": "Medor"},
    {"id": "456", "name": "Max"},
]


def ensure_default_notes(db: Session) -> None:
    """Seed the notes table when it is empty; existing rows are left alone."""
    repo = NotesRepository(db)
    if repo.count():
        return
    for cfg in DEFAULT_NOTES:
        repo.create(Note(id=cfg["id"], name=cfg["name"]))
        logger.info("Seeded note '%s'", cfg["id"])
