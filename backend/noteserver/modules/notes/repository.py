from __future__ import annotations

from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .models import Note


class NotesRepository:
    def __init__(self, db: Session):
        self.db = db

    def list(self, limit: int = 100, offset: int = 0) -> list[Note]:
        stmt = select(Note).order_by(Note.created_at, Note.id).limit(limit).offset(offset)
        return list(self.db.scalars(stmt))

    def get(self, note_id: str) -> Optional[Note]:
        return self.db.get(Note, note_id)

    def count(self) -> int:
        return self.db.scalar(select(func.count()).select_from(Note)) or 0

    def create(self, note: Note) -> Note:
        self.db.add(note)
        self.db.commit()
        self.db.refresh(note)
        return note
