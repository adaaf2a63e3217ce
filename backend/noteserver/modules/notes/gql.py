from __future__ import annotations

from noteserver.graphql.guards import db_from, protect
from noteserver.graphql.registry import SchemaFragment
from .repository import NotesRepository


TYPE_DEFS = """
type Note {
  id: ID!
  name: String
}

extend type Query {
  notes: [Note]
  note(id: ID!): Note
}
"""


@protect
def resolve_notes(info):
    return [note.to_dict() for note in NotesRepository(db_from(info)).list()]


@protect
def resolve_note(info, id: str):
    note = NotesRepository(db_from(info)).get(id)
    return note.to_dict() if note else None


fragment = SchemaFragment(
    name="notes",
    type_defs=TYPE_DEFS,
    resolvers={"notes": resolve_notes, "note": resolve_note},
)
