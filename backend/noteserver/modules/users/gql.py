from __future__ import annotations

from noteserver.graphql.guards import db_from, protect, session_from
from noteserver.graphql.registry import SchemaFragment
from .repository import UsersRepository


TYPE_DEFS = """
type User {
  id: ID!
  username: String!
}

extend type Query {
  me: User
}
"""


@protect
def resolve_me(info):
    user = session_from(info).current_user()
    db = db_from(info)
    if db is None:
        return user
    record = UsersRepository(db).get_by_id(user["id"])
    return record.to_session() if record else None


fragment = SchemaFragment(name="users", type_defs=TYPE_DEFS, resolvers={"me": resolve_me})
