from __future__ import annotations

from noteserver.graphql.gateway import GraphQLSpec

from .routes import RouteEntry, RouteTable


HOME_PATH = "/"
NOTES_PATH = "/notes"
NOTE_PATH = "/note/:id"
LOGIN_PATH = "/login"
SIGNUP_PATH = "/signup"

NOT_FOUND_VIEW = "views/not_found.html"


NOTES_QUERY = """
query Notes {
  notes {
    id
    name
  }
}
"""

NOTE_QUERY = """
query Note($id: ID!) {
  note(id: $id) {
    id
    name
  }
}
"""


def notes_page_data(data: dict) -> dict:
    notes = data.get("notes") or []
    return {"notes": notes, "count": len(notes)}


def note_page_data(data: dict) -> dict:
    return {"note": data["note"]}


def default_route_table() -> RouteTable:
    return RouteTable(
        [
            RouteEntry(path=HOME_PATH, view="views/home.html"),
            RouteEntry(
                path=NOTES_PATH,
                view="views/notes.html",
                requires_auth=True,
                graphql=GraphQLSpec(query=NOTES_QUERY, map_resp=notes_page_data),
            ),
            RouteEntry(
                path=NOTE_PATH,
                view="views/note.html",
                requires_auth=True,
                graphql=GraphQLSpec(
                    query=NOTE_QUERY,
                    map_params=lambda params: {"id": params["id"]},
                    map_resp=note_page_data,
                ),
            ),
            RouteEntry(path=LOGIN_PATH, view="views/login.html"),
            RouteEntry(path=SIGNUP_PATH, view="views/signup.html"),
        ]
    )
