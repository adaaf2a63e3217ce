from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import Request
from fastapi.responses import HTMLResponse
from jinja2 import Environment
from markupsafe import Markup, escape

from noteserver.core.session import SessionContext
from noteserver.templating import get_environment

from .pages import NOT_FOUND_VIEW
from .routes import RouteTable


logger = logging.getLogger(__name__)


DEFAULT_TITLE = "noteserver"
TITLE_TEMPLATE = "%s | noteserver"
BUNDLE_PATH = "/static/js/bundle.js"


def _attributes(attrs: dict[str, Any]) -> Markup:
    rendered = []
    for key, value in attrs.items():
        if value is None or value is False:
            continue
        name = key.rstrip("_").replace("_", "-")
        if value is True:
            rendered.append(str(escape(name)))
        else:
            rendered.append(f'{escape(name)}="{escape(value)}"')
    return Markup(" ".join(rendered))


class Head:
    """Collects document head metadata declared by views while they render.

    Each setter returns an empty string so views can call it inline:
    ``{{ head.title("Notes") }}``.
    """

    def __init__(self) -> None:
        self._title: Optional[str] = None
        self._meta: list[dict[str, Any]] = []
        self._links: list[dict[str, Any]] = []
        self.html_attributes: dict[str, Any] = {}
        self.body_attributes: dict[str, Any] = {}

    def title(self, text: str) -> str:
        self._title = text
        return ""

    def meta(self, **attrs: Any) -> str:
        self._meta.append(attrs)
        return ""

    def link(self, **attrs: Any) -> str:
        self._links.append(attrs)
        return ""

    def html_attrs(self, **attrs: Any) -> str:
        self.html_attributes.update(attrs)
        return ""

    def body_attrs(self, **attrs: Any) -> str:
        self.body_attributes.update(attrs)
        return ""

    @property
    def title_text(self) -> str:
        if self._title is None:
            return DEFAULT_TITLE
        return TITLE_TEMPLATE % self._title

    def render_title(self) -> Markup:
        return Markup("<title>%s</title>") % self.title_text

    def render_meta(self) -> Markup:
        return Markup("\n".join(f"<meta {_attributes(attrs)}>" for attrs in self._meta))

    def render_links(self) -> Markup:
        return Markup("\n".join(f"<link {_attributes(attrs)}>" for attrs in self._links))

    def render_html_attributes(self) -> Markup:
        return _attributes(self.html_attributes)

    def render_body_attributes(self) -> Markup:
        return _attributes(self.body_attributes)


def general_data(request: Request) -> dict[str, Any]:
    user = SessionContext(request.session).current_user()
    username = user.get("username") if user else None
    return {
        "user": user,
        "username": username,
        "greeting": f"Hello, {username}!" if username else "Hello, guest!",
    }


class PageRenderer:
    def __init__(
        self,
        route_table: RouteTable,
        environment: Environment | None = None,
        bundle_path: str = BUNDLE_PATH,
    ):
        self.route_table = route_table
        self.environment = environment or get_environment()
        self.bundle_path = bundle_path

    def initial_state(self, request: Request, page_data: dict[str, Any] | None) -> dict[str, Any]:
        return {"page": page_data or {}, "general": general_data(request)}

    def render_app(self, request: Request, state: dict[str, Any], head: Head) -> str:
        session = SessionContext(request.session)
        match = self.route_table.match(request.url.path, session.is_authenticated)
        view = match.entry.view if match.entry is not None else NOT_FOUND_VIEW
        template = self.environment.get_template(view)
        return template.render(
            state=state,
            page=state["page"],
            general=state["general"],
            params=match.params,
            path=request.url.path,
            head=head,
        )

    def render(
        self,
        request: Request,
        page_data: dict[str, Any] | None = None,
        status_code: int = 200,
    ) -> HTMLResponse:
        state = self.initial_state(request, page_data)
        head = Head()
        app_html = self.render_app(request, state, head)
        document = self.environment.get_template("document.html").render(
            head=head,
            app_html=Markup(app_html),
            state=state,
            bundle_path=self.bundle_path,
        )
        return HTMLResponse(document, status_code=status_code)
