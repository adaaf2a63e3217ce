"""Catch-all server-side rendering route.

Matches the request path against the page route table, fetches the page's
GraphQL data when the route declares a query, and renders the document.
An unauthorized GraphQL result redirects to the login page; any other
fetch failure is logged and the page renders with empty data.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from noteserver.api.deps import get_gateway, get_renderer, get_route_table, get_session_context
from noteserver.core.database import get_db
from noteserver.core.errors import FailureKind, GatewayError
from noteserver.core.session import SessionContext
from noteserver.graphql.gateway import GraphQLGateway

from .renderer import PageRenderer
from .routes import RouteTable, is_static_path


logger = logging.getLogger(__name__)

router = APIRouter(tags=["pages"])

DbDep = Annotated[Session, Depends(get_db)]
SessionDep = Annotated[SessionContext, Depends(get_session_context)]


def self_base_url(request: Request) -> str:
    # Self-calls go back through the public host; DISABLE_SSL drops to plain HTTP
    disable_ssl = request.app.state.settings.DISABLE_SSL
    host = request.headers.get("host") or request.url.netloc
    return f"http{'' if disable_ssl else 's'}://{host}"


@router.get("/{full_path:path}", include_in_schema=False)
async def render_page(
    request: Request,
    db: DbDep,
    session: SessionDep,
    route_table: Annotated[RouteTable, Depends(get_route_table)],
    gateway: Annotated[GraphQLGateway, Depends(get_gateway)],
    renderer: Annotated[PageRenderer, Depends(get_renderer)],
):
    settings = request.app.state.settings
    path = request.url.path
    if is_static_path(path, settings.STATIC_PREFIX):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")

    match = route_table.match(path, session.is_authenticated)
    if not match.matched:
        if match.login_required:
            return RedirectResponse(settings.LOGIN_PATH, status_code=status.HTTP_302_FOUND)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")

    page_data: dict[str, Any] = {}
    graphql = match.entry.graphql
    if graphql is not None:
        try:
            page_data = await gateway.call(
                graphql,
                match.params,
                base_url=self_base_url(request),
                cookie=request.headers.get("cookie"),
                context={"request": request, "session": session, "db": db},
            )
        except GatewayError as err:
            if err.kind is FailureKind.UNAUTHORIZED:
                return RedirectResponse(settings.LOGIN_PATH, status_code=status.HTTP_302_FOUND)
            logger.error("GraphQL fetch for %s failed: %s", path, err, exc_info=err)

    return renderer.render(request, page_data)
