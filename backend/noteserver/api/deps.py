from __future__ import annotations

from fastapi import Request

from noteserver.core.session import SessionContext
from noteserver.graphql.gateway import GraphQLGateway
from noteserver.ssr.renderer import PageRenderer
from noteserver.ssr.routes import RouteTable


def get_session_context(request: Request) -> SessionContext:
    return SessionContext(request.session)


def get_route_table(request: Request) -> RouteTable:
    return request.app.state.route_table


def get_gateway(request: Request) -> GraphQLGateway:
    return request.app.state.gateway


def get_renderer(request: Request) -> PageRenderer:
    return request.app.state.renderer
