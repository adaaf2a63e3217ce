from __future__ import annotations

import functools
from typing import Any, Callable

from graphql import GraphQLError, GraphQLResolveInfo

from noteserver.core.errors import UNAUTHORIZED_MESSAGE
from noteserver.core.session import SessionContext


def session_from(info: GraphQLResolveInfo) -> SessionContext | None:
    context = info.context or {}
    return context.get("session")


def db_from(info: GraphQLResolveInfo):
    return (info.context or {}).get("db")


def protect(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Reject the resolver call unless the session carries a user."""

    @functools.wraps(fn)
    def wrapper(info: GraphQLResolveInfo, **kwargs: Any) -> Any:
        session = session_from(info)
        if session is None or not session.is_authenticated:
            raise GraphQLError(UNAUTHORIZED_MESSAGE)
        return fn(info, **kwargs)

    return wrapper
