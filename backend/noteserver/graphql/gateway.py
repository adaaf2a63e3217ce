from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

import httpx
from fastapi.concurrency import run_in_threadpool

from noteserver.core.config import Settings
from noteserver.core.errors import UNAUTHORIZED_MESSAGE, GatewayError, UnauthorizedError

from .registry import GraphQLRegistry


logger = logging.getLogger(__name__)


ParamMapper = Callable[[dict[str, str]], dict[str, Any]]
ResponseMapper = Callable[[dict[str, Any]], dict[str, Any]]


@dataclass(frozen=True)
class GraphQLSpec:
    """Query a page fetches before rendering, plus optional in/out mappers."""

    query: str
    map_params: Optional[ParamMapper] = None
    map_resp: Optional[ResponseMapper] = None


class Transport(ABC):
    """Carries one GraphQL request and returns the raw ``{data, errors}`` payload."""

    @abstractmethod
    async def execute(
        self,
        query: str,
        variables: Mapping[str, Any],
        *,
        base_url: str,
        cookie: str | None,
        context: Any,
    ) -> dict[str, Any]:
        """Run the query and return the decoded response payload."""

    def name(self) -> str:
        return type(self).__name__


class LocalTransport(Transport):
    """Executes against the in-process registry with the caller's session context."""

    def __init__(self, registry: GraphQLRegistry):
        self.registry = registry

    async def execute(self, query, variables, *, base_url, cookie, context):
        result = await run_in_threadpool(self.registry.execute, query, dict(variables), None, context)
        return result.formatted


class HttpTransport(Transport):
    """Posts to a GraphQL endpoint, forwarding the session cookie."""

    def __init__(
        self,
        url: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url
        self.timeout = timeout
        self._transport = transport

    def endpoint(self, base_url: str) -> str:
        return self.url or f"{base_url.rstrip('/')}/graphql"

    async def execute(self, query, variables, *, base_url, cookie, context):
        url = self.endpoint(base_url)
        headers = {"Accept": "application/json"}
        if cookie:
            headers["Cookie"] = cookie
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    url,
                    json={"query": query, "variables": dict(variables)},
                    headers=headers,
                )
        except httpx.HTTPError as exc:
            raise GatewayError(f"GraphQL request to {url} failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise GatewayError(
                f"GraphQL endpoint {url} returned a non-JSON response (status {response.status_code})"
            ) from exc
        if not isinstance(payload, dict):
            raise GatewayError(f"GraphQL endpoint {url} returned an unexpected payload")
        return payload


def unwrap_payload(payload: Mapping[str, Any]) -> dict[str, Any]:
    if not isinstance(payload, Mapping):
        raise GatewayError(f"GraphQL transport returned {type(payload).__name__}, not a payload")
    errors = payload.get("errors") or []
    messages = [err.get("message", "") if isinstance(err, Mapping) else str(err) for err in errors]
    if UNAUTHORIZED_MESSAGE in messages:
        raise UnauthorizedError(list(errors))
    if errors:
        raise GatewayError("; ".join(messages), list(errors))
    data = payload.get("data")
    if data is None:
        raise GatewayError("GraphQL response carried no data")
    return data


class GraphQLGateway:
    def __init__(self, transport: Transport):
        self.transport = transport

    async def call(
        self,
        graphql: GraphQLSpec,
        params: Mapping[str, str],
        *,
        base_url: str,
        cookie: str | None = None,
        context: Any = None,
    ) -> dict[str, Any]:
        try:
            variables = graphql.map_params(dict(params)) if graphql.map_params else dict(params)
        except Exception as exc:
            raise GatewayError(f"Could not map path parameters {dict(params)!r}: {exc}") from exc

        try:
            payload = await self.transport.execute(
                graphql.query,
                variables,
                base_url=base_url,
                cookie=cookie,
                context=context,
            )
        except GatewayError:
            raise
        except Exception as exc:
            raise GatewayError(f"{self.transport.name()} failed: {exc}") from exc
        data = unwrap_payload(payload)

        if graphql.map_resp is None:
            return data
        try:
            return graphql.map_resp(data)
        except Exception as exc:
            raise GatewayError(f"Could not map GraphQL response: {exc}") from exc


def build_gateway(settings: Settings, registry: GraphQLRegistry) -> GraphQLGateway:
    mode = (settings.GRAPHQL_TRANSPORT or "local").lower()
    if mode == "local" and not settings.GRAPHQL_URL:
        transport: Transport = LocalTransport(registry)
    elif mode in {"local", "http"}:
        url = str(settings.GRAPHQL_URL) if settings.GRAPHQL_URL else None
        transport = HttpTransport(url=url, timeout=settings.GRAPHQL_TIMEOUT_SECONDS)
    else:
        raise ValueError(f"Unsupported GraphQL transport: {settings.GRAPHQL_TRANSPORT}")
    logger.info("GraphQL gateway using %s", transport.name())
    return GraphQLGateway(transport)
