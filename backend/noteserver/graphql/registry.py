"""Process-wide GraphQL schema assembled from feature-module fragments.

Each feature module exports a :class:`SchemaFragment` holding SDL text and a
mapping of root field name to resolver. Fragments extend a shared base
``type Query``; their resolvers are merged into a single read-only root value.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping

from graphql import ExecutionResult, GraphQLSchema, build_schema, graphql_sync

from noteserver.core.errors import DuplicateResolverError


logger = logging.getLogger(__name__)


BASE_TYPE_DEFS = "type Query"

Resolver = Callable[..., Any]


@dataclass(frozen=True)
class SchemaFragment:
    name: str
    type_defs: str
    resolvers: Mapping[str, Resolver] = field(default_factory=dict)


@dataclass(frozen=True)
class GraphQLRegistry:
    schema: GraphQLSchema
    root_value: Mapping[str, Resolver]

    def execute(
        self,
        query: str,
        variables: dict[str, Any] | None = None,
        operation_name: str | None = None,
        context: Any = None,
    ) -> ExecutionResult:
        # Resolvers hit the database synchronously; callers run this in a worker thread
        return graphql_sync(
            self.schema,
            query,
            root_value=self.root_value,
            context_value=context,
            variable_values=variables,
            operation_name=operation_name,
        )


def build_registry(fragments: Iterable[SchemaFragment]) -> GraphQLRegistry:
    type_defs = [BASE_TYPE_DEFS]
    resolvers: dict[str, Resolver] = {}
    owners: dict[str, str] = {}

    for fragment in fragments:
        type_defs.append(fragment.type_defs.strip())
        for key, resolver in fragment.resolvers.items():
            if key in owners:
                raise DuplicateResolverError(
                    f"Resolver '{key}' is defined by both '{owners[key]}' and '{fragment.name}'"
                )
            if not callable(resolver):
                raise TypeError(f"Resolver '{key}' of '{fragment.name}' is not callable")
            owners[key] = fragment.name
            resolvers[key] = resolver

    schema = build_schema("\n\n".join(type_defs))
    logger.info("Built GraphQL schema with resolvers: %s", ", ".join(sorted(resolvers)) or "-")
    return GraphQLRegistry(
        schema=schema,
        root_value=MappingProxyType(resolvers),
    )
