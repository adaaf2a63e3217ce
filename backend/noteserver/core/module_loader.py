from __future__ import annotations

import importlib
import pkgutil
from types import ModuleType
from typing import Iterable, List, Optional

from fastapi import APIRouter

from noteserver.graphql.registry import SchemaFragment


MODULES_PACKAGE = "noteserver.modules"


def iter_submodules(package: str) -> Iterable[str]:
    pkg = importlib.import_module(package)
    for m in pkgutil.iter_modules(pkg.__path__):
        if m.ispkg:
            yield f"{package}.{m.name}"


def _import_optional(module_pkg: str, name: str) -> Optional[ModuleType]:
    try:
        return importlib.import_module(f"{module_pkg}.{name}")
    except ModuleNotFoundError as exc:
        # Swallow the error only if the optional module itself is missing.
        if exc.name != f"{module_pkg}.{name}":
            raise
        return None


def import_module_models(module_pkg: str) -> None:
    _import_optional(module_pkg, "models")


def collect_routers(package: str = MODULES_PACKAGE) -> List[APIRouter]:
    routers: List[APIRouter] = []
    for mod in iter_submodules(package):
        # Ensure models are registered before schema initialization
        import_module_models(mod)
        router_mod = _import_optional(mod, "router")
        if router_mod is None:
            continue
        router = getattr(router_mod, "router", None)
        if router is not None:
            routers.append(router)
    return routers


def collect_fragments(package: str = MODULES_PACKAGE) -> List[SchemaFragment]:
    fragments: List[SchemaFragment] = []
    for mod in iter_submodules(package):
        gql_mod = _import_optional(mod, "gql")
        if gql_mod is None:
            continue
        fragment = getattr(gql_mod, "fragment", None)
        if fragment is not None:
            fragments.append(fragment)
    return fragments
