"""
Feature module discovery tests
"""

from noteserver.core.module_loader import collect_routers, iter_submodules


def test_iter_submodules_lists_feature_packages():
    modules = set(iter_submodules("noteserver.modules"))
    assert {
        "noteserver.modules.auth",
        "noteserver.modules.diagnostics",
        "noteserver.modules.notes",
        "noteserver.modules.users",
    } <= modules


def test_collect_routers_skips_modules_without_router():
    paths = {route.path for router in collect_routers() for route in router.routes}
    assert {"/signup", "/login", "/logout", "/500", "/fake-error"} <= paths
