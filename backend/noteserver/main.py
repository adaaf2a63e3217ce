from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import FileResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from noteserver.core.config import Settings, settings
from noteserver.core.database import engine_for, ensure_core_schema, make_session_factory
from noteserver.core.module_loader import collect_fragments, collect_routers
from noteserver.graphql.gateway import GraphQLGateway, build_gateway
from noteserver.graphql.registry import SchemaFragment, build_registry
from noteserver.graphql.router import router as graphql_router
from noteserver.modules.notes.bootstrap import ensure_default_notes
from noteserver.ssr.pages import default_route_table
from noteserver.ssr.renderer import PageRenderer
from noteserver.ssr.router import router as pages_router
from noteserver.ssr.routes import RouteTable


logger = logging.getLogger(__name__)


class CombinedStaticFiles(StaticFiles):
    """Serve one URL prefix from several directories; the first hit wins."""

    def __init__(self, directories: Sequence[str | Path], **kwargs):
        self._directories = [str(d) for d in directories]
        super().__init__(directory=None, check_dir=False, **kwargs)

    def get_directories(self, directory=None, packages=None):
        return list(self._directories)


def install_error_boundary(app: FastAPI) -> None:
    @app.middleware("http")
    async def error_boundary(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            status_code = getattr(exc, "status_code", None) or getattr(exc, "status", None) or 500
            logger.error(
                "Unhandled error on %s %s: %s",
                request.method,
                request.url.path,
                exc,
                exc_info=exc,
            )
            return PlainTextResponse(str(exc), status_code=int(status_code))


def create_app(
    app_settings: Settings | None = None,
    route_table: RouteTable | None = None,
    fragments: Sequence[SchemaFragment] | None = None,
    gateway: GraphQLGateway | None = None,
) -> FastAPI:
    cfg = app_settings or settings
    app = FastAPI(
        title="noteserver",
        version="0.1.0",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    routers = collect_routers()
    db_engine = engine_for(cfg.DATABASE_URL)
    # Ensure DB schema is present before routes are registered
    ensure_core_schema(db_engine)

    registry = build_registry(collect_fragments() if fragments is None else fragments)
    table = route_table or default_route_table()
    table.validate_queries(registry.schema)

    app.state.settings = cfg
    app.state.db_engine = db_engine
    app.state.session_factory = make_session_factory(db_engine)
    app.state.graphql_registry = registry
    app.state.route_table = table
    app.state.gateway = gateway or build_gateway(cfg, registry)
    app.state.renderer = PageRenderer(table)

    # Innermost first: sessions, then compression, then the error boundary
    app.add_middleware(
        SessionMiddleware,
        secret_key=cfg.SESSION_SECRET,
        session_cookie=cfg.SESSION_COOKIE,
        max_age=cfg.SESSION_MAX_AGE,
        https_only=cfg.SESSION_HTTPS_ONLY,
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    install_error_boundary(app)

    app.mount(cfg.STATIC_PREFIX, CombinedStaticFiles(cfg.static_dirs), name="static")

    @app.get("/favicon.ico", include_in_schema=False)
    def favicon():
        path = Path(cfg.FAVICON_PATH)
        if not path.is_file():
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")
        return FileResponse(path, media_type="image/x-icon")

    for router in routers:
        app.include_router(router)
    app.include_router(graphql_router)
    # Catch-all page rendering must stay last
    app.include_router(pages_router)

    @app.on_event("startup")
    def _startup():
        db = app.state.session_factory()
        try:
            ensure_default_notes(db)
        finally:
            db.close()

    return app


app = create_app()


def run() -> None:
    import uvicorn

    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(
        "Server now listening on port %s (%s)",
        settings.PORT,
        "production" if settings.is_prod else "development",
    )
    uvicorn.run("noteserver.main:app", host="0.0.0.0", port=settings.PORT, proxy_headers=True)


if __name__ == "__main__":
    run()
