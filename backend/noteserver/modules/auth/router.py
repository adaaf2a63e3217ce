from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from noteserver.api.deps import get_renderer, get_session_context
from noteserver.core.database import get_db
from noteserver.core.errors import CredentialMismatchError, ValidationError
from noteserver.core.session import SessionContext
from noteserver.modules.users.service import UsersService
from noteserver.ssr.renderer import PageRenderer


logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

DbDep = Annotated[Session, Depends(get_db)]
SessionDep = Annotated[SessionContext, Depends(get_session_context)]
RendererDep = Annotated[PageRenderer, Depends(get_renderer)]


async def read_credentials(request: Request) -> dict[str, Any]:
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if content_type == "application/json":
        try:
            body = await request.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}
    form = await request.form()
    return {key: value for key, value in form.items() if isinstance(value, str)}


def form_error(renderer: PageRenderer, request: Request, body: dict[str, Any], message: str):
    # Never send the submitted password back to the browser
    prefill = {key: value for key, value in body.items() if key != "password" and isinstance(value, str)}
    return renderer.render(request, {"prefill": prefill, "errorMessage": message})


def users_service(request: Request, db: Session) -> UsersService:
    return UsersService(db, hash_rounds=request.app.state.settings.PASSWORD_HASH_ROUNDS)


def landing(request: Request) -> RedirectResponse:
    return RedirectResponse(request.app.state.settings.LANDING_PATH, status_code=status.HTTP_302_FOUND)


@router.post("/signup")
async def signup(request: Request, db: DbDep, renderer: RendererDep):
    body = await read_credentials(request)
    svc = users_service(request, db)
    try:
        user = await run_in_threadpool(svc.register_user, body.get("username"), body.get("password"))
    except ValidationError as e:
        logger.info("Signup rejected: %s", e)
        return form_error(renderer, request, body, str(e))
    logger.info("User %s registered with id %s", user.username, user.id)
    return landing(request)


@router.post("/login")
async def login(request: Request, db: DbDep, session: SessionDep, renderer: RendererDep):
    body = await read_credentials(request)
    svc = users_service(request, db)
    try:
        user = await run_in_threadpool(svc.authenticate, body.get("username"), body.get("password"))
    except CredentialMismatchError as e:
        logger.info("Login failed for %s", body.get("username"))
        return form_error(renderer, request, body, str(e))
    session.set_user(user.to_session())
    return landing(request)


@router.get("/logout")
def logout(session: SessionDep):
    session.clear()
    return RedirectResponse("/", status_code=status.HTTP_302_FOUND)
