from __future__ import annotations

from fastapi import APIRouter


router = APIRouter(tags=["diagnostics"], include_in_schema=False)


@router.get("/500")
def fake_internal_error():
    raise RuntimeError("Fake Internal Server Error")


@router.get("/fake-error")
def fake_error():
    raise RuntimeError("Fake Server Error")
