import logging

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.head("/healthz")
async def healthz_head() -> Response:
    return Response(status_code=200)


@router.get("/readyz")
async def readyz(request: Request) -> JSONResponse:
    session_factory = getattr(request.app.state, "db_session_factory", None)
    if session_factory is None:
        return JSONResponse(
            status_code=503,
            content={"status": "unavailable", "database": {"ok": False, "message": "session factory missing"}},
        )
    try:
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as exc:
        logger.warning("readiness_db_check_failed", extra={"extra": {"reason": type(exc).__name__}})
        return JSONResponse(
            status_code=503,
            content={"status": "unavailable", "database": {"ok": False, "message": type(exc).__name__}},
        )
    return JSONResponse(status_code=200, content={"status": "ok", "database": {"ok": True}})
