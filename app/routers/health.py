import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", summary="Liveness check")
async def health():
    return {"status": "ok"}


@router.get("/db", summary="Check the MongoDB connection")
async def health_db(request: Request):
    db = getattr(request.app.state, "db", None)
    if db is None:
        return JSONResponse(status_code=503, content={"status": "error", "detail": "Database not connected"})
    try:
        await db.command("ping")
    except Exception as e:
        logger.error(f"MongoDB ping failed: {e}")
        return JSONResponse(status_code=503, content={"status": "error", "detail": str(e)})
    return {"status": "ok"}
