from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from src.shared.database.health import DatabaseHealthCheck

router = APIRouter(tags=["Health"])


@router.get("/health", status_code=status.HTTP_200_OK)
async def health(request: Request):
    settings = request.app.state.settings
    db = await DatabaseHealthCheck(request.app.state.database).check_connection()
    payload = {
        "status": "ok" if db["healthy"] else "unavailable",
        "service": settings.PROJECT_NAME,
        "version": settings.PROJECT_VERSION,
        "checks": {"database": db},
    }
    if not db["healthy"]:
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=payload)
    return payload
