from fastapi import APIRouter

from .appointments import router as appointments_router
from .availability import router as availability_router

router = APIRouter()
router.include_router(appointments_router)
router.include_router(availability_router)

__all__ = ["router"]
