from fastapi import APIRouter

from api.v1.routes.notifications import router as notifications_router
from api.v1.routes.telegram import router as telegram_router

router = APIRouter()
router.include_router(notifications_router)
router.include_router(telegram_router)
