from fastapi import APIRouter

from modules.chat.api import router as chat_router
from modules.notifications.api import router as notifications_router

router = APIRouter()
router.include_router(notifications_router)
router.include_router(chat_router)
