from fastapi import APIRouter

from talent_registry.api.routes import admin, browse, conversations, dashboard, health, message_board, professionals

api_router = APIRouter()
api_router.include_router(health.router, tags=["health"])
api_router.include_router(professionals.router, prefix="/professionals", tags=["profiles"])
api_router.include_router(browse.router, prefix="/dashboard/professionals", tags=["profiles"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(conversations.router, prefix="/messages/conversations", tags=["messaging"])
api_router.include_router(message_board.router, prefix="/message-board", tags=["message-board"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
