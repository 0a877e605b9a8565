from pdfchat.api.routers.chat import router as chat_router
from pdfchat.api.routers.documents import router as documents_router
from pdfchat.api.routers.health import router as health_router

__all__ = ["chat_router", "documents_router", "health_router"]
