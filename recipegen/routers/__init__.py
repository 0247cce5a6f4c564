from .generate import router as generate_router
from .health import router as health_router

__all__ = ["generate_router", "health_router"]
