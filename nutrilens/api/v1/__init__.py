from .device_gateway import router as device_gateway_router
from .nutrition_controller import router as nutrition_router
from .photo_controller import router as photo_router
from .session_controller import router as session_router
from .user_controller import router as user_router
from .worker_controller import router as worker_router


__all__ = [
    "device_gateway_router",
    "nutrition_router",
    "photo_router",
    "session_router",
    "user_router",
    "worker_router",
]
