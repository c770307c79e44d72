from app.services.message_service import MessageService, message_service_factory_provider
from app.services.photo_service import (
    PhotoBatchResult,
    PhotoService,
    photo_service_factory_provider,
)
from app.services.photo_storage import PhotoStorage
from app.services.user_service import UserService, user_service_factory_provider

__all__ = [
    "MessageService",
    "PhotoBatchResult",
    "PhotoService",
    "PhotoStorage",
    "UserService",
    "message_service_factory_provider",
    "photo_service_factory_provider",
    "user_service_factory_provider",
]
