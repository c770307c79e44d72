from app.db.repositories.interest_repository import InterestRepository
from app.db.repositories.message_repository import MessageRepository
from app.db.repositories.photo_repository import PhotoRepository
from app.db.repositories.user_repository import UserRepository

__all__ = ["InterestRepository", "MessageRepository", "PhotoRepository", "UserRepository"]
