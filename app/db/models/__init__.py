from app.db.models.interest import Interest
from app.db.models.message import Message
from app.db.models.photo import Photo
from app.db.models.user import User, user_interests

__all__ = ["User", "Interest", "Message", "Photo", "user_interests"]
