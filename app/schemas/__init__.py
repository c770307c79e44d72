from app.schemas.message import MessageView
from app.schemas.photo import PhotoUpdate, PhotoView
from app.schemas.user import InterestView, UserUpdate, UserView

__all__ = ["InterestView", "MessageView", "PhotoUpdate", "PhotoView", "UserUpdate", "UserView"]
