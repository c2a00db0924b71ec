from shortlink.models.link import ShortLink
from shortlink.models.refresh_token import RefreshToken
from shortlink.models.user import User

__all__ = [
    "RefreshToken",
    "ShortLink",
    "User",
]
