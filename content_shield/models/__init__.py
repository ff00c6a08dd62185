from .user import User
from .content import ContentItem
from .license_request import LicenseRequest
from .engagement import Comment, Like
from .delete_request import DeleteRequest

__all__ = [
    "User",
    "ContentItem",
    "LicenseRequest",
    "Comment",
    "Like",
    "DeleteRequest",
]
