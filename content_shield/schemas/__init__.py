from .content import AccessDecisionResponse, ContentMetadata, ContentResponse, ContentWithAccess
from .delete_request import DeleteRequestCreate, DeleteRequestDetail, DeleteRequestResponse
from .engagement import CommentCreate, CommentResponse, LikeResponse
from .license_request import (
    LicenseRequestResponse,
    ReceivedLicenseRequest,
    RequestStatusUpdate,
    SentLicenseRequest,
)
from .user import Token, UserCreate, UserLogin, UserProfile, UserResponse

# Define the public API of this module
__all__ = [
    "AccessDecisionResponse",
    "ContentMetadata",
    "ContentResponse",
    "ContentWithAccess",
    "DeleteRequestCreate",
    "DeleteRequestDetail",
    "DeleteRequestResponse",
    "CommentCreate",
    "CommentResponse",
    "LikeResponse",
    "LicenseRequestResponse",
    "ReceivedLicenseRequest",
    "RequestStatusUpdate",
    "SentLicenseRequest",
    "Token",
    "UserCreate",
    "UserLogin",
    "UserProfile",
    "UserResponse",
]
