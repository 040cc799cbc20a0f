from gconnect.models.application import (
    Application,
    ApplicationCreate,
    ApplicationStatusUpdate,
    ApplicationWithScheme,
)
from gconnect.models.chat import ChatMessage, ChatReply, ChatRequest, SuggestedScheme
from gconnect.models.enums import (
    ApplicationStatus,
    ChatLanguage,
    Gender,
    NotificationType,
    TargetGender,
)
from gconnect.models.notification import Notification
from gconnect.models.scheme import SchemeCategory, SchemeCreate, SchemeRecord
from gconnect.models.user_profile import ProfileUpdate, User, UserCreate, UserProfile

__all__ = [
    "Application",
    "ApplicationCreate",
    "ApplicationStatus",
    "ApplicationStatusUpdate",
    "ApplicationWithScheme",
    "ChatLanguage",
    "ChatMessage",
    "ChatReply",
    "ChatRequest",
    "Gender",
    "Notification",
    "NotificationType",
    "ProfileUpdate",
    "SchemeCategory",
    "SchemeCreate",
    "SchemeRecord",
    "SuggestedScheme",
    "TargetGender",
    "User",
    "UserCreate",
    "UserProfile",
]
