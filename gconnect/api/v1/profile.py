"""Profile update endpoint for GConnect v1.

Saving a profile can change which schemes the user qualifies for, so the
update is followed by a pass that announces newly matching schemes.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends

from gconnect.api.v1.auth import UserResponse
from gconnect.middleware.auth import get_storage, require_user
from gconnect.models.user_profile import ProfileUpdate, User
from gconnect.services.notifications import notify_new_matches
from gconnect.services.storage import InMemoryStorage

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

router = APIRouter(prefix="/profile", tags=["profile"])


@router.put("", response_model=UserResponse)
async def update_profile(
    body: ProfileUpdate,
    user: User = Depends(require_user),
    store: InMemoryStorage = Depends(get_storage),
) -> UserResponse:
    """Replace the editable profile fields of the current user."""
    updated = store.update_user_profile(user.user_id, body)
    created = notify_new_matches(store, updated.user_id)

    logger.info(
        "api.profile.updated",
        user_id=updated.user_id,
        completion=updated.profile_completion,
        new_matches=len(created),
    )
    return UserResponse(user=updated.public_dict())
