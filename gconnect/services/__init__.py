"""GConnect service layer -- eligibility engine, storage, auth, i18n and chat.

The eligibility engine and storage are pure Python.  The chat assistant
pulls in ``vertexai`` and is imported from :mod:`gconnect.services.llm`
directly by the code that needs it.
"""

from __future__ import annotations

from gconnect.services.eligibility import (
    InvalidInputError,
    MatchResult,
    check_eligibility,
    get_recommended,
    recommend_with_scores,
    score_match,
)
from gconnect.services.i18n import translate
from gconnect.services.storage import (
    DuplicateEmailError,
    InMemoryStorage,
    NotFoundError,
    StorageError,
)

__all__ = [
    "DuplicateEmailError",
    "InMemoryStorage",
    "InvalidInputError",
    "MatchResult",
    "NotFoundError",
    "StorageError",
    "check_eligibility",
    "get_recommended",
    "recommend_with_scores",
    "score_match",
    "translate",
]
