"""Rule-based eligibility and recommendation engine.

Three pure operations over a :class:`UserProfile` and scheme records:

    * :func:`check_eligibility` -- verdict plus human-readable reasons for
      a single scheme.  Every dimension is evaluated, so all failing
      reasons are reported together.
    * :func:`get_recommended` -- active schemes whose constraints the
      profile does not contradict, newest first, capped at 10.
    * :func:`score_match` -- coarse 70-100 match percentage shown next to
      a recommendation.

Dimensions are always checked in the order age, income, gender, state,
occupation.  An attribute missing from the profile never disqualifies;
it only weakens the verdict (see the disclaimer in
:func:`check_eligibility`).

Nothing here performs I/O or keeps state between calls, so the functions
are safe to call concurrently from request handlers.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Final

import structlog
from pydantic import BaseModel, Field

from gconnect.models.enums import TargetGender
from gconnect.models.scheme import SchemeRecord
from gconnect.models.user_profile import UserProfile

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

RECOMMENDATION_LIMIT: Final[int] = 10

BASE_MATCH_SCORE: Final[int] = 70
AGE_MATCH_BONUS: Final[int] = 15
INCOME_MATCH_BONUS: Final[int] = 10
STATE_MATCH_BONUS: Final[int] = 5
MAX_MATCH_SCORE: Final[int] = 100

ELIGIBLE_MESSAGE: Final[str] = "meets all eligibility criteria"
UNVERIFIED_PREFIX: Final[str] = "eligibility could not be fully verified: profile is missing"

_DIMENSIONS: Final[tuple[str, ...]] = ("age", "income", "gender", "state", "occupation")

# With none of these known, a pass is vacuous and always gets the disclaimer.
_CORE_DIMENSIONS: Final[tuple[str, ...]] = ("age", "income", "gender", "state")


# ---------------------------------------------------------------------------
# Errors and result model
# ---------------------------------------------------------------------------


class InvalidInputError(ValueError):
    """Raised when the profile or scheme handed to the engine is missing."""


class MatchResult(BaseModel):
    """Eligibility verdict for one profile/scheme pair.

    ``match_percentage`` is only filled in on the recommendation path.
    """

    eligible: bool
    reasons: list[str] = Field(min_length=1)
    match_percentage: int | None = Field(default=None, ge=0, le=100)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def check_eligibility(profile: UserProfile | None, scheme: SchemeRecord | None) -> MatchResult:
    """Check *profile* against every constraint of *scheme*.

    Returns ``eligible=True`` with the single affirmative reason when no
    dimension fails.  When the profile lacks attributes the scheme
    constrains (or lacks all the core attributes), a disclaimer is
    appended to the reasons; it never flips the verdict.

    Raises
    ------
    InvalidInputError
        If *profile* or *scheme* is ``None``.
    """
    _require_inputs(profile, scheme)

    failures = _collect_failures(profile, scheme)
    if failures:
        result = MatchResult(eligible=False, reasons=failures)
    else:
        reasons = [ELIGIBLE_MESSAGE]
        unverified = _unverified_dimensions(profile, scheme)
        if unverified:
            reasons.append(f"{UNVERIFIED_PREFIX} {', '.join(unverified)}")
        result = MatchResult(eligible=True, reasons=reasons)

    logger.debug(
        "eligibility.check",
        user_id=profile.user_id,
        scheme_id=scheme.scheme_id,
        eligible=result.eligible,
        failed_dimensions=len(failures),
    )
    return result


def get_recommended(
    profile: UserProfile | None,
    catalog: Iterable[SchemeRecord],
    limit: int = RECOMMENDATION_LIMIT,
) -> list[SchemeRecord]:
    """Return the active schemes *profile* is not excluded from.

    Uses the same five-dimension filter as :func:`check_eligibility`
    with inclusive ``[min, max]`` bounds.  Results are ordered by
    ``created_at`` descending (ties broken by id, newest first) and
    truncated to *limit*.
    """
    if profile is None:
        raise InvalidInputError("profile is required")

    limit = max(0, min(limit, RECOMMENDATION_LIMIT))
    catalog = list(catalog)

    passing = [
        scheme
        for scheme in catalog
        if scheme.is_active and not _collect_failures(profile, scheme)
    ]
    passing.sort(key=lambda s: (s.created_at, s.scheme_id), reverse=True)
    recommended = passing[:limit]

    logger.info(
        "eligibility.recommended",
        user_id=profile.user_id,
        catalog_size=len(catalog),
        passing=len(passing),
        returned=len(recommended),
    )
    return recommended


def score_match(profile: UserProfile | None, scheme: SchemeRecord | None) -> int:
    """Advisory match percentage in ``[70, 100]``.

    Starts from 70 and adds +15 for an age inside a fully bounded age
    range, +10 for an income inside a fully bounded income range and +5
    for a listed state.  Has no bearing on eligibility.
    """
    _require_inputs(profile, scheme)

    score = BASE_MATCH_SCORE

    if (
        profile.age is not None
        and scheme.min_age is not None
        and scheme.max_age is not None
        and scheme.min_age <= profile.age <= scheme.max_age
    ):
        score += AGE_MATCH_BONUS

    if (
        profile.income is not None
        and scheme.min_income is not None
        and scheme.max_income is not None
        and scheme.min_income <= profile.income <= scheme.max_income
    ):
        score += INCOME_MATCH_BONUS

    if profile.state is not None and _contains(scheme.target_states, profile.state):
        score += STATE_MATCH_BONUS

    return min(score, MAX_MATCH_SCORE)


def recommend_with_scores(
    profile: UserProfile | None,
    catalog: Iterable[SchemeRecord],
    limit: int = RECOMMENDATION_LIMIT,
) -> list[tuple[SchemeRecord, MatchResult]]:
    """Recommended schemes paired with a verdict carrying the match percentage."""
    scored: list[tuple[SchemeRecord, MatchResult]] = []
    for scheme in get_recommended(profile, catalog, limit):
        verdict = check_eligibility(profile, scheme)
        scored.append(
            (scheme, verdict.model_copy(update={"match_percentage": score_match(profile, scheme)}))
        )
    return scored


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


def _collect_failures(profile: UserProfile, scheme: SchemeRecord) -> list[str]:
    """Evaluate all five dimensions and return one reason per failed bound."""
    failures: list[str] = []

    # -- 1. Age -----------------------------------------------------------
    if profile.age is not None:
        if scheme.min_age is not None and profile.age < scheme.min_age:
            failures.append(f"minimum age requirement: {scheme.min_age}")
        if scheme.max_age is not None and profile.age > scheme.max_age:
            failures.append(f"maximum age limit: {scheme.max_age}")

    # -- 2. Income --------------------------------------------------------
    if profile.income is not None:
        if scheme.min_income is not None and profile.income < scheme.min_income:
            failures.append(f"minimum income requirement: {format_inr(scheme.min_income)}")
        if scheme.max_income is not None and profile.income > scheme.max_income:
            failures.append(f"maximum income limit: {format_inr(scheme.max_income)}")

    # -- 3. Gender --------------------------------------------------------
    if (
        _restricts_gender(scheme)
        and profile.gender is not None
        and profile.gender.value != scheme.target_gender.value
    ):
        failures.append(f"target gender: {scheme.target_gender.value}")

    # -- 4. State ---------------------------------------------------------
    if (
        scheme.target_states
        and profile.state is not None
        and not _contains(scheme.target_states, profile.state)
    ):
        failures.append(f"available in states: {', '.join(scheme.target_states)}")

    # -- 5. Occupation ----------------------------------------------------
    if (
        scheme.target_occupations
        and profile.occupation is not None
        and not _contains(scheme.target_occupations, profile.occupation)
    ):
        failures.append(
            f"available for occupations: {', '.join(scheme.target_occupations)}"
        )

    return failures


def _unverified_dimensions(profile: UserProfile, scheme: SchemeRecord) -> list[str]:
    """Dimensions that passed only because the profile left them blank."""
    constrained = {
        "age": scheme.min_age is not None or scheme.max_age is not None,
        "income": scheme.min_income is not None or scheme.max_income is not None,
        "gender": _restricts_gender(scheme),
        "state": bool(scheme.target_states),
        "occupation": bool(scheme.target_occupations),
    }
    missing = [
        dim for dim in _DIMENSIONS
        if constrained[dim] and getattr(profile, dim) is None
    ]
    if not missing and all(getattr(profile, dim) is None for dim in _CORE_DIMENSIONS):
        missing = [dim for dim in _DIMENSIONS if getattr(profile, dim) is None]
    return missing


def _restricts_gender(scheme: SchemeRecord) -> bool:
    return scheme.target_gender is not None and scheme.target_gender != TargetGender.ALL


def _contains(options: list[str], value: str) -> bool:
    wanted = value.strip().casefold()
    return any(option.strip().casefold() == wanted for option in options)


def _require_inputs(profile: UserProfile | None, scheme: SchemeRecord | None) -> None:
    if profile is None:
        raise InvalidInputError("profile is required")
    if scheme is None:
        raise InvalidInputError("scheme is required")


# ---------------------------------------------------------------------------
# Module-level utilities
# ---------------------------------------------------------------------------


def format_inr(amount: int) -> str:
    """Format *amount* in rupees with Indian digit grouping.

    ``200000`` becomes ``"₹2,00,000"``.
    """
    digits = str(abs(amount))
    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups: list[str] = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        digits = ",".join(groups) + "," + tail
    sign = "-" if amount < 0 else ""
    return f"{sign}₹{digits}"
