"""Data seeding utilities for the scheme catalog.

Loads scheme definitions from the bundled ``schemes.json`` file and
writes them into an :class:`~gconnect.services.storage.InMemoryStorage`.
Designed to run once at application startup.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from gconnect.models.scheme import SchemeCreate, SchemeRecord

if TYPE_CHECKING:
    from gconnect.services.storage import InMemoryStorage

logger = structlog.get_logger(__name__)

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

_DATA_DIR: Path = Path(__file__).resolve().parent / "schemes"
_SCHEMES_PATH: Path = _DATA_DIR / "schemes.json"


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def load_schemes(path: Path | None = None) -> list[SchemeCreate]:
    """Load scheme definitions from a JSON file.

    Parameters
    ----------
    path:
        Path to the JSON file.  Defaults to the bundled ``schemes.json``.

    Returns
    -------
    list[SchemeCreate]
        Validated scheme definitions.  Entries that fail validation are
        logged and skipped.

    Raises
    ------
    FileNotFoundError
        If the JSON file does not exist.
    json.JSONDecodeError
        If the JSON is malformed.
    """
    file_path = path or _SCHEMES_PATH

    if not file_path.exists():
        raise FileNotFoundError(f"Scheme data file not found: {file_path}")

    with file_path.open("r", encoding="utf-8") as f:
        raw_schemes: list[dict] = json.load(f)

    schemes: list[SchemeCreate] = []
    for raw in raw_schemes:
        try:
            schemes.append(SchemeCreate.model_validate(raw))
        except ValidationError:
            logger.warning(
                "seed.parse_error",
                scheme=raw.get("name", "unknown"),
                exc_info=True,
            )

    logger.info("seed.loaded_schemes", count=len(schemes), source=str(file_path))
    return schemes


# ---------------------------------------------------------------------------
# Seeding
# ---------------------------------------------------------------------------


def seed_storage(store: InMemoryStorage, *, path: Path | None = None) -> list[SchemeRecord]:
    """Load schemes from JSON and insert them into *store*.

    Schemes are inserted in file order, so the last entry in the file is
    the newest one in listings.
    """
    records = [store.create_scheme(scheme) for scheme in load_schemes(path)]
    logger.info(
        "seed.complete",
        inserted=len(records),
        active=sum(1 for r in records if r.is_active),
    )
    return records
