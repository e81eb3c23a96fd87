"""
Track-type repair for rows whose `type` column is missing or inconsistent.
"""
import logging
from typing import Optional

from trackodds.core.config import (
    TRACK_TYPES,
    TRACK_TYPE_SYNONYMS,
    TRACK_NAME_MAP,
    DEFAULT_TRACK_TYPE,
)

logger = logging.getLogger(__name__)


def classify_track_type(raw_type: Optional[str], track_name: Optional[str] = None) -> str:
    """
    Resolves a track to one of the five canonical track types.

    Args:
        raw_type (Optional[str]): Value of the `type` column, any casing, possibly empty.
        track_name (Optional[str]): Track name used for the lookup-table fallback.

    Returns:
        str: 'superspeedway', 'intermediate', 'short', 'road' or 'dirt'.
    """
    lowered_type = (raw_type or "").strip().lower()
    if lowered_type in TRACK_TYPES:
        return lowered_type

    if lowered_type:
        for synonym, track_type in TRACK_TYPE_SYNONYMS:
            if synonym in lowered_type:
                return track_type

    lowered_name = (track_name or "").strip().lower()
    if lowered_name:
        for fragment, track_type in TRACK_NAME_MAP:
            if fragment in lowered_name:
                return track_type

    logger.debug(f"No track type match for type={raw_type!r} name={track_name!r}, using default")
    return DEFAULT_TRACK_TYPE


def track_id_from_name(track_name: str) -> str:
    """Slug-style id for tracks that come without one."""
    return "-".join(track_name.lower().replace("(", " ").replace(")", " ").split())
