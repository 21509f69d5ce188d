"""Deterministic hashing for scoring outputs.

Statistics are recomputed on every query; hashing the ranking lets the
audit log show whether two renderings from the same snapshot agreed.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Sequence


def _serialize_value(val: Any) -> Any:
    """Serialize a value for deterministic hashing."""
    if val is None:
        return None
    elif isinstance(val, Enum):
        return val.value
    elif isinstance(val, Decimal):
        return str(val)
    elif isinstance(val, (datetime, date)):
        return val.isoformat()
    elif is_dataclass(val) and not isinstance(val, type):
        return _serialize_value(asdict(val))
    elif isinstance(val, dict):
        return {str(k): _serialize_value(v) for k, v in sorted(val.items())}
    elif isinstance(val, (list, tuple)):
        return [_serialize_value(v) for v in val]
    elif isinstance(val, (int, float, str, bool)):
        return val
    else:
        return str(val)


def compute_hash(data: Dict[str, Any]) -> str:
    """Compute deterministic SHA256 hash of a dictionary.

    The hash is computed from a canonical JSON representation
    with sorted keys and consistent formatting.

    Args:
        data: Dictionary to hash

    Returns:
        Hex-encoded SHA256 hash (64 characters)
    """
    serialized = _serialize_value(data)
    canonical = json.dumps(serialized, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def compute_user_stat_hash(user_id: str, stats: Any) -> str:
    """Hash of one user's statistics."""
    return compute_hash({"user_id": user_id, "stats": stats})


def compute_leaderboard_hash(entries: Sequence[Any]) -> str:
    """Hash of a ranking; order matters, so entries are not re-sorted.

    Args:
        entries: LeaderboardEntry objects in rank order

    Returns:
        Hex-encoded SHA256 hash
    """
    payload = {
        "n_users": len(entries),
        "ranking": [
            {"rank": e.rank, "user_id": e.user.id, "stats": e.stats}
            for e in entries
        ],
    }
    return compute_hash(payload)


__all__ = [
    "compute_hash",
    "compute_user_stat_hash",
    "compute_leaderboard_hash",
]
