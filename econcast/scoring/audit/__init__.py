"""Audit trail for scoring: structured logging and deterministic hashes."""

from .hashing import compute_hash, compute_leaderboard_hash, compute_user_stat_hash
from .logging import ScoringAuditLogger

__all__ = [
    "compute_hash",
    "compute_leaderboard_hash",
    "compute_user_stat_hash",
    "ScoringAuditLogger",
]
