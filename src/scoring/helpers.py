"""
Scoring Helper Functions and Constants

Contains volume tiers, difficulty bonus ladders, intent labels and small
utilities shared by all scoring formulas.

Every tier table is an ordered list of (upper_bound, points) rules evaluated
top-to-bottom, first match wins, with an explicit default arm.
"""

import math
from typing import Optional, Sequence, Tuple
from enum import Enum


# ============================================================================
# INTENT
# ============================================================================

class SearchIntent(Enum):
    """Search intent classification."""
    TRANSACTIONAL = "transactional"
    COMMERCIAL = "commercial"
    INFORMATIONAL = "informational"
    NAVIGATIONAL = "navigational"
    COMPARISON = "comparison"


# AI-assisted analysis reports intents capitalised
AI_TRANSACTIONAL = "Transactional"
AI_COMPARISON = "Comparison"
AI_PROBLEM_TASK = "Problem/Task"


def normalize_intent(intent: Optional[str]) -> str:
    """Lowercase intent label, empty string if missing."""
    return (intent or "").strip().lower()


# ============================================================================
# VOLUME TIERS (heuristic mode)
# ============================================================================

# (minimum volume, base points), highest first
VOLUME_TIERS: Tuple[Tuple[int, int], ...] = (
    (10000, 40),
    (5000, 35),
    (2000, 25),
    (1000, 15),
    (500, 10),
)
VOLUME_DEFAULT_POINTS = 5


def get_volume_points(volume: int) -> int:
    """Base points for a search volume."""
    for minimum, points in VOLUME_TIERS:
        if volume >= minimum:
            return points
    return VOLUME_DEFAULT_POINTS


# ============================================================================
# DIFFICULTY BONUS LADDERS
# ============================================================================

# (max difficulty, bonus), lowest bound first
HEURISTIC_DIFFICULTY_TIERS: Tuple[Tuple[int, int], ...] = (
    (30, 20),
    (40, 15),
    (50, 12),
    (60, 8),
    (70, 5),
)
HEURISTIC_DIFFICULTY_DEFAULT = 2

LEGACY_DIFFICULTY_TIERS: Tuple[Tuple[int, int], ...] = (
    (10, 20),
    (30, 10),
)

STRATEGIC_DIFFICULTY_TIERS: Tuple[Tuple[int, int], ...] = (
    (15, 20),
    (40, 10),
)

DEFAULT_DIFFICULTY = 50


def difficulty_bonus(
    difficulty: int,
    tiers: Sequence[Tuple[int, int]],
    default: int = 0,
) -> int:
    """
    Bonus for a keyword difficulty.

    Args:
        difficulty: Keyword difficulty (0-100)
        tiers: Ordered (max_difficulty, bonus) rules
        default: Bonus when no rule matches

    Returns:
        Bonus points, non-increasing in difficulty
    """
    for ceiling, bonus in tiers:
        if difficulty <= ceiling:
            return bonus
    return default


# ============================================================================
# COMPETITOR RANK BONUS (heuristic mode)
# ============================================================================

COMPETITOR_RANK_TIERS: Tuple[Tuple[int, int], ...] = (
    (1, 15),
    (3, 12),
    (5, 8),
)


def competitor_rank_bonus(position: int) -> int:
    """Bonus for how well the competitor ranks (it proves the keyword converts)."""
    for ceiling, bonus in COMPETITOR_RANK_TIERS:
        if position <= ceiling:
            return bonus
    return 0


# ============================================================================
# MISC
# ============================================================================

def clamp_score(score: float, lower: float = 0, upper: float = 100) -> int:
    """Clamp a raw score into [lower, upper] and round half up."""
    return math.floor(min(max(score, lower), upper) + 0.5)


def is_ranked_top(position: Optional[int], cutoff: int) -> bool:
    """True if a known position is within the top `cutoff` results."""
    return bool(position) and position <= cutoff
