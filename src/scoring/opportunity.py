"""
Opportunity Score Calculator

Combines relevance, intent, commercial value, difficulty, volume, current
rank and branding signals into a single 0-100 opportunity score.

Three formulas exist and are kept separate:

1. **Heuristic** (no AI): volume tier scaled by relevance, plus flat
   intent / difficulty / competitor-rank / own-rank bonuses.

2. **Legacy strategic** (competitor teardown with AI): starts from the AI's
   commercial value, applies own-rank and branding multipliers, then adds
   category / difficulty / volume bonuses.

3. **Strategic** (topic expansion): weighted blend

       score = vertical_relevance × 0.7 + commercial_value × 0.3
             + intent bonus + difficulty bonus + volume bonus

   then two multiplicative penalties, in order:
       × 0.1  if the vendor already ranks top 3
       × 0.2  if the keyword is branded and intent is not Comparison

   Penalties are applied after every additive bonus and compound.
"""

from enum import Enum
from typing import Optional

from src.models import KeywordAnalysis, RawKeyword
from .helpers import (
    AI_COMPARISON,
    AI_PROBLEM_TASK,
    AI_TRANSACTIONAL,
    DEFAULT_DIFFICULTY,
    HEURISTIC_DIFFICULTY_DEFAULT,
    HEURISTIC_DIFFICULTY_TIERS,
    LEGACY_DIFFICULTY_TIERS,
    STRATEGIC_DIFFICULTY_TIERS,
    clamp_score,
    competitor_rank_bonus,
    difficulty_bonus,
    get_volume_points,
    is_ranked_top,
)


class ScoringFormula(Enum):
    """Which scoring formula a pipeline mode uses."""
    HEURISTIC = "heuristic"
    LEGACY_STRATEGIC = "legacy_strategic"
    STRATEGIC = "strategic"


# Penalty multipliers
TOP_RANK_PENALTY = 0.1
BRANDED_PENALTY = 0.2
LEGACY_FIRST_PAGE_PENALTY = 0.6


def calculate_heuristic_score(
    volume: int,
    difficulty: Optional[int],
    competitor_position: Optional[int],
    own_position: Optional[int],
    relevance: int,
    intent: str,
) -> int:
    """
    Heuristic-mode opportunity score.

    Args:
        volume: Monthly search volume
        difficulty: Keyword difficulty (defaults to 50 when unknown)
        competitor_position: Competitor's rank (defaults to 1 when unknown)
        own_position: Vendor's rank, None if unranked
        relevance: Relevance score from the pattern classifier (0-100)
        intent: transactional / commercial / informational

    Returns:
        Score 0-100
    """
    difficulty = DEFAULT_DIFFICULTY if difficulty is None else difficulty
    competitor_position = 1 if competitor_position is None else competitor_position

    score = get_volume_points(volume or 0) * (relevance / 100)

    if intent == "transactional":
        score += 25
    elif intent == "commercial":
        score += 15

    score += difficulty_bonus(difficulty, HEURISTIC_DIFFICULTY_TIERS, HEURISTIC_DIFFICULTY_DEFAULT)
    score += competitor_rank_bonus(competitor_position)

    if not own_position:
        score += 10
    elif own_position > 10:
        score += 5

    return clamp_score(score)


def calculate_legacy_strategic_score(
    volume: int,
    difficulty: Optional[int],
    own_position: Optional[int],
    analysis: KeywordAnalysis,
) -> int:
    """First-generation AI score, used by the competitor teardown."""
    difficulty = DEFAULT_DIFFICULTY if difficulty is None else difficulty
    score: float = analysis.commercial_value or 0

    if is_ranked_top(own_position, 3):
        score *= TOP_RANK_PENALTY
    elif is_ranked_top(own_position, 10):
        score *= LEGACY_FIRST_PAGE_PENALTY
    elif not own_position:
        score += 10

    if analysis.is_branded and analysis.intent != AI_COMPARISON:
        score *= BRANDED_PENALTY

    if analysis.category == AI_PROBLEM_TASK:
        score += 15
    score += difficulty_bonus(difficulty, LEGACY_DIFFICULTY_TIERS)
    if (volume or 0) >= 10000:
        score += 5

    return clamp_score(score)


def calculate_strategic_score(
    volume: int,
    difficulty: Optional[int],
    own_position: Optional[int],
    analysis: KeywordAnalysis,
) -> int:
    """
    Weighted-blend AI score.

    Example:
        vertical 100, commercial 100, Transactional, KD 10, volume 2000,
        own rank 1 -> (70 + 30 + 15 + 20 + 5) × 0.1 = 14
    """
    difficulty = DEFAULT_DIFFICULTY if difficulty is None else difficulty
    vertical = analysis.vertical_relevance or 0
    commercial = analysis.commercial_value or 0

    score = vertical * 0.7 + commercial * 0.3

    if analysis.intent == AI_TRANSACTIONAL:
        score += 15
    if analysis.intent == AI_COMPARISON:
        score += 10
    score += difficulty_bonus(difficulty, STRATEGIC_DIFFICULTY_TIERS)
    if (volume or 0) >= 1000:
        score += 5

    # Disqualifiers: after all bonuses
    if is_ranked_top(own_position, 3):
        score *= TOP_RANK_PENALTY
    if analysis.is_branded and analysis.intent != AI_COMPARISON:
        score *= BRANDED_PENALTY

    return clamp_score(score)


def score_keyword(
    formula: ScoringFormula,
    keyword: RawKeyword,
    own_position: Optional[int],
    analysis: KeywordAnalysis,
) -> int:
    """Score a keyword with the formula selected by the pipeline mode."""
    if formula is ScoringFormula.HEURISTIC:
        return calculate_heuristic_score(
            volume=keyword.volume,
            difficulty=keyword.difficulty,
            competitor_position=keyword.best_position,
            own_position=own_position,
            relevance=analysis.relevance_score or 0,
            intent=analysis.intent,
        )
    if formula is ScoringFormula.LEGACY_STRATEGIC:
        return calculate_legacy_strategic_score(
            keyword.volume, keyword.difficulty, own_position, analysis
        )
    return calculate_strategic_score(
        keyword.volume, keyword.difficulty, own_position, analysis
    )
