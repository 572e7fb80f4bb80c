"""
Keyword Opportunity Engine - Data Models

Shared data models used across the pipeline:
- RawKeyword: one row from the keyword data provider
- KeywordAnalysis: classification / AI judgement attached to a keyword
- Opportunity: final ranked output row
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional


def _to_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _to_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class RawKeyword:
    """One keyword row as fetched from the keyword data provider."""
    keyword: str
    volume: int = 0
    difficulty: Optional[int] = None
    cpc: Optional[float] = None  # Provider units (cents)
    best_position: Optional[int] = None  # Competitor's rank

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "RawKeyword":
        """Build from a provider row, tolerating missing or null fields."""
        return cls(
            keyword=str(row.get("keyword") or "").strip(),
            volume=_to_int(row.get("volume"), 0),
            difficulty=_to_int(row.get("keyword_difficulty", row.get("difficulty"))),
            cpc=_to_float(row.get("cpc")),
            best_position=_to_int(row.get("best_position", row.get("position"))),
        )

    @property
    def word_count(self) -> int:
        return len(self.keyword.split())


@dataclass
class KeywordAnalysis:
    """
    Judgement attached to a keyword after classification or AI evaluation.

    Produced once per keyword. Only `strategic_context` is filled in later,
    during enrichment.
    """
    intent: str
    commercial_value: int = 0
    vertical_relevance: Optional[int] = None
    relevance_score: Optional[int] = None
    is_branded: bool = False
    brand_name: Optional[str] = None
    category: Optional[str] = None
    content_cluster: str = "general_business"
    reasoning: Optional[str] = None
    strategic_context: Optional[str] = None
    ai_powered: bool = False

    @classmethod
    def from_ai(cls, payload: Dict[str, Any], content_cluster: str = "general_business") -> "KeywordAnalysis":
        """
        Build from a parsed LLM JSON object.

        Raises:
            ValueError: If the payload lacks an intent or a numeric commercial value
        """
        if not isinstance(payload, dict):
            raise ValueError("AI evaluation is not a JSON object")

        intent = payload.get("intent")
        commercial_value = _to_int(payload.get("commercial_value"))
        if not intent or commercial_value is None:
            raise ValueError(f"AI evaluation missing intent or commercial_value: {payload}")

        vertical = _to_int(payload.get("vertical_relevance"))

        return cls(
            intent=str(intent),
            commercial_value=max(0, min(100, commercial_value)),
            vertical_relevance=max(0, min(100, vertical)) if vertical is not None else None,
            is_branded=bool(payload.get("is_branded", False)),
            brand_name=payload.get("brand_name"),
            category=payload.get("category"),
            content_cluster=content_cluster,
            reasoning=payload.get("reasoning"),
            ai_powered=True,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON shape exposed under `aiInsights`."""
        data: Dict[str, Any] = {
            "aiPowered": self.ai_powered,
            "contentCluster": self.content_cluster,
        }
        if self.ai_powered:
            data.update({
                "category": self.category,
                "is_branded": self.is_branded,
                "brand_name": self.brand_name,
                "intent": self.intent,
                "commercial_value": self.commercial_value,
                "reasoning": self.reasoning,
            })
            if self.vertical_relevance is not None:
                data["vertical_relevance"] = self.vertical_relevance
        else:
            data["relevanceScore"] = self.relevance_score
            data["commercialIntent"] = self.intent
        if self.strategic_context is not None:
            data["strategicContext"] = self.strategic_context
        return data


@dataclass
class Opportunity:
    """A keyword judged worth pursuing."""
    keyword: str
    search_volume: int
    difficulty: Optional[int]
    competitor_position: Optional[int]
    own_position: Optional[int]
    score: int
    cpc: float
    estimated_traffic: int
    monthly_revenue: int
    currency: str
    analysis: KeywordAnalysis
    revenue_model: Dict[str, Any] = field(default_factory=dict)
    paid_insights: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        insights = self.analysis.to_dict()
        insights["revenueModel"] = self.revenue_model
        insights["paidInsights"] = self.paid_insights
        return {
            "keyword": self.keyword,
            "searchVolume": self.search_volume,
            "difficulty": self.difficulty,
            "competitorPosition": self.competitor_position,
            "sagePosition": self.own_position,
            "score": self.score,
            "cpc": self.cpc,
            "estimatedTraffic": self.estimated_traffic,
            "monthlyRevenue": self.monthly_revenue,
            "currency": self.currency,
            "aiInsights": insights,
        }
