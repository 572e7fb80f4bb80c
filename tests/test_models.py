"""
Test Suite for Data Models
"""

import pytest
from src.models import RawKeyword, KeywordAnalysis, Opportunity


class TestRawKeyword:
    """Test building keyword rows from provider data."""

    def test_from_organic_row(self):
        raw = RawKeyword.from_row({
            "keyword": " payroll software ",
            "volume": 1200,
            "keyword_difficulty": 35,
            "cpc": 420,
            "best_position": 3,
        })
        assert raw.keyword == "payroll software"
        assert raw.volume == 1200
        assert raw.difficulty == 35
        assert raw.cpc == 420.0
        assert raw.best_position == 3
        assert raw.word_count == 2

    def test_from_matching_terms_row(self):
        raw = RawKeyword.from_row({"keyword": "close checklist", "volume": 900, "difficulty": 12})
        assert raw.difficulty == 12
        assert raw.best_position is None

    def test_missing_fields(self):
        raw = RawKeyword.from_row({"keyword": "payroll software", "volume": None, "cpc": None})
        assert raw.volume == 0
        assert raw.difficulty is None
        assert raw.cpc is None

    def test_non_numeric_fields(self):
        raw = RawKeyword.from_row({
            "keyword": "payroll software",
            "volume": "lots",
            "keyword_difficulty": "n/a",
            "cpc": "n/a",
        })
        assert raw.volume == 0
        assert raw.difficulty is None
        assert raw.cpc is None

    def test_is_immutable(self):
        raw = RawKeyword(keyword="payroll software")
        with pytest.raises(AttributeError):
            raw.volume = 10


class TestKeywordAnalysis:
    """Test AI payload parsing and serialization."""

    def test_from_ai_clamps_values(self):
        analysis = KeywordAnalysis.from_ai(
            {"intent": "Comparison", "commercial_value": "-5", "vertical_relevance": 180},
            content_cluster="accounting_software",
        )
        assert analysis.commercial_value == 0
        assert analysis.vertical_relevance == 100
        assert analysis.ai_powered is True

    def test_from_ai_rejects_non_object(self):
        with pytest.raises(ValueError):
            KeywordAnalysis.from_ai(["intent"])

    def test_heuristic_to_dict(self):
        data = KeywordAnalysis(intent="commercial", relevance_score=90).to_dict()
        assert data == {
            "aiPowered": False,
            "contentCluster": "general_business",
            "relevanceScore": 90,
            "commercialIntent": "commercial",
        }

    def test_ai_to_dict_includes_strategic_context(self, ai_analysis):
        ai_analysis.strategic_context = "Lead with the checklist."
        data = ai_analysis.to_dict()
        assert data["intent"] == "Transactional"
        assert data["vertical_relevance"] == 100
        assert data["strategicContext"] == "Lead with the checklist."


class TestOpportunity:
    """Test the output row shape."""

    def test_to_dict(self, ai_analysis):
        opportunity = Opportunity(
            keyword="payroll software pricing",
            search_volume=2400,
            difficulty=25,
            competitor_position=2,
            own_position=None,
            score=90,
            cpc=3.5,
            estimated_traffic=192,
            monthly_revenue=9600,
            currency="$",
            analysis=ai_analysis,
            revenue_model={"ctr": 0.08},
            paid_insights={"paidStrategy": "both"},
        )

        data = opportunity.to_dict()

        assert data["sagePosition"] is None
        assert data["searchVolume"] == 2400
        assert data["aiInsights"]["revenueModel"] == {"ctr": 0.08}
        assert data["aiInsights"]["paidInsights"] == {"paidStrategy": "both"}
        assert data["aiInsights"]["aiPowered"] is True
