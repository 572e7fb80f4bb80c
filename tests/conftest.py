"""
Pytest Configuration and Shared Fixtures

Provides common fixtures and configuration for all test modules.
"""

import pytest
from typing import Any, Dict, List
from unittest.mock import MagicMock, AsyncMock

from src.models import KeywordAnalysis
from src.persistence import JobStore
from src.pipeline import AnalysisOrchestrator


# ============================================================================
# Provider Rows
# ============================================================================

@pytest.fixture
def organic_rows() -> List[Dict[str, Any]]:
    """
    Three competitor keywords: one relevant, one irrelevant (login page),
    one below the default minimum volume.
    """
    return [
        {
            "keyword": "payroll software pricing",
            "volume": 2400,
            "keyword_difficulty": 25,
            "cpc": 350,
            "best_position": 2,
        },
        {
            "keyword": "payroll login page",
            "volume": 5000,
            "keyword_difficulty": 10,
            "cpc": 120,
            "best_position": 1,
        },
        {
            "keyword": "payroll tax form",
            "volume": 50,
            "keyword_difficulty": 5,
            "cpc": None,
            "best_position": 3,
        },
    ]


@pytest.fixture
def matching_term_rows() -> List[Dict[str, Any]]:
    """Keyword ideas returned for a topic's seed phrases."""
    return [
        {"keyword": "month end close checklist", "volume": 1900, "difficulty": 12, "cpc": 800},
        {"keyword": "close", "volume": 5000, "difficulty": 60, "cpc": 100},
        {"keyword": "month end close software", "volume": 800, "difficulty": 45, "cpc": 1500},
    ]


@pytest.fixture
def topic_deconstruction() -> Dict[str, Any]:
    return {
        "core_topic": "month end close",
        "sub_topics": ["reconciliation", "accruals"],
        "pain_points": ["manual spreadsheets"],
        "personas": ["controller"],
        "summary": "Closing the books each month.",
    }


# ============================================================================
# Gateway Mocks
# ============================================================================

@pytest.fixture
def mock_ahrefs_client():
    """Keyword data gateway with no data and no vendor rankings."""
    client = MagicMock()
    client.get_organic_keywords = AsyncMock(return_value=[])
    client.get_matching_terms = AsyncMock(return_value=[])
    client.find_domain_position = AsyncMock(return_value=None)
    client.close = AsyncMock()
    return client


@pytest.fixture
def mock_analyst():
    """LLM gateway that is reachable but has no canned answers yet."""
    analyst = MagicMock()
    analyst.vendor = "Sage"
    analyst.ping = AsyncMock(return_value=True)
    analyst.evaluate_keyword = AsyncMock()
    analyst.strategic_context = AsyncMock(return_value="Position Sage as the simpler option.")
    analyst.deconstruct_topic = AsyncMock()
    analyst.generate_seed_keywords = AsyncMock(return_value=[])
    analyst.evaluate_topic_keyword = AsyncMock()
    analyst.strategic_rationale = AsyncMock(return_value="Own the checklist query.")
    analyst.lateral_topics = AsyncMock(return_value=[])
    analyst.core_concept = AsyncMock(side_effect=lambda keyword: keyword)
    analyst.geo_prompts = AsyncMock(return_value=[])
    analyst.usage_summary = MagicMock(return_value={
        "total_calls": 3,
        "input_tokens": 900,
        "output_tokens": 300,
        "total_tokens": 1200,
        "estimated_cost": 0.0072,
    })
    return analyst


@pytest.fixture
def mock_claude_client():
    """Mock Claude client for testing."""
    client = MagicMock()
    client.fast_model = "claude-3-5-haiku-20241022"
    client.ping = AsyncMock(return_value=True)
    client.complete_json = AsyncMock(return_value={})
    client.complete_text = AsyncMock(return_value="")
    return client


# ============================================================================
# Pipeline
# ============================================================================

@pytest.fixture
def job_store() -> JobStore:
    return JobStore()


@pytest.fixture
def orchestrator(job_store, mock_ahrefs_client, mock_analyst) -> AnalysisOrchestrator:
    """Orchestrator wired to mocks, with no delay between rank checks."""
    return AnalysisOrchestrator(
        store=job_store,
        keywords=mock_ahrefs_client,
        analyst=mock_analyst,
        vendor_name="Sage",
        vendor_domain="sage.com",
        rank_check_delay=0,
    )


@pytest.fixture
def ai_analysis() -> KeywordAnalysis:
    """A strong AI judgement for a transactional keyword."""
    return KeywordAnalysis(
        intent="Transactional",
        commercial_value=100,
        vertical_relevance=100,
        category="Problem/Task",
        content_cluster="payroll_management",
        reasoning="Buyers comparing payroll tools.",
        ai_powered=True,
    )


# ============================================================================
# Test Markers
# ============================================================================

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
