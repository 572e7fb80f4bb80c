"""
Test Suite for the Analysis Orchestrator

End-to-end runs of both flows against mocked gateways.
"""

import pytest
from unittest.mock import AsyncMock, patch

from src.analyzer import LLMResponseError
from src.collector import AhrefsError
from src.models import KeywordAnalysis
from src.persistence import JobStatus
from src.pipeline import (
    AnalysisOrchestrator,
    AnalysisOptions,
    PipelineMode,
    CRITICAL_ERROR_MESSAGE,
    SEED_GENERATION_FAILED,
    run_job_safely,
)


async def run_options(orchestrator, options):
    job = orchestrator.store.create(options.to_dict())
    await run_job_safely(orchestrator, job.job_id, options)
    return job


class TestAnalysisOptions:
    """Mode selection from request options."""

    def test_modes(self):
        assert AnalysisOptions(competitor="xero.com").mode == PipelineMode.HEURISTIC
        assert AnalysisOptions(competitor="xero.com", enable_ai=True).mode == PipelineMode.LEGACY_AI
        assert AnalysisOptions(topic="month end close").mode == PipelineMode.TOPIC_EXPANSION

    def test_to_dict_includes_mode(self):
        data = AnalysisOptions(topic="month end close").to_dict()
        assert data["mode"] == "topic_expansion"
        assert data["topic"] == "month end close"


class TestCompetitorTeardown:
    """Flow A without AI."""

    @pytest.mark.asyncio
    async def test_only_relevant_keyword_is_published(
        self, orchestrator, mock_ahrefs_client, mock_analyst, organic_rows
    ):
        """One row is irrelevant, one is below min volume: exactly one is scored."""
        mock_ahrefs_client.get_organic_keywords.return_value = organic_rows

        job = await run_options(orchestrator, AnalysisOptions(competitor="xero.com", min_volume=100))

        assert job.status == JobStatus.COMPLETE
        data = job.data
        assert data["totalKeywords"] == 3
        assert data["aiAnalysis"] == {"totalAnalyzed": 3, "aiMode": False}
        assert len(data["opportunities"]) == 1

        opportunity = data["opportunities"][0]
        assert opportunity["keyword"] == "payroll software pricing"
        assert opportunity["score"] == 90
        assert opportunity["sagePosition"] is None
        assert opportunity["competitorPosition"] == 2
        assert opportunity["cpc"] == 3.5
        assert opportunity["estimatedTraffic"] == 192
        assert opportunity["aiInsights"]["relevanceScore"] == 90
        assert opportunity["aiInsights"]["commercialIntent"] == "transactional"
        assert opportunity["aiInsights"]["aiPowered"] is False
        assert opportunity["aiInsights"]["paidInsights"]["paidStrategy"] == "both"

        debug = data["debug"]
        assert debug["filtered"]["irrelevant"] == 1
        assert debug["filtered"]["lowVolume"] == 1
        mock_ahrefs_client.find_domain_position.assert_awaited_once_with(
            "payroll software pricing", "sage.com", "us"
        )
        mock_analyst.usage_summary.assert_not_called()

    @pytest.mark.asyncio
    async def test_vendor_rank_is_rescored(self, orchestrator, mock_ahrefs_client, organic_rows):
        mock_ahrefs_client.get_organic_keywords.return_value = organic_rows[:1]
        mock_ahrefs_client.find_domain_position.return_value = 1

        job = await run_options(orchestrator, AnalysisOptions(competitor="xero.com"))

        opportunity = job.data["opportunities"][0]
        assert opportunity["sagePosition"] == 1
        assert opportunity["score"] == 80

    @pytest.mark.asyncio
    async def test_rank_check_failures_leave_rank_null(self, orchestrator, mock_ahrefs_client, organic_rows):
        rows = organic_rows + [{
            "keyword": "accounting software pricing",
            "volume": 1200,
            "keyword_difficulty": 45,
            "cpc": None,
            "best_position": 6,
        }]
        mock_ahrefs_client.get_organic_keywords.return_value = rows
        mock_ahrefs_client.find_domain_position.side_effect = AhrefsError("rate limited", status_code=429)

        job = await run_options(orchestrator, AnalysisOptions(competitor="xero.com"))

        assert job.status == JobStatus.COMPLETE
        opportunities = job.data["opportunities"]
        assert len(opportunities) == 2
        assert all(o["sagePosition"] is None for o in opportunities)
        assert [o["score"] for o in opportunities] == [90, 61]
        assert opportunities[1]["cpc"] == 5.0
        assert job.data["debug"]["rankCheckFailures"] == 2

    @pytest.mark.asyncio
    async def test_malformed_cpc_does_not_fail_job(self, orchestrator, mock_ahrefs_client, organic_rows):
        mock_ahrefs_client.get_organic_keywords.return_value = [
            organic_rows[0],
            {
                "keyword": "accounting software pricing",
                "volume": 1200,
                "keyword_difficulty": 45,
                "cpc": "n/a",
                "best_position": 6,
            },
        ]

        job = await run_options(orchestrator, AnalysisOptions(competitor="xero.com"))

        assert job.status == JobStatus.COMPLETE
        opportunities = job.data["opportunities"]
        assert [o["keyword"] for o in opportunities] == [
            "payroll software pricing",
            "accounting software pricing",
        ]
        assert opportunities[0]["cpc"] == 3.5
        assert opportunities[1]["cpc"] == 5.0

    @pytest.mark.asyncio
    async def test_filters_single_word_and_competitor_brand(self, orchestrator, mock_ahrefs_client):
        mock_ahrefs_client.get_organic_keywords.return_value = [
            {"keyword": "payroll", "volume": 10000},
            {"keyword": "xero accounting software", "volume": 9000},
        ]

        job = await run_options(orchestrator, AnalysisOptions(competitor="xero.com"))

        assert job.data["opportunities"] == []
        assert job.data["debug"]["filtered"]["singleWord"] == 1
        assert job.data["debug"]["filtered"]["competitorBrand"] == 1
        mock_ahrefs_client.find_domain_position.assert_not_called()

    @pytest.mark.asyncio
    async def test_results_limit_caps_rank_checks(self, orchestrator, mock_ahrefs_client):
        mock_ahrefs_client.get_organic_keywords.return_value = [
            {"keyword": "payroll software pricing", "volume": 2400, "keyword_difficulty": 25},
            {"keyword": "accounting software pricing", "volume": 1200, "keyword_difficulty": 45},
            {"keyword": "invoice software pricing", "volume": 700, "keyword_difficulty": 65},
        ]

        job = await run_options(
            orchestrator, AnalysisOptions(competitor="xero.com", results_limit=2)
        )

        assert mock_ahrefs_client.find_domain_position.await_count == 2
        keywords = [o["keyword"] for o in job.data["opportunities"]]
        assert keywords == ["payroll software pricing", "accounting software pricing"]

    @pytest.mark.asyncio
    async def test_delay_between_rank_checks(self, job_store, mock_ahrefs_client, organic_rows):
        rows = [dict(organic_rows[0], keyword=f"payroll software pricing {i}") for i in range(3)]
        mock_ahrefs_client.get_organic_keywords.return_value = rows
        orchestrator = AnalysisOrchestrator(job_store, mock_ahrefs_client, rank_check_delay=0.6)

        with patch("src.pipeline.orchestrator.asyncio.sleep", new=AsyncMock()) as sleep:
            await run_options(orchestrator, AnalysisOptions(competitor="xero.com"))

        assert sleep.await_count == 2
        sleep.assert_awaited_with(0.6)

    @pytest.mark.asyncio
    async def test_empty_fetch_completes_with_no_opportunities(self, orchestrator, mock_ahrefs_client):
        job = await run_options(orchestrator, AnalysisOptions(competitor="xero.com"))

        assert job.status == JobStatus.COMPLETE
        assert job.data["totalKeywords"] == 0
        assert job.data["opportunities"] == []

    @pytest.mark.asyncio
    async def test_fetch_failure_is_fatal(self, orchestrator, mock_ahrefs_client):
        mock_ahrefs_client.get_organic_keywords.side_effect = AhrefsError("API request failed: 401", status_code=401)

        job = await run_options(orchestrator, AnalysisOptions(competitor="xero.com"))

        assert job.status == JobStatus.ERROR
        assert "xero.com" in job.error
        assert job.data is None

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_caught(self, orchestrator, mock_ahrefs_client):
        mock_ahrefs_client.get_organic_keywords.side_effect = RuntimeError("boom")

        job = await run_options(orchestrator, AnalysisOptions(competitor="xero.com"))

        assert job.status == JobStatus.ERROR
        assert job.error == CRITICAL_ERROR_MESSAGE


class TestAiCompetitorTeardown:
    """Flow A with AI evaluation."""

    @pytest.mark.asyncio
    async def test_evaluation_failure_skips_keyword(
        self, orchestrator, mock_ahrefs_client, mock_analyst, organic_rows, ai_analysis
    ):
        mock_ahrefs_client.get_organic_keywords.return_value = organic_rows
        mock_analyst.evaluate_keyword.side_effect = [ai_analysis, LLMResponseError("bad json")]

        job = await run_options(
            orchestrator, AnalysisOptions(competitor="xero.com", enable_ai=True, language="de")
        )

        assert job.status == JobStatus.COMPLETE
        assert job.data["aiAnalysis"]["aiMode"] is True
        assert job.data["debug"]["evaluationFailures"] == 1
        assert len(job.data["opportunities"]) == 1

        insights = job.data["opportunities"][0]["aiInsights"]
        assert insights["aiPowered"] is True
        assert insights["intent"] == "Transactional"
        assert insights["strategicContext"] == "Position Sage as the simpler option."
        mock_analyst.evaluate_keyword.assert_any_await("payroll software pricing", "de")
        mock_analyst.usage_summary.assert_called_once()

    @pytest.mark.asyncio
    async def test_ping_failure_is_fatal(self, orchestrator, mock_ahrefs_client, mock_analyst):
        mock_analyst.ping.return_value = False

        job = await run_options(orchestrator, AnalysisOptions(competitor="xero.com", enable_ai=True))

        assert job.status == JobStatus.ERROR
        assert job.error == "AI service unavailable."
        mock_ahrefs_client.get_organic_keywords.assert_not_called()
        mock_analyst.usage_summary.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_analyst_is_fatal(self, job_store, mock_ahrefs_client):
        orchestrator = AnalysisOrchestrator(job_store, mock_ahrefs_client, analyst=None, rank_check_delay=0)

        job = await run_options(orchestrator, AnalysisOptions(competitor="xero.com", enable_ai=True))

        assert job.status == JobStatus.ERROR
        assert job.error == "AI service unavailable."


class TestTopicExpansion:
    """Flow B."""

    @pytest.fixture
    def topic_options(self):
        return AnalysisOptions(
            topic="month end close",
            target_product="sage_intacct",
            country="gb",
            keyword_limit=50,
            language="de",
        )

    @pytest.mark.asyncio
    async def test_full_run(
        self,
        orchestrator,
        mock_ahrefs_client,
        mock_analyst,
        topic_options,
        topic_deconstruction,
        matching_term_rows,
    ):
        seeds = ["month end close process", "close checklist"]
        mock_analyst.deconstruct_topic.return_value = topic_deconstruction
        mock_analyst.generate_seed_keywords.return_value = seeds
        mock_ahrefs_client.get_matching_terms.return_value = matching_term_rows
        mock_analyst.evaluate_topic_keyword.side_effect = [
            KeywordAnalysis(intent="Informational", commercial_value=70, vertical_relevance=90, ai_powered=True),
            KeywordAnalysis(intent="Informational", commercial_value=10, vertical_relevance=20, ai_powered=True),
        ]

        job = await run_options(orchestrator, topic_options)

        assert job.status == JobStatus.COMPLETE
        mock_analyst.deconstruct_topic.assert_awaited_once_with("month end close", "sage_intacct", "de")
        mock_ahrefs_client.get_matching_terms.assert_awaited_once_with(seeds, "gb", 50)
        assert mock_ahrefs_client.find_domain_position.await_count == 2

        opportunities = job.data["opportunities"]
        assert len(opportunities) == 1
        opportunity = opportunities[0]
        assert opportunity["keyword"] == "month end close checklist"
        assert opportunity["score"] == 100
        assert opportunity["currency"] == "£"
        assert opportunity["cpc"] == 8.0
        assert opportunity["aiInsights"]["revenueModel"]["tier"] == "mid_market"
        assert opportunity["aiInsights"]["strategicContext"] == "Own the checklist query."

        assert job.data["debug"]["filtered"]["singleWord"] == 1
        assert job.data["debug"]["belowThreshold"] == 1
        assert job.intermediate_data["deconstruction"] == topic_deconstruction
        assert job.intermediate_data["seedKeywords"] == seeds

    @pytest.mark.asyncio
    async def test_empty_seed_list_is_fatal(
        self, orchestrator, mock_ahrefs_client, mock_analyst, topic_options, topic_deconstruction
    ):
        mock_analyst.deconstruct_topic.return_value = topic_deconstruction
        mock_analyst.generate_seed_keywords.return_value = []

        job = await run_options(orchestrator, topic_options)

        assert job.status == JobStatus.ERROR
        assert SEED_GENERATION_FAILED in job.error
        assert job.data is None
        assert job.intermediate_data == {"deconstruction": topic_deconstruction}
        mock_ahrefs_client.get_matching_terms.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [LLMResponseError("bad json"), ValueError("missing vertical_relevance")])
    async def test_evaluation_failure_skips_keyword(
        self,
        orchestrator,
        mock_ahrefs_client,
        mock_analyst,
        topic_options,
        topic_deconstruction,
        matching_term_rows,
        error,
    ):
        mock_analyst.deconstruct_topic.return_value = topic_deconstruction
        mock_analyst.generate_seed_keywords.return_value = ["month end close process"]
        mock_ahrefs_client.get_matching_terms.return_value = matching_term_rows
        mock_analyst.evaluate_topic_keyword.side_effect = [
            error,
            KeywordAnalysis(intent="Informational", commercial_value=70, vertical_relevance=90, ai_powered=True),
        ]

        job = await run_options(orchestrator, topic_options)

        assert job.status == JobStatus.COMPLETE
        assert job.data["debug"]["evaluationFailures"] == 1
        assert job.data["debug"]["analyzed"] == 1
        assert [o["keyword"] for o in job.data["opportunities"]] == ["month end close software"]

    @pytest.mark.asyncio
    async def test_keyword_fetch_failure_is_fatal(
        self, orchestrator, mock_ahrefs_client, mock_analyst, topic_options, topic_deconstruction
    ):
        mock_analyst.deconstruct_topic.return_value = topic_deconstruction
        mock_analyst.generate_seed_keywords.return_value = ["month end close process"]
        mock_ahrefs_client.get_matching_terms.side_effect = AhrefsError(
            "API request failed: 500", status_code=500
        )

        job = await run_options(orchestrator, topic_options)

        assert job.status == JobStatus.ERROR
        assert job.error.startswith("Failed to fetch keyword ideas")
        assert job.data is None
        assert job.intermediate_data["seedKeywords"] == ["month end close process"]
        mock_analyst.evaluate_topic_keyword.assert_not_called()

    @pytest.mark.asyncio
    async def test_deconstruction_failure_is_fatal(self, orchestrator, mock_analyst, topic_options):
        mock_analyst.deconstruct_topic.side_effect = LLMResponseError("Model response is not a JSON object")

        job = await run_options(orchestrator, topic_options)

        assert job.status == JobStatus.ERROR
        assert job.error.startswith("Topic deconstruction failed")

    @pytest.mark.asyncio
    async def test_empty_keyword_fetch_is_fatal(
        self, orchestrator, mock_analyst, topic_options, topic_deconstruction
    ):
        mock_analyst.deconstruct_topic.return_value = topic_deconstruction
        mock_analyst.generate_seed_keywords.return_value = ["month end close process"]

        job = await run_options(orchestrator, topic_options)

        assert job.status == JobStatus.ERROR
        assert job.data is None
