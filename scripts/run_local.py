#!/usr/bin/env python3
"""
Local Analysis Script

Run one analysis job in-process, without the HTTP server.

Usage:
    python scripts/run_local.py --competitor xero.com
    python scripts/run_local.py --competitor xero.com --ai
    python scripts/run_local.py --topic "month end close" --product sage_intacct --language de
"""

import asyncio
import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

load_dotenv()

from src.analyzer import ClaudeClient, KeywordAnalyst
from src.collector import AhrefsClient
from src.persistence import JobStore
from src.pipeline import AnalysisOrchestrator, AnalysisOptions, run_job_safely
from src.utils import get_settings


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(),
        ]
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


async def run_analysis(options: AnalysisOptions, output_file: str = None):
    """Run a single job and print the opportunities."""
    settings = get_settings()

    if not settings.AHREFS_API_KEY:
        print("ERROR: Missing AHREFS_API_KEY in .env")
        return None

    analyst = None
    if settings.ANTHROPIC_API_KEY:
        analyst = KeywordAnalyst(
            ClaudeClient(api_key=settings.ANTHROPIC_API_KEY, model=settings.CLAUDE_MODEL),
            vendor=settings.VENDOR_NAME,
        )

    print(f"\n{'='*60}")
    print(f"KEYWORD OPPORTUNITY ENGINE - LOCAL RUN")
    print(f"{'='*60}")
    print(f"Mode: {options.mode.value}")
    print(f"Target: {options.topic or options.competitor}")
    print(f"Country: {options.country}")
    print(f"{'='*60}\n")

    start_time = datetime.now()
    store = JobStore()
    job = store.create(options.to_dict())

    async with AhrefsClient(api_key=settings.AHREFS_API_KEY, timeout=settings.API_TIMEOUT) as client:
        orchestrator = AnalysisOrchestrator(
            store=store,
            keywords=client,
            analyst=analyst,
            vendor_name=settings.VENDOR_NAME,
            vendor_domain=settings.VENDOR_DOMAIN,
            rank_check_delay=settings.RANK_CHECK_DELAY_SECONDS,
        )
        await run_job_safely(orchestrator, job.job_id, options)

    duration = (datetime.now() - start_time).total_seconds()
    result = store.get(job.job_id).to_dict()

    print(f"\n{'='*60}")
    print(f"ANALYSIS {result['status'].upper()}")
    print(f"{'='*60}")
    print(f"Duration: {duration:.1f} seconds")

    if result.get("error"):
        print(f"Error: {result['error']}")
    else:
        opportunities = result["data"]["opportunities"]
        print(f"Opportunities: {len(opportunities)}\n")
        for opp in opportunities:
            print(
                f"  {opp['score']:3d} | {opp['keyword'][:40]:40s} | vol: {opp['searchVolume']:,}"
                f" | rev: {opp['currency']}{opp['monthlyRevenue']:,}/mo"
            )

    if output_file:
        output_path = Path(output_file)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w") as f:
            json.dump(result, f, indent=2, default=str)
        print(f"\nResults saved to: {output_path}")

    return result


def main():
    """Main entry point."""
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Run a keyword opportunity analysis locally")
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--competitor", help="Competitor domain (e.g., xero.com)")
    target.add_argument("--topic", help="Market topic for topic expansion")
    parser.add_argument("--country", default="us", help="Country code (default: us)")
    parser.add_argument("--min-volume", type=int, default=100)
    parser.add_argument("--keyword-limit", type=int, default=100)
    parser.add_argument("--results-limit", type=int, default=20)
    parser.add_argument("--ai", action="store_true", help="AI-assisted competitor teardown")
    parser.add_argument("--product", default=settings.DEFAULT_PRODUCT, help="Target product")
    parser.add_argument("--language", help="Output language for AI text (e.g., de)")
    parser.add_argument("--output", "-o", help="Save job result to JSON file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")

    args = parser.parse_args()
    setup_logging(args.verbose)

    options = AnalysisOptions(
        competitor=args.competitor,
        topic=args.topic,
        min_volume=args.min_volume,
        country=args.country,
        keyword_limit=args.keyword_limit,
        results_limit=args.results_limit,
        enable_ai=args.ai,
        target_product=args.product,
        language=args.language,
    )
    asyncio.run(run_analysis(options, args.output))


if __name__ == "__main__":
    main()
