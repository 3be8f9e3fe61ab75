"""Command line entry point for the marketing events synthesis agent."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from dotenv import load_dotenv

from demandsynth.agent.agent import AgentRunResult, MarketingEventsSynthesisAgent
from demandsynth.agent.config import (
    load_integration_config,
    load_synthesis_config,
    validate_config,
)
from demandsynth.signals.schema import QualifiedInsight
from demandsynth.synthesis.analysis import SignalReport

logger = logging.getLogger(__name__)

TOP_INSIGHTS = 5


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="demandsynth",
        description="Synthesize demand insights and sync them as HubSpot marketing events.",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--synthesize-only",
        action="store_true",
        help="Ingest and synthesize insights without writing marketing events",
    )
    mode.add_argument(
        "--list-events",
        action="store_true",
        help="List the marketing events currently stored in HubSpot",
    )
    mode.add_argument(
        "--analyze",
        action="store_true",
        help="Ingest signals and print per-source analysis without writing marketing events",
    )
    parser.add_argument(
        "--conversion-value",
        type=float,
        default=None,
        help="Value of one conversion; adds campaign ROI to --analyze output",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def print_insights(insights: list[QualifiedInsight], limit: int = TOP_INSIGHTS) -> None:
    """Print the highest scoring insights with their headline metrics."""
    if not insights:
        return
    print(f"\nTop {min(limit, len(insights))} insights:")
    for index, insight in enumerate(insights[:limit], start=1):
        metrics = insight.metrics
        print(f"{index}. [{insight.type.value}] {insight.name} (score: {insight.score:.2f})")
        print(
            f"   Metrics: {metrics.total_impressions} impressions, "
            f"{metrics.total_clicks} clicks, {metrics.total_conversions} conversions"
        )


def print_report(report: SignalReport, limit: int = TOP_INSIGHTS) -> None:
    """Print a summary of a signal analysis report."""
    print("\n=== Signal Analysis ===")
    print(f"High-performing queries: {len(report.high_performing_queries)}")
    for row in report.high_performing_queries[:limit]:
        print(f"- {row.query} ({row.impressions} impressions, CTR {row.ctr:.2%})")
    print(f"Pages analyzed: {len(report.pages)}")
    print(f"Top keywords: {len(report.top_keywords)}")
    for row in report.top_keywords[:limit]:
        print(f"- {row.keyword} [{row.campaign_name}] ({row.conversions} conversions)")
    for name, metrics in report.campaigns.items():
        line = (
            f"Campaign {name}: {metrics.total_clicks} clicks, "
            f"{metrics.total_conversions} conversions"
        )
        if report.campaign_roi is not None:
            line += f", ROI {report.campaign_roi[name]:.2f}"
        print(line)
    for (from_stage, to_stage), count in report.transitions.items():
        print(f"Transition {from_stage} -> {to_stage}: {count}")
    print(f"Event patterns: {len(report.event_patterns)}")


def print_run_result(result: AgentRunResult) -> None:
    print("\n=== Results ===")
    print(f"Total insights generated: {len(result.insights)}")
    print(f"Marketing events created: {len(result.events_synced.created)}")
    print(f"Marketing events updated: {len(result.events_synced.updated)}")
    print(f"Marketing events deleted: {len(result.events_synced.deleted)}")
    print_insights(result.insights)


async def run_agent(args: argparse.Namespace) -> None:
    logger.info("Loading configuration")
    integration_config = load_integration_config()
    synthesis_config = load_synthesis_config()
    validate_config(integration_config)

    agent = MarketingEventsSynthesisAgent(integration_config, synthesis_config)
    try:
        if args.list_events:
            records = await agent.get_current_events()
            print(f"Marketing events: {len(records)}")
            for record in records:
                name = record.payload.get("eventName", "")
                print(f"- {record.id} [{record.external_event_id}] {name}")
        elif args.analyze:
            print_report(await agent.analyze_signals(conversion_value=args.conversion_value))
        elif args.synthesize_only:
            insights = await agent.synthesize_only()
            print(f"Total insights generated: {len(insights)}")
            print_insights(insights)
        else:
            print_run_result(await agent.run())
    finally:
        agent.close()


def main(argv: list[str] | None = None) -> None:
    """Run the agent from the command line; exits with status 1 on failure."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    load_dotenv()

    try:
        asyncio.run(run_agent(args))
    except Exception:
        logger.exception("Error running agent")
        sys.exit(1)

    print("\nAgent completed successfully!")


if __name__ == "__main__":
    main()
