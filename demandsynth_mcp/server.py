"""
Demand Synth MCP Server - Main entry point.

Configuration is read from the environment (and a .env file) on each call,
the same way the demandsynth CLI reads it.
"""

from __future__ import annotations

import logging
from typing import Any

from dotenv import load_dotenv
from fastmcp import FastMCP

logger = logging.getLogger(__name__)

# Initialize server
mcp = FastMCP("Demand Synthesis Agent")

_MAX_DAYS_BACK = 365


def _build_agent(days_back: int | None = None) -> Any:
    """Create an agent from environment configuration.

    Args:
        days_back: Overrides DAYS_BACK when given.
    """
    from demandsynth.agent import (
        MarketingEventsSynthesisAgent,
        load_integration_config,
        load_synthesis_config,
    )
    from demandsynth.synthesis import DateRange

    integration_config = load_integration_config()
    synthesis_config = load_synthesis_config()
    if days_back is not None:
        synthesis_config = synthesis_config.model_copy(
            update={"date_range": DateRange.last_days(days_back)}
        )
    return MarketingEventsSynthesisAgent(integration_config, synthesis_config)


def _check_days_back(days_back: int | None) -> str | None:
    if days_back is not None and not 1 <= days_back <= _MAX_DAYS_BACK:
        return f"days_back must be between 1 and {_MAX_DAYS_BACK}, got {days_back}"
    return None


# =============================================================================
# Synthesis Tools
# =============================================================================


@mcp.tool()
async def run_synthesis(days_back: int | None = None) -> dict:
    """
    Run the full agent: ingest signals, synthesize insights, sync HubSpot events.

    Stored marketing events are reconciled onto the new insights: matching
    events are updated, new insights get events and stale events are deleted.

    Args:
        days_back: Number of days of signals to read (defaults to DAYS_BACK)

    Returns:
        Insight summaries plus the created, updated and deleted event ids
    """
    error = _check_days_back(days_back)
    if error:
        return {"success": False, "error": error}

    try:
        agent = _build_agent(days_back)
    except Exception as e:
        logger.exception("Failed to configure synthesis agent")
        return {"success": False, "error": str(e)}

    try:
        result = await agent.run()
        return {
            "success": True,
            "insight_count": len(result.insights),
            "insights": [insight.to_dict() for insight in result.insights],
            "events_synced": result.events_synced.to_dict(),
        }
    except Exception as e:
        logger.exception("Synthesis run failed")
        return {"success": False, "error": str(e)}
    finally:
        agent.close()


@mcp.tool()
async def synthesize_insights(days_back: int | None = None, limit: int | None = None) -> dict:
    """
    Ingest signals and synthesize qualified insights without writing events.

    Args:
        days_back: Number of days of signals to read (defaults to DAYS_BACK)
        limit: Return only the top N insights

    Returns:
        Ranked insight summaries, highest score first
    """
    error = _check_days_back(days_back)
    if error:
        return {"success": False, "error": error}
    if limit is not None and limit < 1:
        return {"success": False, "error": f"limit must be positive, got {limit}"}

    try:
        agent = _build_agent(days_back)
    except Exception as e:
        logger.exception("Failed to configure synthesis agent")
        return {"success": False, "error": str(e)}

    try:
        insights = await agent.synthesize_only()
        selected = insights[:limit] if limit else insights
        return {
            "success": True,
            "insight_count": len(insights),
            "insights": [insight.to_dict() for insight in selected],
        }
    except Exception as e:
        logger.exception("Insight synthesis failed")
        return {"success": False, "error": str(e)}
    finally:
        agent.close()


@mcp.tool()
async def analyze_signals(
    days_back: int | None = None, conversion_value: float | None = None
) -> dict:
    """
    Ingest signals and report per-source metrics without writing events.

    Args:
        days_back: Number of days of signals to read (defaults to DAYS_BACK)
        conversion_value: Value of one conversion; adds per-campaign ROI

    Returns:
        High-performing queries, page and campaign totals, top keywords,
        lifecycle transition counts and GA4 event patterns
    """
    error = _check_days_back(days_back)
    if error:
        return {"success": False, "error": error}
    if conversion_value is not None and conversion_value < 0:
        return {
            "success": False,
            "error": f"conversion_value must not be negative, got {conversion_value}",
        }

    try:
        agent = _build_agent(days_back)
    except Exception as e:
        logger.exception("Failed to configure synthesis agent")
        return {"success": False, "error": str(e)}

    try:
        report = await agent.analyze_signals(conversion_value=conversion_value)
        return {"success": True, **report.to_dict()}
    except Exception as e:
        logger.exception("Signal analysis failed")
        return {"success": False, "error": str(e)}
    finally:
        agent.close()


@mcp.tool()
async def list_marketing_events() -> dict:
    """
    List the marketing events currently stored in HubSpot.

    Returns:
        Event ids, external ids (the originating insight ids) and names
    """
    try:
        agent = _build_agent()
    except Exception as e:
        logger.exception("Failed to configure synthesis agent")
        return {"success": False, "error": str(e)}

    try:
        records = await agent.get_current_events()
        return {
            "success": True,
            "count": len(records),
            "events": [
                {
                    "id": record.id,
                    "external_event_id": record.external_event_id,
                    "event_name": record.payload.get("eventName"),
                }
                for record in records
            ],
        }
    except Exception as e:
        logger.exception("Listing marketing events failed")
        return {"success": False, "error": str(e)}
    finally:
        agent.close()


# =============================================================================
# Entry Point
# =============================================================================


def main():
    """Run the MCP server."""
    load_dotenv()
    mcp.run()


if __name__ == "__main__":
    main()
