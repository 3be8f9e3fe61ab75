"""Demand Synth agent: configuration, orchestration and CLI.

Example:
    import asyncio

    from demandsynth.agent import (
        MarketingEventsSynthesisAgent,
        load_integration_config,
        load_synthesis_config,
    )

    agent = MarketingEventsSynthesisAgent(load_integration_config(), load_synthesis_config())
    try:
        result = asyncio.run(agent.run())
    finally:
        agent.close()
"""

from demandsynth.agent.agent import AgentRunResult, MarketingEventsSynthesisAgent
from demandsynth.agent.config import (
    ConfigurationError,
    GA4Settings,
    GoogleAdsSettings,
    HubSpotSettings,
    IntegrationConfig,
    SearchConsoleSettings,
    load_integration_config,
    load_synthesis_config,
    validate_config,
)

__all__ = [
    # Agent
    "AgentRunResult",
    "MarketingEventsSynthesisAgent",
    # Config
    "ConfigurationError",
    "GA4Settings",
    "GoogleAdsSettings",
    "HubSpotSettings",
    "IntegrationConfig",
    "SearchConsoleSettings",
    "load_integration_config",
    "load_synthesis_config",
    "validate_config",
]
