"""
Demand Synth MCP Server - Model Context Protocol server for the synthesis agent.

Exposes the marketing events synthesis agent as MCP tools:
- run_synthesis: ingest, synthesize and sync marketing events
- synthesize_insights: ingest and synthesize without writing events
- list_marketing_events: list the events currently stored in HubSpot

Usage:
    # Via CLI
    demandsynth-mcp

    # Via Python
    from demandsynth_mcp import server
    server.main()

    # Via .mcp.json
    {
        "mcpServers": {
            "demandsynth": {
                "command": "demandsynth-mcp"
            }
        }
    }
"""

__version__ = "0.1.0"
