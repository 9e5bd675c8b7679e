"""Entry point for running the MCP server with ``python -m decent_profile_mcp``."""

from decent_profile_mcp.server import main

if __name__ == "__main__":
    main()
