"""Run the Decent profile MCP server over Streamable HTTP."""

import logging
import os
import sys

if __name__ == "__main__":
    from decent_profile_mcp.server import mcp

    log_level = os.environ.get("FASTMCP_LOG_LEVEL", "INFO")
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    # Constructor defaults win over FASTMCP_* variables, so set them here
    mcp.settings.host = os.environ.get("FASTMCP_HOST", "0.0.0.0")
    mcp.settings.port = int(os.environ.get("FASTMCP_PORT", "8080"))
    mcp.settings.log_level = log_level

    # Accept Host headers other than localhost when bound to 0.0.0.0
    mcp.settings.transport_security = None

    logging.getLogger(__name__).info(
        f"Starting Decent profile MCP server on {mcp.settings.host}:{mcp.settings.port} via Streamable HTTP"
    )
    mcp.run("streamable-http")
