# SPDX-License-Identifier: MIT
"""mediaprobe MCP Server - FastMCP server exposing cached ffprobe metadata.

This module initializes the FastMCP server and registers all tools.
Probe logic lives in :mod:`mediaprobe.api` and :mod:`mediaprobe.infrastructure`.
"""

from dataclasses import asdict
from typing import Any

from dotenv import load_dotenv
from mcp.server.fastmcp import FastMCP

from .api import get_cache, probe
from .config import get_settings, logger
from .descriptions import PROBE_CACHE_INFO, PROBE_MEDIA
from .features import get_available_features

# Initialize FastMCP server
mcp = FastMCP("mediaprobe")


# ==================== PROBE TOOLS ====================
@mcp.tool(description=PROBE_MEDIA)
async def probe_media(identifier: str, timeout: float | None = None) -> dict[str, Any]:
    metadata = await probe(identifier, timeout)
    return metadata.model_dump()


@mcp.tool(description=PROBE_CACHE_INFO)
async def probe_cache_info() -> dict[str, int]:
    return asdict(get_cache().info())


# ==================== SERVER ENTRYPOINT ====================
def main():
    """Run the MCP server.

    Settings are read after ``.env`` is loaded so values there take effect.
    """
    load_dotenv()  # Load environment variables at runtime
    settings = get_settings()
    features = get_available_features(settings.ffprobe_path)
    logger.info("Starting mediaprobe MCP server over stdio (features: %s)", features)
    mcp.run()


if __name__ == "__main__":
    main()
