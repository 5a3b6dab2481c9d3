"""HTTP entry-point.

The primary interface is the MCP server (stdio or SSE).  This module
re-exports the SSE application for ``python -m insights_mcp.main`` and
``uvicorn insights_mcp.main:app`` convenience.
"""

from insights_mcp.mcp.sse_server import app  # noqa: F401 – re-export for uvicorn

if __name__ == "__main__":
    import logging
    import uvicorn
    from insights_mcp.config import settings

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    uvicorn.run(
        "insights_mcp.main:app",
        host=settings.fastapi_host,
        port=settings.fastapi_port,
        reload=(settings.app_env == "development"),
    )
