#!/usr/bin/env python3
"""Entry point for the Timeserver API server."""

import logging
import os
import sys

import uvicorn

from timeserver.config import Config

logger = logging.getLogger("timeserver")


def main(workspace_path: str | None = None):
    """Run the API server.

    Args:
        workspace_path: Workspace holding config.yaml. Defaults to the first
            command-line argument, then WORKSPACE_DIR, then ./workspace.
    """
    if workspace_path is None and len(sys.argv) > 1:
        workspace_path = sys.argv[1]

    config = Config(workspace_path)
    api = config.data.api

    logging.basicConfig(
        level=logging.DEBUG if api.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # The factory builds its own Config, possibly in a reloader subprocess.
    os.environ["WORKSPACE_DIR"] = os.path.abspath(config.workspace_path)

    logger.info(f"Serving {config.data.server.name} on http://{api.host}:{api.port}/mcp")
    uvicorn.run(
        "timeserver.api:create_api_app",
        host=api.host,
        port=api.port,
        reload=api.debug,
        log_level="debug" if api.debug else "info",
        factory=True,
    )


if __name__ == "__main__":
    main()
