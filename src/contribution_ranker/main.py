from __future__ import annotations

import logging
import os

import uvicorn

from contribution_ranker.infrastructure.config import get_settings

logger = logging.getLogger("contribution_ranker")


def main() -> None:
    """Serve the ranking API with uvicorn; HOST / PORT override the settings."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )
    host = os.environ.get("HOST", settings.host)
    port = int(os.environ.get("PORT", settings.port))
    logger.info(
        "Starting Contribution Ranker on %s:%d (damping %.2f, path %d-%d steps)",
        host,
        port,
        settings.damping_factor,
        settings.min_path_length,
        settings.max_path_length,
    )
    uvicorn.run(
        "contribution_ranker.interface.app:create_app",
        factory=True,
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
