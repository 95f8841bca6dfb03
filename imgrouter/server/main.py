"""CLI argument parsing and uvicorn entry point."""

import logging
import os

from .. import __version__

logger = logging.getLogger(__name__)


def main():
    import argparse
    import uvicorn

    parser = argparse.ArgumentParser(description="imgrouter image generation gateway")
    parser.add_argument("--host", default=os.getenv("IMGROUTER_HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "10001")))
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "INFO").upper(),
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level,
        format="%(levelname)s: %(name)s - %(message)s",
    )

    from ..providers import ImageProviderFactory
    from .app import api

    providers = ", ".join(ImageProviderFactory.get_supported_providers())
    logger.info(f"imgrouter {__version__} listening on port {args.port}")
    logger.info(f"Supported providers: {providers}")

    uvicorn.run(api, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
