#!/usr/bin/env python3
"""CLI entry point for the NIM proxy"""
import argparse
import os

import uvicorn

from nim_proxy.core.config import load_config
from nim_proxy.core.logging import setup_logging, get_logger


def main():
    """Main entry point"""
    # Initialize logging early
    setup_logging(log_level="INFO")
    logger = get_logger()

    parser = argparse.ArgumentParser(description="OpenAI to NVIDIA NIM Proxy Server")
    parser.add_argument(
        "--config",
        type=str,
        default="config.yaml",
        help="Path to configuration file (default: config.yaml)",
    )
    args = parser.parse_args()

    # The app reads its configuration through CONFIG_PATH
    os.environ["CONFIG_PATH"] = args.config
    config = load_config(args.config)

    host = os.environ.get("HOST", config.server.host)
    port = int(os.environ.get("PORT", config.server.port))

    logger.info(f"Using config file: {args.config}")
    logger.info(f"Listening on {host}:{port}")
    logger.info(f"Health check: http://{host}:{port}/health")

    uvicorn.run(
        "nim_proxy.main:app",
        host=host,
        port=port,
        log_config=None,  # loguru owns logging
        access_log=True,
    )


if __name__ == "__main__":
    main()
