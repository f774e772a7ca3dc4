"""Application entrypoint."""

from __future__ import annotations

import argparse

import uvicorn

from app.config import load_config
from app.logger import setup_logger


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="MEXC dashboard relay server")
    parser.add_argument("--config", default=None, help="path to config.yml (default: $MEXC_RELAY_CONFIG)")
    args = parser.parse_args(argv)

    config = load_config(args.config)
    logger = setup_logger(config.logging.dir, config.logging.level)

    from web.server import create_app

    app = create_app(config)
    logger.info("Serving relay on {}:{}", config.server.host, config.server.port)
    uvicorn_level = "info" if config.logging.level == "SUCCESS" else config.logging.level.lower()
    uvicorn.run(
        app,
        host=config.server.host,
        port=config.server.port,
        log_config=None,
        log_level=uvicorn_level,
    )


if __name__ == "__main__":
    main()
