"""Run the cart API: python -m cartapi [--addr HOST:PORT] [--data PATH]"""
import argparse
import logging
import sys
from pathlib import Path
import uvicorn
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from cartapi.core.config import settings
from cartapi.core.logging import configure_logging
from cartapi.db import session as db

logger = logging.getLogger("cartapi")


def parse_addr(addr: str) -> tuple:
    """Split HOST:PORT; an empty host binds to the configured HOST."""
    host, sep, port = addr.rpartition(":")
    if not sep or not port.isdigit() or not 0 < int(port) < 65536:
        raise argparse.ArgumentTypeError(f"invalid address {addr!r}, expected HOST:PORT")
    return host or settings.HOST, int(port)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Shopping cart HTTP API")
    parser.add_argument(
        "--addr", type=parse_addr, default=f"{settings.HOST}:{settings.PORT}", help="HTTP bind address"
    )
    parser.add_argument("--data", default=None, help="Path to an existing SQLite database file")
    args = parser.parse_args(argv)

    configure_logging(settings.LOG_LEVEL)

    if args.data:
        # The store must already exist; only the schema is created on startup
        if not Path(args.data).is_file():
            logger.critical("cannot open database file %s", args.data)
            return 1
        db.configure_engine(f"sqlite:///{args.data}")
    try:
        with db.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.critical("cannot open database %s: %s", db.engine.url, exc)
        return 1

    host, port = args.addr

    from cartapi.main import app

    logger.info("HTTP Server starting %s:%s", host, port)
    uvicorn.run(app, host=host, port=port, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
