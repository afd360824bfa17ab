"""Server bootstrap — TLS credential check, then uvicorn over HTTPS."""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from pathlib import Path

import uvicorn

from meadowlark.app import build_app
from meadowlark.config import Settings, get_settings
from meadowlark.exceptions import ConfigurationError, MissingCredentials
from meadowlark.isolation import FaultIsolation
from meadowlark.logging_config import setup_logging

logger = logging.getLogger(__name__)


def check_credentials(settings: Settings) -> tuple[Path, Path]:
    """Return the key and certificate paths, or raise ``MissingCredentials``."""
    key_file, cert_file = settings.ssl_key_file, settings.ssl_cert_file
    if not key_file.is_file() or not cert_file.is_file():
        raise MissingCredentials(str(key_file), str(cert_file))
    return key_file, cert_file


def start_server(
    settings: Settings | None = None,
    *,
    disconnect_worker: Callable[[], None] | None = None,
) -> None:
    """Start the HTTPS listener.

    Supervisors running several workers pass ``disconnect_worker`` so a
    failing worker can tell them to stop routing requests to it. Exits
    with status 1, without binding, on missing TLS files or an unknown
    environment.
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    isolation = FaultIsolation(disconnect_worker=disconnect_worker)
    try:
        key_file, cert_file = check_credentials(settings)
        app = build_app(settings, isolation=isolation)
    except MissingCredentials as exc:
        logger.error(
            "One or both of the SSL cert or key are missing:\n\t%s\n\t%s\n"
            "You can generate these files using openssl.",
            *exc.paths,
        )
        sys.exit(1)
    except ConfigurationError as exc:
        logger.error("%s", exc)
        sys.exit(1)

    config = uvicorn.Config(
        app,
        host=settings.host,
        port=settings.port,
        ssl_keyfile=str(key_file),
        ssl_certfile=str(cert_file),
        access_log=False,
        log_level=settings.log_level.lower(),
    )
    server = uvicorn.Server(config)

    def close_listener() -> None:
        server.should_exit = True

    isolation.close_listener = close_listener

    logger.info(
        "Server started in %s mode on port %d using HTTPS; press Ctrl-C to terminate.",
        settings.env,
        settings.port,
    )
    server.run()


def main() -> None:
    start_server()
