"""Process-wide logging setup for the API server."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

_configured = False


def configure_logging(level: str = "INFO") -> None:
    """Install a basic stream handler once; later calls only adjust the level."""
    global _configured
    resolved = logging.getLevelName(level.upper()) if isinstance(level, str) else level
    if not isinstance(resolved, int):
        resolved = logging.INFO
    if not _configured:
        logging.basicConfig(level=resolved, format=LOG_FORMAT)
        _configured = True
    logging.getLogger("roro_engine").setLevel(resolved)
    logging.getLogger("roro_server").setLevel(resolved)
