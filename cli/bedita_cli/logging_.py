from __future__ import annotations

import logging

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

# transport libraries log every request at INFO, the client its retries and fallbacks
NOISY_LOGGERS = ("httpx", "httpcore")
CLIENT_LOGGER = "bedita_client"


def setup_logging(verbose: bool) -> None:
    """Configure stderr logging for the CLI.

    ``--verbose`` shows client debug output (token refresh, batch fallbacks) and
    the raw httpx traffic; otherwise only warnings reach the terminal. Request
    and response bodies are never logged here, see ``--log-file``.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger(CLIENT_LOGGER).setLevel(level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(level)
