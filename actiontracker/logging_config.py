# Action Tracker Logging
# Logging setup shared by all services
#
# Level comes from the argument, then LOG_LEVEL, then INFO.
# Modules just do: logger = logging.getLogger(__name__)

import logging
import os
import time

from flask import g, request

VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR']
DEFAULT_LOG_LEVEL = 'INFO'
LOG_LEVEL_ENV_VAR = 'LOG_LEVEL'
LOG_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'

request_logger = logging.getLogger('actiontracker.requests')


def get_log_level(level=None):
    """Resolve a level name to a logging constant.

    Raises:
        ValueError: if the level is not one of VALID_LOG_LEVELS
    """
    level_str = (level or os.getenv(LOG_LEVEL_ENV_VAR) or DEFAULT_LOG_LEVEL).upper()
    if level_str not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log level: '{level_str}'. "
            f"Valid levels are: {', '.join(VALID_LOG_LEVELS)}"
        )
    return getattr(logging, level_str)


def configure_logging(level=None):
    """Send log records to stderr with the shared format."""
    log_level = get_log_level(level)
    logging.basicConfig(level=log_level, format=LOG_FORMAT)
    logging.getLogger().setLevel(log_level)

    # google-auth and urllib3 are chatty at DEBUG
    for noisy in ('urllib3', 'google.auth', 'httpx', 'httpcore'):
        logging.getLogger(noisy).setLevel(max(log_level, logging.WARNING))
    return log_level


def register_request_logging(app):
    """Log 'METHOD path status - Nms' for every request the app serves."""

    @app.before_request
    def _start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def _log_request(response):
        started = g.pop('request_started', None)
        elapsed_ms = (time.perf_counter() - started) * 1000 if started is not None else 0.0
        request_logger.info('%s %s %s - %dms', request.method, request.path, response.status_code, elapsed_ms)
        return response

    return app
