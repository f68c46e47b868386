"""Custom filters for uvicorn access logging."""

import logging

from control_relay.settings import app_settings


class ExcludeMetricsFilter(logging.Filter):
    """
    Logging filter to exclude monitoring endpoint requests from access logs.

    Keeps Prometheus scraping out of uvicorn's access log. The excluded
    paths are configurable via the LOG_EXCLUDED_PATHS setting.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        return not any(
            path in message for path in app_settings.LOG_EXCLUDED_PATHS
        )
