"""Offline-tolerant data layer and training calendar engine for the fitness client."""

from fitclient.core import logger as _logger  # noqa: F401  (configures loguru sinks)

__version__ = "0.1.0"
