from .settings import Settings, DEFAULT_STATISTIC_NAMES
from .logging_config import configure_logging

__all__ = ["Settings", "DEFAULT_STATISTIC_NAMES", "configure_logging"]
