from index_equivalence.infra.logs import (
    LOG_DATE_FORMAT,
    LOG_FORMAT,
    ROOT_LOGGER_NAME,
    setup_logging,
)

__all__ = [
    "LOG_DATE_FORMAT",
    "LOG_FORMAT",
    "ROOT_LOGGER_NAME",
    "setup_logging",
]
