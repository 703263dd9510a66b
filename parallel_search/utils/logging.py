"""Logging configuration."""

import logging
import sys
from typing import Any

ROOT_LOGGER_NAME = "parallel_search"


def configure_logging(log_level: str = "INFO") -> logging.Logger:
    """
    Configure logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        Configured package logger
    """
    numeric_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(numeric_level)

    # stdout carries the MCP protocol in stdio mode, so log to stderr
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)

    # Reconfiguring replaces our handler instead of stacking duplicates
    for existing in list(logger.handlers):
        if getattr(existing, "_parallel_search", False):
            logger.removeHandler(existing)
    handler._parallel_search = True
    logger.addHandler(handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a module logger under the package namespace."""
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def log_query(
    logger: logging.Logger,
    query: dict[str, Any],
    sources: list[str] | None = None,
):
    """
    Log an incoming search call.

    Args:
        logger: Logger instance
        query: Query parameters after defaults were applied
        sources: Names of the sources that will be dispatched
    """
    logger.info(f"Query: {query.get('query')!r}")
    logger.debug(f"Query parameters: {query}")
    if sources is not None:
        logger.debug(f"Dispatching sources: {', '.join(sources) or 'none'}")


def log_results(logger: logging.Logger, results: dict[str, Any]):
    """
    Log result totals for a completed call.

    Args:
        logger: Logger instance
        results: Serialized stats of the call
    """
    logger.info(
        f"Total unique results: {results.get('total_unique', 0)} "
        f"(common: {results.get('common', 0)})"
    )
    if results.get("dataforseo_cost") is not None:
        logger.info(f"DataForSEO cost: {results['dataforseo_cost']}")
    logger.debug(f"Stats: {results}")
