"""Configuration de logging basée sur structlog.

Objectif du module
------------------
- Logs lisibles (console) en développement, JSON une ligne par évènement ailleurs.
- Les secrets (mots de passe, jetons) ne sont jamais passés aux loggers.
"""

import logging
import sys

import structlog


def setup_logging(env: str = "dev", level: int = logging.INFO) -> None:
    """Configure structlog pour l'environnement donné."""
    renderer = (
        structlog.dev.ConsoleRenderer()
        if env == "dev"
        else structlog.processors.JSONRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )
