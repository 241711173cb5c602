"""Slugs component - slug generation and the bounded retry driver."""

from src.components.slugs.component import generate_unique_slug, slugify
from src.components.slugs.models import RETRYABLE_CONSTRAINTS, ExhaustedRetries, Ok, Retry
from src.components.slugs.ports import SlugLookup, UnitOfWorkBody
from src.components.slugs.retry import attempt_once, commit_with_retry, run_with_retry

__all__ = [
    # Slugs
    "slugify",
    "generate_unique_slug",
    # Retry driver
    "attempt_once",
    "run_with_retry",
    "commit_with_retry",
    # Models
    "Ok",
    "Retry",
    "ExhaustedRetries",
    "RETRYABLE_CONSTRAINTS",
    # Ports
    "SlugLookup",
    "UnitOfWorkBody",
]
