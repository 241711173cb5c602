"""Slugs component port definitions."""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar
from uuid import UUID

from src.core.ports.db import UnitOfWork

T = TypeVar("T")

# Uniqueness oracle: id of the record holding the slug, or None when free.
SlugLookup = Callable[[str], UUID | None]

# A transactional body run by the retry driver against a fresh unit of work.
UnitOfWorkBody = Callable[[UnitOfWork], T]
