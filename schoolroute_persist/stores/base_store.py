"""
RESPONSIBILITIES
- Define shared exceptions and the health report for workbook-backed stores.
- Outline the init/healthcheck contract concrete stores implement.
PROCESS OVERVIEW
1. init_store -> resolve the collection workbook, ensure directories and sheet skeleton exist.
2. healthcheck -> verify directory write access and lock availability.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path


class StoreError(RuntimeError):
    """Base exception type for persistence-layer failures."""


class StoreInitializationError(StoreError):
    """Raised when a store cannot be initialized due to missing prerequisites."""


class StoreValidationError(StoreError):
    """Raised when a document cannot be persisted as given."""


class StoreLockedError(StoreError):
    """Raised when a target workbook is locked by another writer."""


class StoreCorruptedError(StoreError):
    """Raised when a collection workbook exists but cannot be opened."""


@dataclass(slots=True)
class PersistHealth:
    """Structured report produced by health checks."""

    writable_paths: dict[str, bool]
    locked_paths: list[str]
    issues: list[str] = field(default_factory=list)

    def is_healthy(self) -> bool:
        """Return True when no issues are observed."""

        return not self.issues and all(self.writable_paths.values())


class BaseStore(ABC):
    """Abstract class shared by concrete collection-backed stores."""

    collection_name: str

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def init_store(self) -> Path:
        """Ensure the backing workbook exists, returning its absolute path."""

    @abstractmethod
    def healthcheck(self) -> PersistHealth:
        """Run diagnostics for the store and return a structured report."""
