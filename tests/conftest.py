"""Shared pytest fixtures for segment processing tests."""

from __future__ import annotations

import pytest

from segment_doubles import InMemoryAuditJobStore, InMemorySegmentResultStore


@pytest.fixture
def job_store() -> InMemoryAuditJobStore:
    """Provide an empty in-memory job store."""

    return InMemoryAuditJobStore()


@pytest.fixture
def result_store() -> InMemorySegmentResultStore:
    """Provide an empty in-memory result store."""

    return InMemorySegmentResultStore()
