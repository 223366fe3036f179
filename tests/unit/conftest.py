"""Shared fixtures for unit tests."""

import pytest

from tests.unit.store_fakes import InMemoryAuctionRepository, InMemoryStore


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def repo() -> InMemoryAuctionRepository:
    return InMemoryAuctionRepository()
