"""
Shared test fixtures and configuration.

This module provides pytest fixtures wiring the in-memory port fakes
from tests.fakes into the domain service and websocket tests.
"""

import pytest

from fmdb_keys.domain.exceptions import PersistenceError
from tests.fakes import InMemoryUserRepository, RecordingEmailSender


@pytest.fixture
def repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def failing_repository() -> InMemoryUserRepository:
    repo = InMemoryUserRepository()
    repo.fail_with = PersistenceError("connection refused")
    return repo
