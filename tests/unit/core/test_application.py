"""Tests for the composition root and key composition."""

import re
from unittest.mock import Mock

import pytest

from lkp.core.application import compose_access_key, create_token_manager, issue_access_key
from lkp.core.config.settings import Settings
from lkp.core.exceptions import InvalidEntityNameError, StorageError
from lkp.domain.interfaces.repositories import ITokenRepository
from lkp.domain.services.token_generation import LegacyTokenGenerator, UniformTokenGenerator
from lkp.domain.services.token_manager import TokenManager
from lkp.domain.value_objects.access_token import AccessToken
from lkp.domain.value_objects.namespace import Namespace
from lkp.infrastructure.repositories import SQLModelTokenRepository

KEY_PATTERN = re.compile(r"^lkp-[0-9A-Za-z]{10}-[0-9A-Za-z]{10}$")


@pytest.fixture
def config():
    return Settings(TOKEN_RETRY_BACKOFF_SECONDS=0, TOKEN_RETRY_BACKOFF_MAX_SECONDS=0)


def test_compose_access_key():
    assert compose_access_key(AccessToken("000JVb3WII"), AccessToken("01HvWXNAa7")) == "lkp-000JVb3WII-01HvWXNAa7"


def test_create_token_manager_reads_settings(memory_repository):
    config = Settings(
        TOKEN_GENERATOR="uniform", TOKEN_MAX_ATTEMPTS=2,
        TOKEN_RETRY_BACKOFF_SECONDS=0.25, TOKEN_RETRY_BACKOFF_MAX_SECONDS=2.0,
    )

    manager = create_token_manager(repository=memory_repository, config=config)

    assert manager.max_attempts == 2
    assert manager._backoff_seconds == 0.25
    assert manager._backoff_max_seconds == 2.0
    assert isinstance(manager._generator, UniformTokenGenerator)


def test_create_token_manager_uses_sql_repository_for_engine(sqlite_engine, config):
    manager = create_token_manager(engine=sqlite_engine, config=config)

    assert isinstance(manager._repository, SQLModelTokenRepository)
    assert isinstance(manager._generator, LegacyTokenGenerator)


def test_issue_access_key_is_idempotent(memory_repository, config):
    manager = create_token_manager(repository=memory_repository, config=config)

    first = issue_access_key("billing", "alice", manager=manager)
    second = issue_access_key("billing", "alice", manager=manager)

    assert KEY_PATTERN.match(first)
    assert first == second
    assert memory_repository.count(Namespace.SERVICE) == 1
    assert memory_repository.count(Namespace.USER) == 1


def test_issue_access_key_composes_stored_tokens(memory_repository, config):
    manager = create_token_manager(repository=memory_repository, config=config)

    key = issue_access_key("billing", "alice", manager=manager)

    service_token = memory_repository.lookup(Namespace.SERVICE, "billing")
    user_token = memory_repository.lookup(Namespace.USER, "alice")
    assert key == f"lkp-{service_token.value}-{user_token.value}"


def test_issue_access_key_against_sqlite(sqlite_engine, config, count_rows):
    manager = create_token_manager(engine=sqlite_engine, config=config)

    key = issue_access_key("billing", "alice", manager=manager)

    assert KEY_PATTERN.match(key)
    assert count_rows(Namespace.SERVICE) == 1
    assert count_rows(Namespace.USER) == 1


def test_errors_are_raised_not_fatal(config):
    repository = Mock(spec=ITokenRepository)
    repository.lookup.side_effect = StorageError("database unavailable")
    manager = create_token_manager(repository=repository, config=config)

    with pytest.raises(StorageError, match="database unavailable"):
        issue_access_key("billing", "alice", manager=manager)


def test_invalid_user_name_after_service_token(memory_repository, config):
    """The service token is kept even when the user half fails."""
    manager = create_token_manager(repository=memory_repository, config=config)

    with pytest.raises(InvalidEntityNameError):
        issue_access_key("billing", "", manager=manager)

    assert memory_repository.count(Namespace.SERVICE) == 1


def test_manager_defaults_match_settings_defaults(memory_repository):
    manager = TokenManager(memory_repository, LegacyTokenGenerator())
    fields = Settings.model_fields

    assert manager.max_attempts == fields["TOKEN_MAX_ATTEMPTS"].default
    assert manager._backoff_seconds == fields["TOKEN_RETRY_BACKOFF_SECONDS"].default
    assert manager._backoff_max_seconds == fields["TOKEN_RETRY_BACKOFF_MAX_SECONDS"].default
