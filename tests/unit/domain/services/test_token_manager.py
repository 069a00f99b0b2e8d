"""Unit tests for the get-or-create token manager."""

import threading
from unittest.mock import MagicMock, Mock, call

import pytest

from lkp.core.exceptions import (
    EntropyUnavailableError,
    InvalidEntityNameError,
    RetriesExhaustedError,
    StorageError,
    UniqueConflictError,
)
from lkp.domain.interfaces.repositories import ITokenRepository
from lkp.domain.interfaces.services import ITokenGenerator
from lkp.domain.services.token_manager import TokenManager
from lkp.domain.value_objects.access_token import AccessToken
from lkp.domain.value_objects.namespace import Namespace
from tests.factories import SequenceTokenGenerator


@pytest.fixture
def repository():
    repo = Mock(spec=ITokenRepository)
    repo.lookup.return_value = None
    return repo


class TestGetOrCreate:
    """Lookup, creation and retry behaviour."""

    def test_existing_registration_is_returned_without_insert(self, repository, manager_factory):
        existing = AccessToken("0000abcdef")
        repository.lookup.return_value = existing
        generator = Mock(spec=ITokenGenerator)
        manager = manager_factory(repository, generator)

        token = manager.get_or_create(Namespace.SERVICE, "billing")

        assert token == existing
        repository.lookup.assert_called_once_with(Namespace.SERVICE, "billing")
        repository.insert.assert_not_called()
        generator.generate.assert_not_called()

    def test_missing_registration_is_created(self, repository, manager_factory):
        generator = SequenceTokenGenerator(["AAAAAAAAAA"])
        manager = manager_factory(repository, generator)

        token = manager.get_or_create(Namespace.USER, "alice")

        assert token.value == "AAAAAAAAAA"
        repository.insert.assert_called_once_with(Namespace.USER, "alice", AccessToken("AAAAAAAAAA"))
        assert generator.requested_lengths == [10]

    def test_conflict_then_success_returns_second_token(self, repository, manager_factory):
        repository.insert.side_effect = [UniqueConflictError("taken"), None]
        generator = SequenceTokenGenerator(["AAAAAAAAAA", "BBBBBBBBBB"])
        manager = manager_factory(repository, generator)

        token = manager.get_or_create(Namespace.SERVICE, "billing")

        assert token.value == "BBBBBBBBBB"
        assert repository.insert.call_args_list == [
            call(Namespace.SERVICE, "billing", AccessToken("AAAAAAAAAA")),
            call(Namespace.SERVICE, "billing", AccessToken("BBBBBBBBBB")),
        ]

    def test_name_registered_by_another_instance_after_conflict(self, repository, manager_factory):
        winner = AccessToken("WWWWWWWWWW")
        repository.lookup.side_effect = [None, winner]
        repository.insert.side_effect = UniqueConflictError("taken")
        manager = manager_factory(repository, SequenceTokenGenerator(["AAAAAAAAAA"]))

        token = manager.get_or_create(Namespace.SERVICE, "billing")

        assert token == winner
        repository.insert.assert_called_once()
        assert repository.lookup.call_count == 2

    def test_persistent_conflicts_exhaust_retries(self, repository, manager_factory):
        repository.insert.side_effect = UniqueConflictError("taken")
        generator = SequenceTokenGenerator(["AAAAAAAAAA", "BBBBBBBBBB", "CCCCCCCCCC"])
        manager = manager_factory(repository, generator, max_attempts=3)

        with pytest.raises(RetriesExhaustedError) as exc_info:
            manager.get_or_create(Namespace.USER, "alice")

        assert exc_info.value.attempts == 3
        assert exc_info.value.code == "retries_exhausted"
        assert isinstance(exc_info.value.__cause__, UniqueConflictError)
        assert repository.insert.call_count == 3

    def test_storage_error_is_not_retried(self, repository, manager_factory):
        repository.insert.side_effect = StorageError("connection lost")
        manager = manager_factory(repository, SequenceTokenGenerator(["AAAAAAAAAA", "BBBBBBBBBB"]))

        with pytest.raises(StorageError, match="connection lost"):
            manager.get_or_create(Namespace.SERVICE, "billing")

        repository.insert.assert_called_once()

    def test_lookup_storage_error_propagates(self, repository, manager_factory):
        repository.lookup.side_effect = StorageError("connection refused")
        manager = manager_factory(repository)

        with pytest.raises(StorageError, match="connection refused"):
            manager.get_or_create(Namespace.USER, "alice")

        repository.insert.assert_not_called()

    def test_entropy_failure_propagates(self, repository, manager_factory):
        generator = Mock(spec=ITokenGenerator)
        generator.generate.side_effect = EntropyUnavailableError()
        manager = manager_factory(repository, generator)

        with pytest.raises(EntropyUnavailableError):
            manager.get_or_create(Namespace.USER, "alice")

        repository.insert.assert_not_called()

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_invalid_names_are_rejected(self, repository, manager_factory, name):
        manager = manager_factory(repository)

        with pytest.raises(InvalidEntityNameError):
            manager.get_or_create(Namespace.SERVICE, name)

        repository.lookup.assert_not_called()

    def test_names_are_stored_verbatim(self, repository, manager_factory):
        manager = manager_factory(repository, SequenceTokenGenerator(["AAAAAAAAAA"]))

        manager.get_or_create(Namespace.USER, " Alice ")

        repository.lookup.assert_called_once_with(Namespace.USER, " Alice ")

    def test_namespace_shortcuts(self, repository, manager_factory):
        manager = manager_factory(repository, SequenceTokenGenerator(["AAAAAAAAAA", "BBBBBBBBBB"]))

        assert manager.get_or_create_service_token("billing").value == "AAAAAAAAAA"
        assert manager.get_or_create_user_token("alice").value == "BBBBBBBBBB"
        assert [c.args[0] for c in repository.insert.call_args_list] == [Namespace.SERVICE, Namespace.USER]

    def test_max_attempts_must_be_positive(self, repository, manager_factory):
        with pytest.raises(ValueError):
            manager_factory(repository, max_attempts=0)


class TestLocking:
    """The manager lock serializes every call, across namespaces."""

    def test_one_lock_for_both_namespaces(self, memory_repository, manager_factory):
        lock = MagicMock()
        manager = manager_factory(memory_repository, lock=lock)

        manager.get_or_create_service_token("billing")
        manager.get_or_create_user_token("alice")

        assert lock.__enter__.call_count == 2
        assert lock.__exit__.call_count == 2

    def test_store_is_only_called_while_locked(self, repository, manager_factory):
        lock = threading.Lock()
        observed = []
        repository.lookup.side_effect = lambda *args: observed.append(lock.locked())
        repository.insert.side_effect = lambda *args: observed.append(lock.locked())
        manager = manager_factory(repository, SequenceTokenGenerator(["AAAAAAAAAA"]), lock=lock)

        manager.get_or_create(Namespace.SERVICE, "billing")

        assert observed == [True, True]
        assert not lock.locked()

    def test_lock_released_after_failure(self, repository, manager_factory):
        lock = threading.Lock()
        repository.insert.side_effect = StorageError("disk full")
        manager = manager_factory(repository, SequenceTokenGenerator(["AAAAAAAAAA"]), lock=lock)

        with pytest.raises(StorageError):
            manager.get_or_create(Namespace.SERVICE, "billing")

        assert not lock.locked()

    def test_lock_released_after_exhausted_retries(self, repository, manager_factory):
        lock = threading.Lock()
        repository.insert.side_effect = UniqueConflictError("taken")
        manager = manager_factory(
            repository, SequenceTokenGenerator(["AAAAAAAAAA", "BBBBBBBBBB"]), lock=lock, max_attempts=2
        )

        with pytest.raises(RetriesExhaustedError):
            manager.get_or_create(Namespace.USER, "alice")

        assert not lock.locked()


class TestIdempotence:
    """Behaviour against a real (in-memory) store."""

    def test_repeated_calls_return_same_token(self, memory_repository, manager_factory):
        manager = manager_factory(memory_repository)

        first = manager.get_or_create(Namespace.SERVICE, "billing")
        second = manager.get_or_create(Namespace.SERVICE, "billing")

        assert first == second
        assert memory_repository.count(Namespace.SERVICE) == 1

    def test_lookup_after_create(self, memory_repository, manager_factory):
        manager = manager_factory(memory_repository)

        assert memory_repository.lookup(Namespace.USER, "x") is None
        token = manager.get_or_create(Namespace.USER, "x")

        assert memory_repository.lookup(Namespace.USER, "x") == token

    def test_namespaces_are_independent(self, memory_repository, manager_factory):
        """The same token may be issued once in each namespace."""
        manager = manager_factory(memory_repository, SequenceTokenGenerator(["SAMESAME00", "SAMESAME00"]))

        service_token = manager.get_or_create(Namespace.SERVICE, "shared")
        user_token = manager.get_or_create(Namespace.USER, "shared")

        assert service_token == user_token
        assert memory_repository.count(Namespace.SERVICE) == 1
        assert memory_repository.count(Namespace.USER) == 1

    def test_token_collision_is_retried(self, memory_repository, manager_factory):
        manager = manager_factory(
            memory_repository, SequenceTokenGenerator(["AAAAAAAAAA", "AAAAAAAAAA", "BBBBBBBBBB"])
        )

        first = manager.get_or_create(Namespace.SERVICE, "billing")
        second = manager.get_or_create(Namespace.SERVICE, "search")

        assert first.value == "AAAAAAAAAA"
        assert second.value == "BBBBBBBBBB"


class TestBackoff:
    """Waits between conflicting inserts grow exponentially up to a ceiling."""

    def test_waits_double_and_are_capped(self, repository):
        repository.insert.side_effect = UniqueConflictError("taken")
        sleep = Mock()
        manager = TokenManager(
            repository,
            SequenceTokenGenerator(["AAAAAAAAAA", "BBBBBBBBBB", "CCCCCCCCCC", "DDDDDDDDDD", "EEEEEEEEEE"]),
            max_attempts=5,
            backoff_seconds=1,
            backoff_max_seconds=3,
            sleep=sleep,
        )

        with pytest.raises(RetriesExhaustedError):
            manager.get_or_create(Namespace.SERVICE, "billing")

        assert [c.args[0] for c in sleep.call_args_list] == [1, 2, 3, 3]

    def test_no_wait_when_first_attempt_succeeds(self, repository):
        sleep = Mock()
        manager = TokenManager(repository, SequenceTokenGenerator(["AAAAAAAAAA"]), sleep=sleep)

        manager.get_or_create(Namespace.USER, "alice")

        sleep.assert_not_called()

    def test_one_wait_per_conflict(self, repository):
        repository.insert.side_effect = [UniqueConflictError("taken"), UniqueConflictError("taken"), None]
        sleep = Mock()
        manager = TokenManager(
            repository,
            SequenceTokenGenerator(["AAAAAAAAAA", "BBBBBBBBBB", "CCCCCCCCCC"]),
            backoff_seconds=0.5,
            backoff_max_seconds=10,
            sleep=sleep,
        )

        assert manager.get_or_create(Namespace.USER, "alice").value == "CCCCCCCCCC"
        assert [c.args[0] for c in sleep.call_args_list] == [0.5, 1.0]
