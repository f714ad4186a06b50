"""
Testes das políticas de ID (sequencial por ano e UUID).
"""
from datetime import datetime
from uuid import UUID

import pytest

from app.core.id_policy import RandomIdPolicy, SequentialIdPolicy, build_id_policy
from app.storage.repository import ParticipantRepository


def insert(repo, participant_id):
    return repo.create_participant(
        participant_id=participant_id,
        name="Teste",
        birth_date="2000-01-01",
        age=24,
        cpf="00000000000",
        church="Igreja",
        district="Distrito",
        whatsapp="41999999999",
    )


@pytest.fixture
def repo(session_factory):
    db_session = session_factory()
    yield ParticipantRepository(db_session)
    db_session.close()


class TestSequentialIdPolicy:

    def test_first_id_of_year(self, repo):
        policy = SequentialIdPolicy()
        assert policy.next_id(repo, datetime(2024, 3, 1)) == "2024-0001"

    def test_counts_existing_ids_of_same_year(self, repo):
        policy = SequentialIdPolicy()
        insert(repo, "2024-0001")
        insert(repo, "2024-0002")
        assert policy.next_id(repo, datetime(2024, 3, 1)) == "2024-0003"

    def test_new_year_restarts_counter(self, repo):
        policy = SequentialIdPolicy()
        insert(repo, "2024-0001")
        insert(repo, "2024-0002")
        assert policy.next_id(repo, datetime(2025, 1, 1)) == "2025-0001"

    def test_previous_conflict_moves_counter_forward(self, repo):
        """Com lacuna (0002 excluído), a contagem gera 0003 que já existe."""
        policy = SequentialIdPolicy()
        insert(repo, "2024-0001")
        insert(repo, "2024-0003")
        now = datetime(2024, 3, 1)
        assert policy.next_id(repo, now) == "2024-0003"
        assert policy.next_id(repo, now, previous="2024-0003") == "2024-0004"

    def test_conflict_jumps_past_highest_id(self, repo):
        """Várias exclusões no início do ano: o retry vai direto ao maior ID + 1."""
        policy = SequentialIdPolicy()
        for n in range(6, 11):
            insert(repo, f"2024-{n:04d}")
        now = datetime(2024, 3, 1)
        assert policy.next_id(repo, now) == "2024-0006"
        assert policy.next_id(repo, now, previous="2024-0006") == "2024-0011"

    def test_previous_from_other_year_is_ignored(self, repo):
        policy = SequentialIdPolicy()
        assert policy.next_id(repo, datetime(2025, 1, 1), previous="2024-0009") == "2025-0001"


class TestMaxSuffixWithPrefix:

    def test_empty_year(self, repo):
        assert repo.max_suffix_with_prefix("2024-") == 0

    def test_numeric_order_beyond_four_digits(self, repo):
        insert(repo, "2024-9999")
        insert(repo, "2024-10000")
        insert(repo, "2025-0042")
        assert repo.max_suffix_with_prefix("2024-") == 10000

    def test_ignores_non_numeric_suffix(self, repo):
        insert(repo, "2024-0003")
        insert(repo, "2024-abcdefgh")
        assert repo.max_suffix_with_prefix("2024-") == 3


class TestRandomIdPolicy:

    def test_generates_uuid4(self, repo):
        value = RandomIdPolicy().next_id(repo, datetime(2024, 3, 1))
        assert UUID(value).version == 4

    def test_ids_differ(self, repo):
        policy = RandomIdPolicy()
        now = datetime(2024, 3, 1)
        assert policy.next_id(repo, now) != policy.next_id(repo, now)


class TestBuildIdPolicy:

    def test_known_policies(self):
        assert isinstance(build_id_policy("sequential"), SequentialIdPolicy)
        assert isinstance(build_id_policy("random"), RandomIdPolicy)

    def test_unknown_policy(self):
        with pytest.raises(ValueError):
            build_id_policy("incremental")
