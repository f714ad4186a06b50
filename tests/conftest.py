"""
Fixtures compartilhadas: banco SQLite em memória, relógio fixo e registry.
"""
from datetime import datetime

import pytest

from app.config import AppConfig
from app.core.errors import EncodingError
from app.core.id_policy import SequentialIdPolicy
from app.core.registration_state import ParticipantData
from app.core.registry import ParticipantRegistry
from app.infra.qr_encoder import QRCodeEncoder
from app.storage.database import create_session_factory

CONFIRMATION_URL = "https://example.test/confirmation.html"


class FakeClock:
    """Relógio controlável pelos testes."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class FailingEncoder:
    """Encoder que sempre falha (simula erro do gerador de QR)."""

    def encode(self, payload: str) -> str:
        raise EncodingError("Erro ao gerar o QR Code.")


@pytest.fixture
def session_factory():
    return create_session_factory("sqlite://", create_tables=True)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 6, 15, 10, 30))


@pytest.fixture
def registry(session_factory, clock):
    return ParticipantRegistry(
        db_session_factory=session_factory,
        encoder=QRCodeEncoder(),
        id_policy=SequentialIdPolicy(),
        confirmation_url_base=CONFIRMATION_URL,
        clock=clock,
    )


@pytest.fixture
def participant_data():
    return ParticipantData(
        name="Maria da Silva",
        birth_date="2000-06-15",
        cpf="12345678910",
        church="Igreja Central",
        district="Distrito Norte",
        whatsapp="41999380969",
    )


@pytest.fixture
def app_config():
    return AppConfig(
        database_url="sqlite://",
        cors_origins=("https://frontend.example.test",),
        confirmation_url_base=CONFIRMATION_URL,
    )
