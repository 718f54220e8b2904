"""Pytest fixtures for rewards ledger tests."""

from __future__ import annotations

from collections.abc import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from meshpay_rewards.events.emitter import EventEmitter
from meshpay_rewards.events.types import DomainEvent
from meshpay_rewards.models.base import Base
from meshpay_rewards.providers.auth_stub import SignatureAuthorizer
from meshpay_rewards.providers.token_stub import InMemoryTokenProvider
from meshpay_rewards.services.payment_ledger import PaymentLedger
from meshpay_rewards.storage.memory import InMemoryStorage

# Use in-memory SQLite shared across connections for SQL-backed tests
TEST_DATABASE_URL = "sqlite://"


class LedgerTestData:
    """Well-known accounts used across ledger tests."""

    token = "CTOKENXLM"
    protocol = "GPROTOCOL"
    sender = "GSENDER"
    recipient = "GRECIPIENT"
    broadcaster = "GBROADCASTER"
    relayer = "GRELAYER"
    payer = "GPAYER"

    @property
    def parties(self) -> dict[str, str]:
        return {
            "sender": self.sender,
            "recipient": self.recipient,
            "broadcaster": self.broadcaster,
            "relayer": self.relayer,
        }


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    """Create test database engine."""
    engine = create_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(engine: Engine) -> Generator[Session, None, None]:
    """Database session rolled back after each test."""
    connection = engine.connect()
    transaction = connection.begin()
    session = Session(bind=connection)
    yield session
    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def test_data() -> LedgerTestData:
    return LedgerTestData()


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage(ledger_id="test-ledger")


@pytest.fixture
def authorizer() -> SignatureAuthorizer:
    return SignatureAuthorizer()


@pytest.fixture
def tokens(test_data: LedgerTestData) -> InMemoryTokenProvider:
    provider = InMemoryTokenProvider()
    provider.mint(test_data.token, test_data.payer, 1_000_000)
    provider.mint(test_data.token, test_data.relayer, 1_000_000)
    return provider


@pytest.fixture
def emitter() -> EventEmitter:
    return EventEmitter()


@pytest.fixture
def published(emitter: EventEmitter) -> list[DomainEvent]:
    """Every event the emitter publishes, in order."""
    events: list[DomainEvent] = []
    emitter.on_all(events.append)
    return events


@pytest.fixture
def ledger(
    storage: InMemoryStorage,
    authorizer: SignatureAuthorizer,
    tokens: InMemoryTokenProvider,
    emitter: EventEmitter,
) -> PaymentLedger:
    return PaymentLedger(
        storage=storage,
        authorizer=authorizer,
        transfers=tokens,
        emitter=emitter,
    )


@pytest.fixture
def initialized_ledger(ledger: PaymentLedger, test_data: LedgerTestData) -> PaymentLedger:
    ledger.initialize(test_data.protocol)
    return ledger
