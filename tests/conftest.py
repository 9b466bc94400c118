"""
Pytest fixtures: sample activity records and profile helpers.
"""

from __future__ import annotations

import copy

import pytest

from smartscore.models.scoring import ScoringEngine
from smartscore.models.trade_stats import WalletProfile
from tests.factories import CHEETAH_SELL, DOLL_BUY, GHN_BUY, WALLET


@pytest.fixture
def sample_activities():
    return [copy.deepcopy(r) for r in (DOLL_BUY, GHN_BUY, CHEETAH_SELL)]


@pytest.fixture
def profile():
    return WalletProfile(address=WALLET, time_window=15)


@pytest.fixture
def engine():
    return ScoringEngine()


@pytest.fixture
def wallet_payload(sample_activities):
    return {"wallet_address": WALLET, "time_window_days": 15, "activities": sample_activities}


@pytest.fixture
def client():
    """FastAPI TestClient; Kafka stays disabled unless KAFKA_ENABLED is set."""
    from fastapi.testclient import TestClient

    from smartscore.main import app

    return TestClient(app)


class FakeFuture:
    def get(self, timeout=None):
        return None


class FakeProducer:
    def __init__(self):
        self.sent = []
        self.closed = False

    def send(self, topic, value):
        self.sent.append((topic, value))
        return FakeFuture()

    def flush(self):
        pass

    def close(self):
        self.closed = True


@pytest.fixture
def fake_producer():
    return FakeProducer()


@pytest.fixture
def kafka_service(fake_producer):
    from smartscore.services.kafka_service import KafkaService

    return KafkaService(producer=fake_producer)
