from decimal import Decimal

from kafka.errors import KafkaTimeoutError

from smartscore.main import handle_message
from smartscore.services.kafka_service import _deserialize
from tests.factories import WALLET, make_record


def test_produce_serializes_decimals(kafka_service, fake_producer):
    assert kafka_service.produce("topic-a", {"score": Decimal("1.5")}) is True
    assert fake_producer.sent == [("topic-a", {"score": 1.5})]


def test_produce_reports_kafka_errors(kafka_service, fake_producer):
    class FailingFuture:
        def get(self, timeout=None):
            raise KafkaTimeoutError("timed out")

    fake_producer.send = lambda topic, value: FailingFuture()
    assert kafka_service.produce("topic-a", {"x": 1}) is False


def test_deserialize_bad_payload():
    assert _deserialize(b"not json") is None
    assert _deserialize(b'{"wallet_address": "w"}') == {"wallet_address": "w"}


def test_handle_message_success(kafka_service, fake_producer, wallet_payload):
    handle_message(kafka_service, wallet_payload)

    topic, payload = fake_producer.sent[-1]
    assert topic == kafka_service.success_topic
    assert payload["wallet_address"] == WALLET
    assert payload["error"] is None


def test_handle_message_failure(kafka_service, fake_producer):
    wallet = {"wallet_address": "bad", "activities": [make_record("sell", basis=None)]}
    handle_message(kafka_service, wallet)

    topic, payload = fake_producer.sent[-1]
    assert topic == kafka_service.failure_topic
    assert payload["wallet"] == "bad"
    assert "buy_cost_usd" in payload["error"]


def test_handle_undecodable_message(kafka_service, fake_producer):
    handle_message(kafka_service, None)

    topic, payload = fake_producer.sent[-1]
    assert topic == kafka_service.failure_topic


def test_close_flushes_producer(kafka_service, fake_producer):
    kafka_service.close()
    assert fake_producer.closed


def test_handle_non_object_message(kafka_service, fake_producer):
    for value in ([], "x", 42):
        handle_message(kafka_service, value)

        topic, payload = fake_producer.sent[-1]
        assert topic == kafka_service.failure_topic
        assert payload == {"error": "message is not a JSON object", "wallet": value}
