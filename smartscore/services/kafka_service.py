import json
from typing import Any, Callable, Dict, Optional
from kafka import KafkaProducer, KafkaConsumer
from kafka.errors import KafkaError

from smartscore.utils import config
from smartscore.utils.numbers import ensure_json_serializable


def _deserialize(raw: bytes) -> Optional[Dict[str, Any]]:
    # Undecodable messages become None and are routed to the failure topic
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return None


class KafkaService:
    def __init__(self, producer: Optional[KafkaProducer] = None):
        self.bootstrap_servers = config.BOOTSTRAP_SERVERS
        self.input_topic = config.INPUT_TOPIC
        self.success_topic = config.SUCCESS_TOPIC
        self.failure_topic = config.FAILURE_TOPIC
        self.consumer_group = config.CONSUMER_GROUP

        # Kafka producer
        self.producer = producer or KafkaProducer(
            bootstrap_servers=self.bootstrap_servers,
            value_serializer=lambda v: json.dumps(ensure_json_serializable(v)).encode("utf-8"),
            retries=3
        )

        print(f"[KafkaService] Initialized with "
              f"bootstrap={self.bootstrap_servers}, input={self.input_topic}, "
              f"success={self.success_topic}, failure={self.failure_topic}")

    def consume(self) -> KafkaConsumer:
        # Return a Kafka consumer for the input topic
        print(f"[KafkaService] Creating consumer for topic: {self.input_topic}")
        return KafkaConsumer(
            self.input_topic,
            bootstrap_servers=self.bootstrap_servers,
            group_id=self.consumer_group,
            value_deserializer=_deserialize,
            auto_offset_reset="earliest",
            enable_auto_commit=True
        )

    def run_consumer(self, handler: Callable[[Optional[Dict[str, Any]]], None]) -> None:
        # consume and process messages with the provided handler
        consumer = self.consume()
        for msg in consumer:
            try:
                print(f"[KafkaService] Consumed message from {self.input_topic}")
                handler(msg.value)
            except Exception as e:
                print(f"[KafkaService] ERROR while processing message: {e}")

    def produce(self, topic: str, message: Dict[str, Any]) -> bool:
        # Produce a message to Kafka
        try:
            safe_message = ensure_json_serializable(message)
            future = self.producer.send(topic, safe_message)
            future.get(timeout=10)
            print(f"[KafkaService] Sent message to topic={topic}")
            return True
        except KafkaError as e:
            print(f"[KafkaService] Kafka error while producing to {topic}: {e}")
            return False

    def close(self) -> None:
        # close producer
        try:
            self.producer.flush()
            self.producer.close()
            print("[KafkaService] Producer closed")
        except KafkaError as e:
            print(f"[KafkaService] Error while closing producer: {e}")
