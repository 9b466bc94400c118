import os
from decimal import Decimal
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


SERVICE_NAME = os.getenv("SERVICE_NAME", "Smart Wallet Scoring API")

# Kafka
KAFKA_ENABLED = _env_flag("KAFKA_ENABLED")
BOOTSTRAP_SERVERS = os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092")
INPUT_TOPIC = os.getenv("KAFKA_INPUT_TOPIC", "wallet-activities")
SUCCESS_TOPIC = os.getenv("KAFKA_SUCCESS_TOPIC", "wallet-scores-success")
FAILURE_TOPIC = os.getenv("KAFKA_FAILURE_TOPIC", "wallet-scores-failure")
CONSUMER_GROUP = os.getenv("KAFKA_CONSUMER_GROUP", "smart-wallet-scoring")

# Scoring
DEFAULT_TIME_WINDOW_DAYS = int(os.getenv("DEFAULT_TIME_WINDOW_DAYS", "15"))
SMART_WALLET_SCORE_THRESHOLD = Decimal(os.getenv("SMART_WALLET_SCORE_THRESHOLD", "50"))
SCORE_WEIGHT_DISTINCT_TOKENS = Decimal(os.getenv("SCORE_WEIGHT_DISTINCT_TOKENS", "0.3"))
SCORE_WEIGHT_TOKEN_TXS = Decimal(os.getenv("SCORE_WEIGHT_TOKEN_TXS", "0.3"))
SCORE_WEIGHT_BALANCE_CHANGE = Decimal(os.getenv("SCORE_WEIGHT_BALANCE_CHANGE", "0.4"))
MAX_SCORING_WORKERS = int(os.getenv("MAX_SCORING_WORKERS", "4"))
