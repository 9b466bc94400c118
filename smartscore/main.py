
import time
import threading
from typing import Any, Dict, List, Optional, Union
from fastapi import FastAPI, HTTPException

from smartscore.models.scoring import ScoreWeights, ScoringEngine
from smartscore.models.wallet_model import process_wallet, process_wallets, rank_wallets
from smartscore.services.kafka_service import KafkaService
from smartscore.utils import config
from smartscore.utils.types import (
    BatchInput,
    BatchScoreResult,
    RankedWallet,
    WalletInput,
    WalletScoreResult,
)

app = FastAPI(title=config.SERVICE_NAME)

SERVICE_START_TIME: float = time.time()
processed_wallets_counter: int = 0
_counter_lock = threading.Lock()

scoring_engine = ScoringEngine(ScoreWeights(
    distinct_tokens=config.SCORE_WEIGHT_DISTINCT_TOKENS,
    token_txs=config.SCORE_WEIGHT_TOKEN_TXS,
    balance_change=config.SCORE_WEIGHT_BALANCE_CHANGE,
))

# Kafka service 
kafka_service: Optional[KafkaService] = None

def _count_processed(n: int = 1) -> None:
    global processed_wallets_counter
    with _counter_lock:
        processed_wallets_counter += n

# API Endpoints 

@app.get("/")
def home() -> Dict[str, str]:
    return {
        "service": config.SERVICE_NAME,
        "message": "Smart Wallet Scoring API is running. Use POST /score-wallet to score wallets."
    }

@app.get("/api/v1/health")
async def health() -> Dict[str, str]:
    return {"status": "ok"}

@app.get("/api/v1/stats")
async def stats() -> Dict[str, Union[int, str]]:
    uptime_seconds: int = int(time.time() - SERVICE_START_TIME)
    return {
        "status": "ok",
        "processed_wallets": processed_wallets_counter,
        "uptime_seconds": uptime_seconds
    }

# Wallet Scoring Endpoints 

@app.post("/score-wallet")
def score_wallet(wallet: WalletInput) -> WalletScoreResult:
    result = process_wallet(wallet, scoring_engine, config.SMART_WALLET_SCORE_THRESHOLD)
    _count_processed()
    if result.error is not None:
        print(f"[ERROR] Failed to score wallet {wallet.wallet_address}: {result.error}")
        raise HTTPException(status_code=422, detail=result.error)

    print(f"[INFO] Processed wallet {wallet.wallet_address} in {result.processing_time_ms} ms")
    return result

@app.post("/score-wallets")
def score_wallets(batch: BatchInput) -> BatchScoreResult:
    # Per-wallet outcome; one bad wallet never fails the batch
    result = process_wallets(batch, scoring_engine, config.SMART_WALLET_SCORE_THRESHOLD,
                             max_workers=config.MAX_SCORING_WORKERS)
    _count_processed(len(result.results))
    print(f"[INFO] Scored batch: {result.succeeded} succeeded, {result.failed} failed")
    return result

@app.post("/rank-wallets")
def rank(batch: BatchInput) -> List[RankedWallet]:
    # Wallets whose activity fails to ingest are left out of the ranking
    return rank_wallets(batch.wallets, scoring_engine, config.SMART_WALLET_SCORE_THRESHOLD)

#  Kafka Consumer Loop 

def handle_message(service: KafkaService, wallet: Any) -> None:
    # Score one consumed wallet batch and publish to the success or failure topic
    if not isinstance(wallet, dict):
        error = "undecodable message" if wallet is None else "message is not a JSON object"
        service.produce(service.failure_topic, {"error": error, "wallet": wallet})
        return

    address = wallet.get("wallet_address", "unknown")
    print(f"[INFO] Consumed message: {address}")
    result = process_wallet(wallet, scoring_engine, config.SMART_WALLET_SCORE_THRESHOLD)
    _count_processed()

    payload = result.model_dump(mode="json")
    if result.error is None:
        service.produce(service.success_topic, payload)
        print(f"[INFO] Produced result for wallet {address}")
    else:
        service.produce(service.failure_topic, {"error": result.error, "wallet": address,
                                                "result": payload})
        print(f"[ERROR] Failed processing Kafka message for {address}: {result.error}")

def consume_loop() -> None:
    # Kafka consumer loop to process wallet messages
    if not kafka_service:
        print("[ERROR] Kafka service not initialized")
        return

    print("[INFO] Kafka consumer loop started")
    kafka_service.run_consumer(lambda wallet: handle_message(kafka_service, wallet))

#  Startup Event 

@app.on_event("startup")
def start_consumer() -> None:
    global kafka_service
    if not config.KAFKA_ENABLED:
        print("[INFO] Kafka disabled, serving HTTP only")
        return

    retries: int = 5
    for attempt in range(retries):
        try:
            kafka_service = KafkaService()
            thread = threading.Thread(target=consume_loop, daemon=True)
            thread.start()
            print("[INFO] Kafka consumer thread started")
            return
        except Exception as e:
            print(f"[WARNING] Kafka not ready (attempt {attempt + 1}/{retries}): {e}")
            time.sleep(5)
    print("[ERROR] Could not connect to Kafka after retries")

@app.on_event("shutdown")
def stop_producer() -> None:
    if kafka_service is not None:
        kafka_service.close()
