
import time
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union
import numpy as np
import pandas as pd

from smartscore.models.ingestion import RecordOutcome, ingest_activities, load_activities
from smartscore.models.scoring import ScoringEngine, rank_profiles
from smartscore.models.trade_stats import WalletProfile
from smartscore.utils.errors import ScoringError
from smartscore.utils.numbers import safe_divide
from smartscore.utils.types import (
    BatchInput,
    BatchScoreResult,
    CategoryResult,
    RankedWallet,
    WalletInput,
    WalletScoreResult,
)

# Type aliases for clarity
TradeFeatures = Dict[str, float]
WalletLike = Union[WalletInput, Mapping[str, Any]]

TOKEN_COLUMNS = [
    "token_mint", "symbol", "num_buys", "num_sells", "win_count",
    "lose_count", "profit", "net_position", "hold_seconds",
]

def _as_wallet_input(wallet_input: WalletLike) -> WalletInput:
    if isinstance(wallet_input, WalletInput):
        return wallet_input
    return WalletInput.model_validate(wallet_input)

def _address_of(wallet_input: WalletLike) -> str:
    if isinstance(wallet_input, WalletInput):
        return wallet_input.wallet_address
    if isinstance(wallet_input, Mapping):
        return str(wallet_input.get("wallet_address", "unknown"))
    return "unknown"

# Profile building

def profile_wallet(wallet_input: WalletLike) -> Tuple[WalletProfile, List[RecordOutcome]]:
    # Build the wallet's profile from its activity batch
    wallet = _as_wallet_input(wallet_input)
    profile = WalletProfile(address=wallet.wallet_address, time_window=wallet.time_window_days)
    for signature in wallet.history_tx:
        profile.add_history_tx(signature)

    if wallet.skip_invalid:
        outcomes = ingest_activities(profile, wallet.activities)
    else:
        load_activities(profile, wallet.activities)
        outcomes = []
    return profile, outcomes

# Feature Extraction

def build_token_frame(profile: WalletProfile) -> pd.DataFrame:
    # One row per token ledger; hold time is first buy -> first later sell
    rows = []
    for mint, stats in profile.token_stats.items():
        hold_seconds = np.nan
        if stats.bought_time:
            first_buy = min(stats.bought_time)
            later_sells = [t for t in stats.sold_time if t >= first_buy]
            if later_sells:
                hold_seconds = float(min(later_sells) - first_buy)
        rows.append({
            "token_mint": mint,
            "symbol": stats.symbol,
            "num_buys": stats.buy_count,
            "num_sells": stats.sell_count,
            "win_count": stats.win_count,
            "lose_count": stats.lose_count,
            "profit": float(stats.profit),
            "net_position": float(stats.net_position),
            "hold_seconds": hold_seconds,
        })
    return pd.DataFrame(rows, columns=TOKEN_COLUMNS)

def extract_trade_features(profile: WalletProfile) -> TradeFeatures:
    df = build_token_frame(profile)

    num_buys = int(df["num_buys"].sum()) if not df.empty else 0
    num_sells = int(df["num_sells"].sum()) if not df.empty else 0
    wins = int(df["win_count"].sum()) if not df.empty else 0
    losses = int(df["lose_count"].sum()) if not df.empty else 0

    if not df.empty:
        profitable_tokens = int((df["profit"] > 0).sum())
        best_token_profit = float(df["profit"].max())
        worst_token_profit = float(df["profit"].min())
        open_positions = int((df["net_position"] > 0).sum())
    else:
        profitable_tokens = 0
        best_token_profit = 0.0
        worst_token_profit = 0.0
        open_positions = 0

    holds = pd.to_numeric(df["hold_seconds"], errors="coerce").dropna()
    avg_hold_time_hours = float(holds.mean() / 3600.0) if not holds.empty else 0.0

    features: TradeFeatures = {
        "num_buys": num_buys,
        "num_sells": num_sells,
        "win_count": wins,
        "lose_count": losses,
        "win_rate": float(safe_divide(wins, wins + losses)),
        "profitable_token_ratio": float(safe_divide(profitable_tokens, len(df))),
        "best_token_profit": best_token_profit,
        "worst_token_profit": worst_token_profit,
        "avg_hold_time_hours": avg_hold_time_hours,
        "open_positions": open_positions,
    }
    return {k: (0.0 if not np.isfinite(v) else v) for k, v in features.items()}

# Main Processor

def process_wallet(
    wallet_input: WalletLike,
    engine: Optional[ScoringEngine] = None,
    threshold: Optional[Decimal] = None,
) -> WalletScoreResult:
    start = time.time()
    engine = engine or ScoringEngine()
    address = _address_of(wallet_input)
    profile: Optional[WalletProfile] = None
    outcomes: List[RecordOutcome] = []
    try:
        profile, outcomes = profile_wallet(wallet_input)
        score = engine.score(profile)
        features = extract_trade_features(profile)
        tokens, txs, balance = engine.signals(profile)

        return WalletScoreResult(
            wallet_address=profile.address,
            score=str(score),
            is_smart=threshold is not None and score > threshold,
            timestamp=int(time.time()),
            processing_time_ms=int((time.time() - start) * 1000),
            categories=[
                CategoryResult(
                    category="smart_money",
                    score=float(score),
                    transaction_count=len(profile.token_related_tx),
                    features={**features,
                              "distinct_token_signal": float(tokens),
                              "token_tx_signal": float(txs),
                              "balance_change_signal": float(balance)},
                )
            ],
            profile=profile.snapshot(engine),
            record_outcomes=[o.to_result() for o in outcomes],
        )

    except ScoringError as e:
        print(f"[WARNING] Wallet {address} not scored: {e.message}")
        return _error_result(address, start, e.message, profile, outcomes)
    except Exception as e:
        # Return error info if processing fails
        print(f"[ERROR] Failed to score wallet {address}: {e}")
        return _error_result(address, start, str(e), profile, outcomes)

def _error_result(
    address: str,
    start: float,
    error: str,
    profile: Optional[WalletProfile],
    outcomes: List[RecordOutcome],
) -> WalletScoreResult:
    return WalletScoreResult(
        wallet_address=address,
        score=None,
        timestamp=int(time.time()),
        processing_time_ms=int((time.time() - start) * 1000),
        categories=[],
        profile=profile.snapshot() if profile is not None else None,
        record_outcomes=[o.to_result() for o in outcomes],
        error=error,
    )

def process_wallets(
    batch: Union[BatchInput, List[WalletLike]],
    engine: Optional[ScoringEngine] = None,
    threshold: Optional[Decimal] = None,
    max_workers: int = 4,
) -> BatchScoreResult:
    # Wallets are independent, so each one gets its own worker
    wallets = batch.wallets if isinstance(batch, BatchInput) else list(batch)
    engine = engine or ScoringEngine()
    if not wallets:
        return BatchScoreResult()

    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(wallets)))) as pool:
        results = list(pool.map(lambda w: process_wallet(w, engine, threshold), wallets))

    failed = sum(1 for r in results if r.error is not None)
    return BatchScoreResult(results=results, succeeded=len(results) - failed, failed=failed)

def rank_wallets(
    wallets: List[WalletLike],
    engine: ScoringEngine,
    threshold: Decimal,
) -> List[RankedWallet]:
    profiles: List[WalletProfile] = []
    for wallet in wallets:
        try:
            profile, _ = profile_wallet(wallet)
        except ScoringError as e:
            print(f"[WARNING] Wallet {_address_of(wallet)} left out of ranking: {e.message}")
            continue
        profiles.append(profile)
    return rank_profiles(profiles, engine, threshold)
