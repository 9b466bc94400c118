from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from smartscore.models.trade_stats import WalletProfile
from smartscore.utils.errors import UndefinedRatio
from smartscore.utils.types import RankedWallet

HUNDRED = Decimal("100")


class ScoreWeights(BaseModel):
    model_config = ConfigDict(frozen=True)

    distinct_tokens: Decimal = Decimal("0.3")
    token_txs: Decimal = Decimal("0.3")
    balance_change: Decimal = Decimal("0.4")


def distinct_token_signal(profile: WalletProfile) -> Decimal:
    return Decimal(profile.distinct_token_count)


def token_tx_signal(profile: WalletProfile) -> Decimal:
    return Decimal(len(profile.token_related_tx))


def balance_change_signal(profile: WalletProfile) -> Decimal:
    # 0.15 -> 15, raises UndefinedRatio when nothing was spent
    return profile.balance_change * HUNDRED


# Weighted composite of token count, trade tx count and balance change.
# Unbounded and wallet-local: only comparable across wallets sharing weights.
class ScoringEngine:
    def __init__(self, weights: Optional[ScoreWeights] = None) -> None:
        self.weights = weights or ScoreWeights()

    def signals(self, profile: WalletProfile) -> Tuple[Decimal, Decimal, Decimal]:
        return (
            distinct_token_signal(profile),
            token_tx_signal(profile),
            balance_change_signal(profile),
        )

    def score(self, profile: WalletProfile) -> Decimal:
        tokens, txs, balance = self.signals(profile)
        w = self.weights
        return w.distinct_tokens * tokens + w.token_txs * txs + w.balance_change * balance

    def try_score(self, profile: WalletProfile) -> Optional[Decimal]:
        try:
            return self.score(profile)
        except UndefinedRatio:
            return None


def rank_profiles(
    profiles: Iterable[WalletProfile],
    engine: ScoringEngine,
    threshold: Decimal,
) -> List[RankedWallet]:
    # Highest score first; wallets without a defined score go last
    scored = [(p, engine.try_score(p)) for p in profiles]
    scored.sort(key=lambda item: (item[1] is None, -(item[1] or Decimal(0))))
    return [
        RankedWallet(
            rank=i + 1,
            wallet_address=profile.address,
            score=score,
            is_smart=score is not None and score > threshold,
        )
        for i, (profile, score) in enumerate(scored)
    ]
