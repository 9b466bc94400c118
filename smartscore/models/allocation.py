from decimal import Decimal
from typing import Iterable, List

from pydantic import BaseModel, Field

from smartscore.models.scoring import ScoringEngine
from smartscore.models.trade_stats import WalletProfile


# Copy-trade allocation records; data only, nothing here places orders
class CopyTradeStrategy(BaseModel):
    allocate_funds: Decimal       # max funds allocated to one smart wallet (SOL)
    follow_ratio: Decimal         # 0.5: wallet buys 100 tokens, we buy 50
    per_position_funds: Decimal   # share of allocate_funds per position
    slippage: Decimal = Decimal("0")
    fee_rate: Decimal = Decimal("0")

    @classmethod
    def default(cls) -> "CopyTradeStrategy":
        return cls(
            allocate_funds=Decimal("0.1"),
            follow_ratio=Decimal("0.5"),
            per_position_funds=Decimal("0.05"),
        )

    def position_budget(self) -> Decimal:
        return self.allocate_funds * self.per_position_funds


class SmartWallet(BaseModel):
    address: str
    score: Decimal
    allocate_funds: Decimal
    strategy: CopyTradeStrategy
    position_count: int = 0
    history_position_count: int = 0

    @classmethod
    def from_profile(
        cls,
        profile: WalletProfile,
        engine: ScoringEngine,
        allocate_funds: Decimal,
        strategy: CopyTradeStrategy,
    ) -> "SmartWallet":
        return cls(
            address=profile.address,
            score=engine.score(profile),
            allocate_funds=allocate_funds,
            strategy=strategy,
        )


class CopyTradeAccount(BaseModel):
    address: str
    owner: str
    cost_limit: Decimal
    smart_wallets: List[SmartWallet] = Field(default_factory=list)

    @property
    def copy_wallet_count(self) -> int:
        return len(self.smart_wallets)

    @property
    def total_copy_funds(self) -> Decimal:
        return sum((w.allocate_funds for w in self.smart_wallets), Decimal("0"))


def select_smart_wallets(
    profiles: Iterable[WalletProfile],
    engine: ScoringEngine,
    threshold: Decimal,
    strategy: CopyTradeStrategy,
) -> List[SmartWallet]:
    selected: List[SmartWallet] = []
    for profile in profiles:
        score = engine.try_score(profile)
        if score is None or score <= threshold:
            continue
        selected.append(SmartWallet.from_profile(
            profile, engine, strategy.allocate_funds, strategy))
    selected.sort(key=lambda w: w.score, reverse=True)
    return selected
