from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, TYPE_CHECKING

from smartscore.utils.errors import UndefinedRatio
from smartscore.utils.types import TokenStatsSnapshot, WalletProfileSnapshot

if TYPE_CHECKING:
    from smartscore.models.scoring import ScoringEngine

ZERO = Decimal("0")


@dataclass
class TokenTradeStats:
    token_mint: str
    symbol: str = ""

    total_bought: Decimal = ZERO
    total_sold: Decimal = ZERO
    # total_bought - total_sold; negative when sells predate the window
    net_position: Decimal = ZERO

    bought_time: List[int] = field(default_factory=list)
    sold_time: List[int] = field(default_factory=list)

    profit: Decimal = ZERO
    win_count: int = 0
    lose_count: int = 0

    def record_buy(self, amount: Decimal, timestamp: int) -> None:
        self.total_bought += amount
        self.net_position += amount
        self.bought_time.append(timestamp)

    def record_sell(self, amount: Decimal, timestamp: int, profit_change: Decimal) -> None:
        # profit_change is signed; net_position is not clamped at zero
        self.total_sold += amount
        self.net_position -= amount
        self.sold_time.append(timestamp)
        self.profit += profit_change

    @property
    def buy_count(self) -> int:
        return len(self.bought_time)

    @property
    def sell_count(self) -> int:
        return len(self.sold_time)

    def snapshot(self) -> TokenStatsSnapshot:
        return TokenStatsSnapshot(
            symbol=self.symbol,
            token_mint=self.token_mint,
            total_bought=self.total_bought,
            total_sold=self.total_sold,
            net_position=self.net_position,
            bought_time=list(self.bought_time),
            sold_time=list(self.sold_time),
            profit=self.profit,
            win_count=self.win_count,
            lose_count=self.lose_count,
        )

    def summary(self) -> str:
        return (
            f"Token: {self.symbol}, Mint: {self.token_mint}\n"
            f"  Total Bought: {self.total_bought:.2f}, Total Sold: {self.total_sold:.2f}, "
            f"Net Position: {self.net_position}\n"
            f"  Profit: {self.profit:.2f}, Win Count: {self.win_count}, Lose Count: {self.lose_count}\n"
            f"  Bought Times: {self.bought_time}\n"
            f"  Sold Times: {self.sold_time}"
        )


@dataclass
class WalletProfile:
    address: str
    time_window: int
    token_stats: Dict[str, TokenTradeStats] = field(default_factory=dict)
    history_tx: List[str] = field(default_factory=list)
    token_related_tx: List[str] = field(default_factory=list)
    distinct_token_count: int = 0
    total_cost: Decimal = ZERO
    total_profit: Decimal = ZERO

    def add_history_tx(self, signature: str) -> None:
        self.history_tx.append(signature)

    def stats_for(self, token_mint: str, symbol: str = "") -> TokenTradeStats:
        # Lazily create the token's ledger; each mint is counted exactly once
        stats = self.token_stats.get(token_mint)
        if stats is None:
            stats = TokenTradeStats(token_mint=token_mint, symbol=symbol)
            self.token_stats[token_mint] = stats
            self.distinct_token_count += 1
        return stats

    @property
    def balance_change(self) -> Decimal:
        if self.total_cost == 0:
            raise UndefinedRatio(self.address)
        return self.total_profit / self.total_cost

    def snapshot(self, engine: Optional["ScoringEngine"] = None) -> WalletProfileSnapshot:
        balance_change: Optional[Decimal] = None
        score: Optional[Decimal] = None
        if self.total_cost != 0:
            balance_change = self.balance_change
            if engine is not None:
                score = engine.score(self)

        return WalletProfileSnapshot(
            address=self.address,
            time_window=self.time_window,
            token_stats={mint: s.snapshot() for mint, s in self.token_stats.items()},
            history_tx=list(self.history_tx),
            token_related_tx=list(self.token_related_tx),
            distinct_token_count=self.distinct_token_count,
            total_cost=self.total_cost,
            total_profit=self.total_profit,
            balance_change=balance_change,
            score=score,
        )
