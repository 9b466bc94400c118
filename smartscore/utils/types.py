
from decimal import Decimal
from typing import Any, Dict, List, Literal, Mapping, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from smartscore.utils.config import DEFAULT_TIME_WINDOW_DAYS
from smartscore.utils.errors import InvalidField
from smartscore.utils.numbers import parse_decimal

#  Raw activity record (boundary) 

class TokenRef(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    address: Optional[str] = None
    symbol: Optional[str] = None
    logo: Optional[str] = None

class QuoteToken(BaseModel):
    model_config = ConfigDict(extra="allow")

    token_address: Optional[str] = None
    name: Optional[str] = None
    symbol: Optional[str] = None
    decimals: Optional[int] = None

class ActivityRecord(BaseModel):
    # One trade event as delivered by the ingester; monetary fields are
    # kept raw here and parsed strictly by to_event()
    model_config = ConfigDict(extra="allow")

    chain: Optional[str] = None
    tx_hash: Optional[str] = None
    timestamp: Optional[int] = 0
    event_type: Optional[str] = None
    token: Optional[TokenRef] = None
    token_amount: Optional[Any] = None
    quote_amount: Optional[Any] = None
    cost_usd: Optional[Any] = None
    buy_cost_usd: Optional[Any] = None
    price_usd: Optional[Any] = None
    quote_token: Optional[QuoteToken] = None

    def to_event(self) -> "TradeEvent":
        if self.timestamp is not None and self.timestamp < 0:
            raise InvalidField("timestamp", self.timestamp, self.tx_hash)

        kind = self.event_type or ""
        mint = self.token.address if self.token else None
        if not mint:
            # No token to attribute the trade to: only the tx is recorded
            return IgnoredEvent(tx_hash=self.tx_hash, timestamp=self.timestamp or 0,
                                event_type=kind)

        common = {
            "tx_hash": self.tx_hash,
            "timestamp": self.timestamp or 0,
            "token_mint": mint,
            "symbol": self.token.symbol or "",
        }

        if kind == "buy":
            cost = parse_decimal(self.cost_usd, "cost_usd", self.tx_hash)
            return BuyEvent(token_amount=self._amount(), cost_usd=cost, **common)
        if kind == "sell":
            basis = parse_decimal(self.buy_cost_usd, "buy_cost_usd", self.tx_hash)
            proceeds = parse_decimal(self.cost_usd, "cost_usd", self.tx_hash)
            return SellEvent(token_amount=self._amount(), cost_usd=proceeds,
                             buy_cost_usd=basis, **common)
        return IgnoredEvent(event_type=kind, **common)

    def _amount(self) -> Decimal:
        # Absent amount counts as zero; a present one must be a non-negative decimal
        if self.token_amount is None:
            return Decimal("0")
        amount = parse_decimal(self.token_amount, "token_amount", self.tx_hash)
        if amount < 0:
            raise InvalidField("token_amount", self.token_amount, self.tx_hash)
        return amount

#  Typed trade events 

class _EventBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    tx_hash: Optional[str] = None
    timestamp: int = 0
    token_mint: str
    symbol: str = ""

class BuyEvent(_EventBase):
    kind: Literal["buy"] = "buy"
    token_amount: Decimal
    cost_usd: Decimal

class SellEvent(_EventBase):
    kind: Literal["sell"] = "sell"
    token_amount: Decimal
    cost_usd: Decimal          # proceeds of this sell
    buy_cost_usd: Decimal      # cost basis of the matching buys

class IgnoredEvent(_EventBase):
    kind: Literal["ignored"] = "ignored"
    token_mint: Optional[str] = None
    event_type: str = ""

TradeEvent = Union[BuyEvent, SellEvent, IgnoredEvent]

def parse_activity(raw: Union[ActivityRecord, Mapping[str, Any]]) -> TradeEvent:
    # Validate one raw record into a typed event; any failure is InvalidField
    if isinstance(raw, ActivityRecord):
        return raw.to_event()
    try:
        record = ActivityRecord.model_validate(raw)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ())) or "record"
        tx_hash = raw.get("tx_hash") if isinstance(raw, Mapping) else None
        raise InvalidField(field, first.get("input"), tx_hash) from None
    return record.to_event()

#  Wallet input 

class WalletInput(BaseModel):
    wallet_address: str
    time_window_days: int = Field(default=DEFAULT_TIME_WINDOW_DAYS, ge=0)
    activities: List[Dict[str, Any]] = Field(default_factory=list)
    history_tx: List[str] = Field(default_factory=list)
    skip_invalid: bool = False

class BatchInput(BaseModel):
    wallets: List[WalletInput] = Field(default_factory=list)

#  Snapshots & results 

class TokenStatsSnapshot(BaseModel):
    symbol: str
    token_mint: str
    total_bought: Decimal
    total_sold: Decimal
    net_position: Decimal
    bought_time: List[int] = Field(default_factory=list)
    sold_time: List[int] = Field(default_factory=list)
    profit: Decimal
    win_count: int
    lose_count: int

class WalletProfileSnapshot(BaseModel):
    address: str
    time_window: int
    token_stats: Dict[str, TokenStatsSnapshot] = Field(default_factory=dict)
    history_tx: List[str] = Field(default_factory=list)
    token_related_tx: List[str] = Field(default_factory=list)
    distinct_token_count: int
    total_cost: Decimal
    total_profit: Decimal
    balance_change: Optional[Decimal] = None
    score: Optional[Decimal] = None

class RecordOutcomeResult(BaseModel):
    index: int
    tx_hash: Optional[str] = None
    ok: bool
    error: Optional[str] = None

class CategoryResult(BaseModel):
    category: str
    score: Optional[float] = None
    transaction_count: int
    features: Dict[str, Any] = Field(default_factory=dict)

class WalletScoreResult(BaseModel):
    wallet_address: str
    score: Optional[str] = None
    is_smart: bool = False
    timestamp: int
    processing_time_ms: int
    categories: List[CategoryResult] = Field(default_factory=list)
    profile: Optional[WalletProfileSnapshot] = None
    record_outcomes: List[RecordOutcomeResult] = Field(default_factory=list)
    error: Optional[str] = None

class BatchScoreResult(BaseModel):
    results: List[WalletScoreResult] = Field(default_factory=list)
    succeeded: int = 0
    failed: int = 0

class RankedWallet(BaseModel):
    rank: int
    wallet_address: str
    score: Optional[Decimal] = None
    is_smart: bool = False
