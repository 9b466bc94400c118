from decimal import Decimal
from typing import NamedTuple

from smartscore.models.trade_stats import TokenTradeStats, WalletProfile, ZERO
from smartscore.utils.types import BuyEvent, SellEvent, TradeEvent


class Contribution(NamedTuple):
    # What a single event adds to the wallet totals
    cost: Decimal
    profit: Decimal


NO_CONTRIBUTION = Contribution(ZERO, ZERO)


def classify_event(event: TradeEvent, stats: TokenTradeStats) -> Contribution:
    # Buys count toward cost, sells toward realized profit, anything else is a no-op
    if isinstance(event, BuyEvent):
        stats.record_buy(event.token_amount, event.timestamp)
        return Contribution(event.cost_usd, ZERO)

    if isinstance(event, SellEvent):
        profit = event.cost_usd - event.buy_cost_usd
        stats.record_sell(event.token_amount, event.timestamp, profit)
        if profit > 0:
            stats.win_count += 1
        elif profit < 0:
            stats.lose_count += 1
        return Contribution(ZERO, profit)

    return NO_CONTRIBUTION


def apply_event(profile: WalletProfile, event: TradeEvent) -> Contribution:
    # Events arrive validated, so the ledger, totals and tx list move together
    if event.token_mint is None:
        contribution = NO_CONTRIBUTION
    else:
        stats = profile.stats_for(event.token_mint, event.symbol)
        contribution = classify_event(event, stats)

    profile.total_cost += contribution.cost
    profile.total_profit += contribution.profit
    if event.tx_hash:
        profile.token_related_tx.append(event.tx_hash)
    return contribution
