from decimal import Decimal

import pytest

from smartscore.models.ingestion import load_activities
from smartscore.models.trade_stats import WalletProfile
from smartscore.models.wallet_model import (
    build_token_frame,
    extract_trade_features,
    process_wallet,
    process_wallets,
    rank_wallets,
)
from smartscore.utils.types import BatchInput, WalletInput
from tests.factories import WALLET, make_record


def test_features_for_sample_wallet(profile, sample_activities):
    load_activities(profile, sample_activities)
    features = extract_trade_features(profile)

    assert features["num_buys"] == 2
    assert features["num_sells"] == 1
    assert features["win_rate"] == 1.0
    assert features["profitable_token_ratio"] == pytest.approx(1 / 3)
    assert features["best_token_profit"] == pytest.approx(454.15116140538)
    assert features["worst_token_profit"] == 0.0
    assert features["avg_hold_time_hours"] == 0.0
    assert features["open_positions"] == 2


def test_hold_time_uses_first_sell_after_first_buy(profile):
    load_activities(profile, [
        make_record("sell", basis="1", cost="2", timestamp=0, tx_hash="early"),
        make_record("buy", timestamp=3600),
        make_record("sell", basis="100", cost="100", timestamp=3600 + 7200),
    ])
    features = extract_trade_features(profile)

    assert features["avg_hold_time_hours"] == pytest.approx(2.0)
    assert features["win_rate"] == 1.0


def test_token_frame_is_empty_for_new_profile():
    df = build_token_frame(WalletProfile(address="w", time_window=1))
    assert df.empty
    assert "hold_seconds" in df.columns


def test_process_wallet_success(wallet_payload):
    result = process_wallet(wallet_payload, threshold=Decimal("50"))

    assert result.error is None
    assert result.wallet_address == WALLET
    assert result.is_smart is False
    assert float(result.score) == pytest.approx(result.categories[0].score)
    category = result.categories[0]
    assert category.category == "smart_money"
    assert category.transaction_count == 3
    assert category.features["distinct_token_signal"] == 3.0
    assert result.profile.total_profit == Decimal("454.15116140538")
    assert result.profile.score == Decimal(result.score)


def test_process_wallet_invalid_record_fails_only_that_wallet(wallet_payload):
    wallet_payload["activities"].append(make_record("sell", basis=None, tx_hash="bad"))
    result = process_wallet(wallet_payload)

    assert result.score is None
    assert result.categories == []
    assert "buy_cost_usd" in result.error


def test_process_wallet_skip_invalid(wallet_payload):
    wallet_payload["activities"].insert(1, make_record("sell", basis="x", tx_hash="bad"))
    wallet_payload["skip_invalid"] = True
    result = process_wallet(wallet_payload)

    assert result.error is None
    assert [o.ok for o in result.record_outcomes] == [True, False, True, True]
    assert result.record_outcomes[1].tx_hash == "bad"


def test_process_wallet_without_cost_reports_undefined_ratio():
    result = process_wallet(WalletInput(wallet_address="empty"))

    assert result.score is None
    assert "total cost is zero" in result.error
    assert result.profile is not None
    assert result.profile.balance_change is None


def test_process_wallet_rejects_malformed_input():
    result = process_wallet({"activities": []})

    assert result.wallet_address == "unknown"
    assert result.error


def test_process_wallets_reports_each_wallet(wallet_payload):
    bad = {"wallet_address": "bad", "activities": [make_record("buy", cost=None)]}
    batch = BatchInput(wallets=[wallet_payload, bad, {"wallet_address": "empty"}])

    result = process_wallets(batch, max_workers=2)

    assert [r.wallet_address for r in result.results] == [WALLET, "bad", "empty"]
    assert result.succeeded == 1
    assert result.failed == 2
    assert result.results[0].error is None


def test_process_wallets_empty_batch():
    result = process_wallets([])
    assert result.results == []
    assert result.succeeded == 0


def test_rank_wallets_skips_invalid(engine, wallet_payload):
    winner = {"wallet_address": "winner", "activities": [
        make_record("buy", cost="100", timestamp=1),
        make_record("sell", cost="500", basis="100", timestamp=2),
    ]}
    broken = {"wallet_address": "broken", "activities": [make_record("buy", cost="?")]}

    ranked = rank_wallets([wallet_payload, winner, broken], engine, Decimal("50"))

    assert [r.wallet_address for r in ranked] == ["winner", WALLET]
    assert ranked[0].is_smart
    assert not ranked[1].is_smart
