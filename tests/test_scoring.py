from decimal import Decimal

import pytest

from smartscore.models.ingestion import load_activities
from smartscore.models.scoring import ScoreWeights, ScoringEngine, rank_profiles
from smartscore.models.trade_stats import WalletProfile
from smartscore.utils.errors import UndefinedRatio
from tests.factories import make_record


def _profile(address, buy_cost, proceeds, extra_tokens=0):
    profile = WalletProfile(address=address, time_window=15)
    records = [
        make_record("buy", cost=buy_cost, timestamp=1),
        make_record("sell", cost=proceeds, basis=buy_cost, timestamp=2),
    ]
    for i in range(extra_tokens):
        records.append(make_record("buy", mint=f"Extra{i}", cost="0", timestamp=3 + i))
    return load_activities(profile, records)


def test_score_formula(engine):
    profile = _profile("w1", "100", "150")

    # 0.3 * 1 token + 0.3 * 2 txs + 0.4 * 50
    assert engine.score(profile) == Decimal("20.9")


def test_signals(engine):
    profile = _profile("w1", "100", "80")
    tokens, txs, balance = engine.signals(profile)

    assert tokens == 1
    assert txs == 2
    assert balance == Decimal("-20")


def test_zero_cost_raises(engine):
    profile = WalletProfile(address="empty", time_window=15)
    with pytest.raises(UndefinedRatio) as exc:
        engine.score(profile)
    assert exc.value.address == "empty"
    assert engine.try_score(profile) is None


def test_sell_only_wallet_has_undefined_score(engine):
    profile = WalletProfile(address="seller", time_window=15)
    load_activities(profile, [make_record("sell", cost="10", basis="5")])
    with pytest.raises(UndefinedRatio):
        engine.score(profile)


def test_custom_weights():
    engine = ScoringEngine(ScoreWeights(distinct_tokens=Decimal("1"),
                                        token_txs=Decimal("0"),
                                        balance_change=Decimal("0")))
    profile = _profile("w1", "100", "150", extra_tokens=2)
    assert engine.score(profile) == Decimal("3")


def test_sample_wallet_score(profile, sample_activities, engine):
    load_activities(profile, sample_activities)

    expected = 0.3 * 3 + 0.3 * 3 + 0.4 * (454.15116140538 / 2052.13802544786 * 100)
    assert float(engine.score(profile)) == pytest.approx(expected)


def test_snapshot_includes_score(engine):
    profile = _profile("w1", "100", "150")
    snap = profile.snapshot(engine)

    assert snap.balance_change == Decimal("0.5")
    assert snap.score == Decimal("20.9")


def test_rank_profiles_orders_and_flags(engine):
    high = _profile("high", "100", "300")
    low = _profile("low", "100", "90")
    empty = WalletProfile(address="empty", time_window=15)

    ranked = rank_profiles([low, empty, high], engine, threshold=Decimal("50"))

    assert [r.wallet_address for r in ranked] == ["high", "low", "empty"]
    assert [r.rank for r in ranked] == [1, 2, 3]
    assert ranked[0].is_smart is True
    assert ranked[1].is_smart is False
    assert ranked[2].score is None
