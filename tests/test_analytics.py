"""Viewer stats: win/loss accounting, win rate, pari-mutuel earnings."""

from decimal import Decimal

from conftest import ALICE, BOB, make_market

from predmarket.analytics.position import compute_stats, estimated_payout
from predmarket.query.display import format_amount, format_percent


def test_no_viewer_returns_none():
    assert compute_stats([make_market(0)], {}, None) is None


def test_win_rate_without_resolved_bets_is_zero():
    stats = compute_stats([make_market(0)], {}, ALICE)
    assert stats.markets_won == 0
    assert stats.markets_lost == 0
    assert stats.win_rate == "0.0"
    assert stats.total_earnings == "0.0000"


def test_earnings_single_winning_market():
    # W = 10, T = 30, s = 2 -> 2 + 20 * 2 / 10 = 6
    market = make_market(0, ["10", "20"], resolved=True, winning=0)
    stakes = {0: {0: Decimal("2"), 1: Decimal("0")}}
    stats = compute_stats([market], stakes, ALICE)
    assert stats.total_earnings == "6.0000"
    assert stats.markets_won == 1
    assert stats.win_rate == "100.0"


def test_split_bet_counts_only_as_win():
    market = make_market(0, ["4", "6"], resolved=True, winning=1)
    stakes = {0: {0: Decimal("1"), 1: Decimal("1")}}
    stats = compute_stats([market], stakes, ALICE)
    assert (stats.markets_won, stats.markets_lost) == (1, 0)


def test_loss_requires_losing_stake():
    lost = make_market(0, ["4", "6"], resolved=True, winning=1)
    untouched = make_market(1, ["4", "6"], resolved=True, winning=1)
    unresolved = make_market(2, ["4", "6"])
    stakes = {
        0: {0: Decimal("1"), 1: Decimal("0")},
        1: {0: Decimal("0"), 1: Decimal("0")},
        2: {0: Decimal("3")},
    }
    stats = compute_stats([lost, untouched, unresolved], stakes, ALICE)
    assert (stats.markets_won, stats.markets_lost, stats.total_resolved_bets) == (0, 1, 1)
    assert stats.win_rate == "0.0"


def test_win_rate_rounds_half_up():
    markets = [make_market(i, ["1", "1"], resolved=True, winning=0) for i in range(3)]
    stakes = {0: {0: Decimal(1)}, 1: {0: Decimal(1)}, 2: {1: Decimal(1)}}
    stats = compute_stats(markets, stakes, ALICE)
    assert stats.win_rate == "66.7"
    assert format_percent(Decimal("12.25")) == "12.3"


def test_markets_created_compares_case_insensitively():
    markets = [make_market(0, owner=ALICE.lower()), make_market(1, owner=ALICE), make_market(2, owner=BOB)]
    stats = compute_stats(markets, {}, ALICE.upper().replace("0X", "0x"))
    assert stats.markets_created == 2


def test_earnings_sum_over_markets():
    a = make_market(0, ["10", "20"], resolved=True, winning=0)
    b = make_market(1, ["3", "0", "1"], outcomes=["A", "B", "C"], resolved=True, winning=0)
    stakes = {0: {0: Decimal("2")}, 1: {0: Decimal("1.5")}}
    # 6 + (1.5 + 1 * 1.5 / 3) = 8
    assert compute_stats([a, b], stakes, ALICE).total_earnings == "8.0000"


def test_payout_guard_when_winning_pool_empty():
    # Inconsistent data: viewer stake but no stake recorded on the winning outcome
    market = make_market(0, ["0", "5"], resolved=True, winning=0)
    assert estimated_payout(market, Decimal("2")) == Decimal("2")
    assert estimated_payout(market, Decimal("0")) == Decimal("0")


def test_format_amount_rounds_half_up():
    assert format_amount(Decimal("0.00005")) == "0.0001"
    assert format_amount(Decimal("1")) == "1.0000"
    assert format_amount(Decimal("2") / Decimal("3")) == "0.6667"
