"""Market query engine: search, status, participation, sort, probabilities."""

from decimal import Decimal

from conftest import ALICE, BOB, NOW, make_market

from predmarket.query.engine import (
    MarketQuery,
    MarketStatus,
    SortMode,
    StatusFilter,
    claimable_markets,
    filter_and_sort,
    find_market,
    market_status,
    outcome_probabilities,
    resolvable_markets,
)


def _ids(markets):
    return [m.market_id for m in markets]


def test_search_matches_outcome_label_only():
    markets = [
        make_market(0, question="Who wins the final?", outcomes=["Lakers", "Celtics"]),
        make_market(1, question="Will it rain?"),
    ]
    result = filter_and_sort(markets, {}, None, MarketQuery(search="celt"), NOW)
    assert _ids(result) == [0]


def test_search_is_case_insensitive_and_empty_matches_all():
    markets = [make_market(0, question="Will ETH hit 5k?"), make_market(1, question="Rain?")]
    assert _ids(filter_and_sort(markets, {}, None, MarketQuery(search="eth"), NOW)) == [0]
    assert _ids(filter_and_sort(markets, {}, None, MarketQuery(search=""), NOW)) == [1, 0]


def test_search_is_literal_substring():
    markets = [
        make_market(0, question="Rain?", outcomes=["Maybe Yes", "No"]),
        make_market(1, question="Snow?", outcomes=["Yes", "No"]),
    ]
    assert _ids(filter_and_sort(markets, {}, None, MarketQuery(search=" Yes"), NOW)) == [0]
    assert filter_and_sort(markets, {}, None, MarketQuery(search="   "), NOW) == []


def test_expired_until_resolved():
    past = make_market(0, deadline=NOW - 10)
    assert market_status(past, NOW) is MarketStatus.EXPIRED
    resolved = make_market(0, deadline=NOW - 10, resolved=True, winning=1)
    assert market_status(resolved, NOW) is MarketStatus.RESOLVED
    assert market_status(make_market(1, deadline=NOW + 10), NOW) is MarketStatus.ACTIVE
    # deadline == now is already expired
    assert market_status(make_market(2, deadline=NOW), NOW) is MarketStatus.EXPIRED


def test_status_filters():
    markets = [
        make_market(0, deadline=NOW + 100),
        make_market(1, deadline=NOW - 100),
        make_market(2, deadline=NOW - 100, resolved=True),
        make_market(3, deadline=NOW + 100, owner=ALICE),
    ]
    viewer = ALICE.lower()

    def ids(status):
        return sorted(_ids(filter_and_sort(markets, {}, viewer, MarketQuery(status=status), NOW)))

    assert ids(StatusFilter.ALL) == [0, 1, 2, 3]
    assert ids(StatusFilter.ACTIVE) == [0, 3]
    assert ids(StatusFilter.EXPIRED) == [1]
    assert ids(StatusFilter.RESOLVED) == [2]
    assert ids(StatusFilter.MINE) == [3]


def test_my_bets_requires_positive_stake():
    markets = [make_market(0), make_market(1), make_market(2)]
    stakes = {
        0: {0: Decimal("0.5"), 1: Decimal("0")},
        1: {0: Decimal("0"), 1: Decimal("0")},
    }
    result = filter_and_sort(markets, stakes, ALICE, MarketQuery(my_bets=True), NOW)
    assert _ids(result) == [0]


def test_filters_compose_with_and():
    markets = [
        make_market(0, question="Rain in Paris?", deadline=NOW + 100),
        make_market(1, question="Rain in Rome?", deadline=NOW - 100),
        make_market(2, question="Snow in Oslo?", deadline=NOW + 100),
    ]
    stakes = {0: {0: Decimal(1)}, 1: {0: Decimal(1)}, 2: {0: Decimal(1)}}
    query = MarketQuery(search="rain", status=StatusFilter.ACTIVE, my_bets=True)
    assert _ids(filter_and_sort(markets, stakes, ALICE, query, NOW)) == [0]


def test_filtering_is_idempotent():
    markets = [make_market(i, question=f"Q{i} rain" if i % 2 else f"Q{i}", deadline=NOW + i - 2) for i in range(6)]
    query = MarketQuery(search="rain", status=StatusFilter.ACTIVE)
    once = filter_and_sort(markets, {}, None, query, NOW)
    twice = filter_and_sort(once, {}, None, query, NOW)
    assert _ids(once) == _ids(twice)


def test_sort_total_staked_is_stable():
    markets = [make_market(0, ["5", "0"]), make_market(1, ["1", "0"]), make_market(2, ["2", "3"])]
    query = MarketQuery(sort=SortMode.TOTAL_STAKED)
    result = filter_and_sort(markets, {}, None, query, NOW)
    assert _ids(result) == [0, 2, 1]
    assert _ids(filter_and_sort(result, {}, None, query, NOW)) == [0, 2, 1]


def test_sort_total_staked_is_numeric():
    markets = [make_market(0, ["10", "0"]), make_market(1, ["2", "0"]), make_market(2, ["9.5", "0"])]
    result = filter_and_sort(markets, {}, None, MarketQuery(sort=SortMode.TOTAL_STAKED), NOW)
    assert _ids(result) == [0, 2, 1]


def test_sort_newest_and_deadline():
    markets = [
        make_market(0, deadline=NOW + 300),
        make_market(1, deadline=NOW + 100),
        make_market(2, deadline=NOW + 200),
    ]
    assert _ids(filter_and_sort(markets, {}, None, MarketQuery(sort=SortMode.NEWEST), NOW)) == [2, 1, 0]
    assert _ids(filter_and_sort(markets, {}, None, MarketQuery(sort=SortMode.DEADLINE), NOW)) == [1, 2, 0]


def test_sort_most_popular_counts_backed_outcomes():
    markets = [
        make_market(0, ["1", "0", "0"], outcomes=["A", "B", "C"]),
        make_market(1, ["1", "1", "1"], outcomes=["A", "B", "C"]),
        make_market(2, ["0", "4", "0"], outcomes=["A", "B", "C"]),
        make_market(3, ["2", "2", "0"], outcomes=["A", "B", "C"]),
    ]
    result = filter_and_sort(markets, {}, None, MarketQuery(sort=SortMode.MOST_POPULAR), NOW)
    assert _ids(result) == [1, 3, 0, 2]


def test_bookmarked_only():
    markets = [make_market(0), make_market(1), make_market(2)]
    query = MarketQuery(bookmarked_only=True)
    assert _ids(filter_and_sort(markets, {}, None, query, NOW, bookmarks=[2, 0])) == [2, 0]
    assert filter_and_sort(markets, {}, None, query, NOW) == []


def test_outcome_probabilities():
    market = make_market(0, ["3", "1"])
    assert outcome_probabilities(market) == [Decimal("75.0"), Decimal("25.0")]
    thirds = make_market(1, ["1", "1", "1"], outcomes=["A", "B", "C"])
    assert outcome_probabilities(thirds) == [Decimal("33.3")] * 3


def test_outcome_probabilities_unbacked_market():
    market = make_market(0, ["0", "0"])
    assert outcome_probabilities(market) == [Decimal("50"), Decimal("50")]


def test_resolvable_markets():
    markets = [
        make_market(0, owner=ALICE, deadline=NOW - 1),
        make_market(1, owner=ALICE, deadline=NOW + 100),
        make_market(2, owner=ALICE, deadline=NOW - 1, resolved=True),
        make_market(3, owner=BOB, deadline=NOW - 1),
    ]
    assert _ids(resolvable_markets(markets, ALICE.upper().replace("0X", "0x"), NOW)) == [0]
    assert resolvable_markets(markets, None, NOW) == []


def test_claimable_markets():
    markets = [
        make_market(0, ["1", "1"], resolved=True, winning=0),
        make_market(1, ["1", "1"], resolved=True, winning=1),
        make_market(2, ["1", "1"]),
    ]
    stakes = {0: {0: Decimal(1)}, 1: {0: Decimal(1)}, 2: {0: Decimal(1)}}
    assert _ids(claimable_markets(markets, stakes)) == [0]


def test_find_market():
    markets = [make_market(0), make_market(3)]
    assert find_market(markets, 3).market_id == 3
    assert find_market(markets, 1) is None
