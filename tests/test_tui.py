"""Dashboard: countdown tick re-renders cells without contract reads."""

import asyncio

from conftest import ALICE, BOB, NOW, FakeMarketContract

from predmarket.session.state import MarketSession
from predmarket.tui.app import MarketTable, PredMarketTUI, StatsPanel


def test_tick_updates_countdown_without_reads():
    contract = FakeMarketContract()
    contract.add_market(BOB, "Rain?", ["Yes", "No"], NOW + 90)
    contract.add_market(ALICE, "Snow?", ["Yes", "No"], NOW + 7200)
    clock = {"now": NOW}
    session = MarketSession(contract, sender=ALICE, clock=lambda: clock["now"])
    app = PredMarketTUI(session, tick_interval_sec=3600)

    async def scenario():
        async with app.run_test() as pilot:
            await pilot.pause()
            await app._refresh_task
            await pilot.pause()
            table = app.query_one(MarketTable)
            assert table.row_count == 2
            assert table.get_cell("0", "remaining") == "1m 30s"
            assert table.get_cell("0", "status") == "active"
            assert "2/2 markets" in app.query_one(StatsPanel).status
            reads = contract.read_calls

            clock["now"] = NOW + 100
            app._tick()
            await pilot.pause()
            assert table.get_cell("0", "remaining") == "Ended"
            assert table.get_cell("0", "status") == "expired"
            assert table.get_cell("1", "remaining") == "1h 58m"

            clock["now"] = NOW + 3700
            app._tick()
            await pilot.pause()
            assert table.get_cell("1", "remaining") == "58m 20s"
            assert contract.read_calls == reads

    asyncio.run(scenario())
