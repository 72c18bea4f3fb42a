"""Read-side queries — detail views, filtered lists and statistics."""

from datetime import datetime, timezone
from uuid import uuid4

import pytest

from swinetrack.core.domain_types import LifeState, LotStatus, PenType, Site
from swinetrack.core.errors import ResourceNotFoundError
from swinetrack.schemas.pig import PigStateChange
from swinetrack.services import query_herd
from swinetrack.services.handle_lots import finalize_lot
from swinetrack.services.handle_pigs import change_life_state


async def test_lot_detail_lists_pens(test_db, herd):
    detail = await query_herd.get_lot(test_db, herd["lot"].id)
    assert detail.lot.code == herd["lot"].code
    assert [p.id for p in detail.pens] == [herd["pen_a"].id, herd["pen_b"].id]
    assert [p.tag for p in detail.pigs] == ["T-000001"]


async def test_pen_detail_lists_pigs(test_db, herd):
    detail = await query_herd.get_pen(test_db, herd["pen_a"].id)
    assert detail.lot_code == herd["lot"].code
    assert [p.tag for p in detail.pigs] == ["T-000001"]


async def test_missing_entities(test_db):
    for lookup in (query_herd.get_lot, query_herd.get_pen, query_herd.get_pig):
        with pytest.raises(ResourceNotFoundError):
            await lookup(test_db, uuid4())


async def test_list_lots_filters(test_db, make_lot):
    nursery = await make_lot(site="NURSERY")
    finishing = await make_lot(site="FINISHING")
    await finalize_lot(test_db, finishing.id)

    by_site = await query_herd.list_lots(test_db, site=Site.NURSERY)
    assert [lot.id for lot in by_site] == [nursery.id]
    closed = await query_herd.list_lots(test_db, status=LotStatus.FINALIZED)
    assert [lot.id for lot in closed] == [finishing.id]


async def test_list_pens_filters(test_db, herd, make_pen):
    await make_pen(herd["lot"].id, number="H-01", pen_type="INFIRMARY")
    infirmary = await query_herd.list_pens(test_db, lot_id=herd["lot"].id, pen_type=PenType.INFIRMARY)
    assert [p.number for p in infirmary] == ["H-01"]
    assert len(await query_herd.list_pens(test_db, lot_id=herd["lot"].id)) == 3


async def test_list_pigs_filters(test_db, herd, admit):
    sick = await admit(herd["lot"].id, herd["pen_b"].id)
    await change_life_state(test_db, sick.id, PigStateChange(state="SICK"))

    assert [p.id for p in await query_herd.list_pigs(test_db, state=LifeState.SICK)] == [sick.id]
    in_a = await query_herd.list_pigs(test_db, pen_id=herd["pen_a"].id)
    assert [p.tag for p in in_a] == ["T-000001"]


async def test_lot_stats(test_db, herd, admit):
    second = await admit(herd["lot"].id, herd["pen_a"].id)
    await change_life_state(test_db, second.id, PigStateChange(state="DEAD"))

    stats = await query_herd.lot_stats(
        test_db, herd["lot"].id, now=datetime(2024, 1, 15, 8, 0, tzinfo=timezone.utc),
    )
    assert stats.days_in_system == 10
    assert stats.current_live_count == 9
    assert stats.losses == 1
    assert stats.mortality_pct == 10.0
    assert stats.registered_pigs == 2
    assert stats.dead_pigs == 1


async def test_pen_stats(test_db, herd, admit):
    await admit(herd["lot"].id, herd["pen_a"].id, 30.0)
    stats = await query_herd.pen_stats(test_db, herd["pen_a"].id)
    assert stats.occupancy == 2
    assert stats.free_slots == 8
    assert stats.occupancy_pct == 20.0
    assert stats.average_weight == 25.0
    assert stats.active_pigs == 2
