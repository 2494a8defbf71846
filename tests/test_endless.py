import pytest

from farmfromspace_engine.core.dynamics.endless import EndlessTurnEngine
from farmfromspace_engine.core.structure.region import FarmState
from farmfromspace_engine.core.structure.types import RegionType, SoilTexture, TurnPhase, VegetationPhase
from tests.helpers import finish_week


def test_new_farm_starts_in_tropical_monsoon(endless):
    state = endless.farm_state
    assert state.unlocked_regions == [RegionType.TropicalMonsoon]
    assert state.gold == 60
    assert endless.economy.soil_texture == SoilTexture.Clay
    assert sorted(endless.economy.unlocked_plots) == [0, 1]


def test_locked_region_cannot_be_driven(balance, crops, regions, dry_table):
    with pytest.raises(ValueError):
        EndlessTurnEngine(
            FarmState.from_balance(balance),
            RegionType.SemiAridSteppe,
            balance=balance,
            crops=crops,
            regions=regions,
            provider=dry_table,
        )


def test_harvest_ready_plot(endless):
    assert endless.plant_crop("Quick")
    assert not endless.harvest_selected_plot()  # not grown yet
    endless.end_planning_and_resolve()
    plot = endless.plots[0]
    assert plot.ready_for_harvest
    # Clay soil at 0.6 vs optimum 0.7: adequacy 0.8, growth 10 * 0.94
    assert plot.accumulated_growth == pytest.approx(9.4)
    assert not endless.harvest_selected_plot()  # End phase

    endless.next_week()
    gold = endless.gold
    assert endless.harvest_selected_plot()
    assert endless.gold == gold + 9
    assert not plot.is_planted
    assert not endless.harvest_selected_plot()


def test_runoff_debited_immediately(endless):
    endless.plots[0].soil_fraction = 0.9
    endless.queue_irrigation(0)
    gold = endless.gold
    endless.end_planning_and_resolve()
    assert endless.plots[0].runoff_event_count == 1
    assert endless.gold == gold - 3
    endless.next_week()
    assert endless.gold == gold - 3


def test_harvest_keeps_scheduled_leaching(endless):
    endless.plant_crop("Quick")
    endless.end_planning_and_resolve()
    endless.next_week()
    endless.plots[0].soil_fraction = 0.9
    endless.apply_nitrogen_part_a()
    assert endless.harvest_selected_plot()
    assert endless.plots[0].pending_leach_penalty == 5
    gold = endless.gold
    finish_week(endless)
    assert endless.gold == gold - 5


def test_never_reaches_harvest_phase(balance, crops, regions):
    engine = EndlessTurnEngine(balance=balance, crops=crops, regions=regions, seed=3)
    for _ in range(30):
        finish_week(engine)
        assert engine.phase == TurnPhase.Planning
    assert engine.week_index == 30
    assert engine.final_score is None


def test_region_unlock_and_shared_gold(endless):
    assert not endless.unlock_region(RegionType.TemperateContinental)
    endless.purse.gold = 300
    assert endless.get_region_unlock_cost("TemperateContinental") == 250
    assert endless.unlock_region("TemperateContinental")
    assert endless.gold == 50
    assert not endless.unlock_region(RegionType.TemperateContinental)
    assert not endless.unlock_region("Atlantis")

    other = endless.switch_region(RegionType.TemperateContinental)
    assert other is not endless
    assert other.economy.soil_texture == SoilTexture.Loam
    assert other.purse is endless.purse
    other.queue_irrigation(0)
    assert endless.gold == 45


def test_switch_to_locked_region_is_a_noop(endless):
    assert endless.switch_region(RegionType.SemiAridSteppe) is endless
    assert endless.switch_region(RegionType.TropicalMonsoon) is endless


def test_weeks_are_global_across_regions(endless):
    endless.purse.gold = 1000
    endless.unlock_region(RegionType.SemiAridSteppe)
    finish_week(endless)
    finish_week(endless)
    other = endless.switch_region(RegionType.SemiAridSteppe)
    assert other.week_index == 2
    assert other.economy.week_index == 2


def test_autosave_after_each_week(balance, crops, regions, dry_table):
    saves = []
    engine = EndlessTurnEngine(
        balance=balance, crops=crops, regions=regions, provider=dry_table, on_save=saves.append
    )
    engine.end_planning_and_resolve()
    assert saves == []
    engine.next_week()
    assert len(saves) == 1
    assert saves[0]["mode"] == "endless"
    assert saves[0]["farm"]["global_week"] == 1
    assert saves[0]["environment"] == {"rain_mm": 0.0, "et_mm": 0.0, "phase": "GreenUp"}
    assert "environment_history" not in saves[0]


def test_plot_cap_per_region(endless):
    endless.purse.gold = 10_000
    costs = []
    while True:
        cost = endless.get_next_plot_cost()
        if not endless.buy_new_plot():
            break
        costs.append(cost)
    assert costs == [60, 75, 94, 117, 146, 183, 229]
    assert endless.economy.unlocked_count == 9


def test_preview_soil_fraction(endless):
    endless.queue_irrigation(0)
    # 42 mm + 10 mm out of 70 mm
    assert endless.preview_soil_fraction(0) == pytest.approx(52 / 70)
    assert endless.plots[0].soil_fraction == pytest.approx(0.6)
    endless.end_planning_and_resolve()
    assert endless.preview_soil_fraction(0) == pytest.approx(52 / 70)


def test_split_nitrogen_survives_region_switch(endless):
    endless.purse.gold = 1000
    endless.unlock_region(RegionType.TemperateContinental)
    engine = endless.switch_region(RegionType.TemperateContinental, provider=endless.provider)
    assert engine.plant_crop("Soybean")
    engine.apply_nitrogen_part_a()
    finish_week(engine)

    engine = engine.switch_region(RegionType.TropicalMonsoon, provider=endless.provider)
    engine = engine.switch_region(RegionType.TemperateContinental, provider=endless.provider)
    assert engine.plots[0].nitrogen_part_a_phase == VegetationPhase.GreenUp
    assert engine.apply_nitrogen_part_b()
    assert engine.sim_core.split_bonus(engine.plots[0]) == 0.15
