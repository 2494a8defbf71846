import numpy as np
import pytest

from farmfromspace_engine.core.structure.types import RegionType, TurnPhase
from farmfromspace_engine.farm import Farm
from farmfromspace_engine.make_farm import make_farm
from farmfromspace_engine.run_farm import run_gym_xp, run_policy_xp
from tests.game_agents.basic_agents import Farm_PolicyAgent, Farm_RandomAgent, wheat_policy
from tests.helpers import make_table


@pytest.fixture
def season_farm(crops, regions):
    return Farm(
        mode="season",
        engine_kwargs={"crops": crops, "regions": regions, "provider": make_table(6, rain_mm=5.0, et_mm=5.0)},
        seed=0,
    )


def test_spaces(season_farm):
    n_crops = 7  # default catalog plus the two test crops
    assert season_farm.action_space.n == 1 + 9 * (1 + n_crops + 4)
    assert season_farm.observation_space.shape == (5 + 5 * 9,)
    observation, info = season_farm.reset(seed=1)
    assert season_farm.observation_space.contains(observation)
    assert observation[0] == 60
    assert info["phase"] == "planning"


def test_season_episode_return_matches_final_score(season_farm):
    season_farm.reset(seed=0)
    converter = season_farm.action_converter
    total = 0.0
    for command in [("plant", 0, "Wheat"), ("irrigate", 0, None), ("plant", 1, "Sorghum")]:
        _, reward, _, _, info = season_farm.step(converter.actions.index(command))
        assert info["accepted"]
        total += reward
    terminated = False
    steps = 0
    while not terminated:
        _, reward, terminated, truncated, info = season_farm.step(0)
        total += reward
        steps += 1
    assert steps == 6
    assert info["final_score"] == season_farm.engine.final_score
    assert total + 60 == pytest.approx(season_farm.engine.final_score)

    # Stepping after the harvest changes nothing
    _, reward, terminated, _, info = season_farm.step(0)
    assert reward == 0.0 and terminated and not info["accepted"]


def test_rejected_action_gives_no_reward(season_farm):
    season_farm.reset()
    action = season_farm.action_converter.actions.index(("irrigate", 5, None))
    _, reward, terminated, truncated, info = season_farm.step(action)
    assert not info["accepted"]
    assert reward == 0.0
    assert not terminated and not truncated


def test_endless_farm_truncates(crops, regions):
    farm = Farm(mode="endless", engine_kwargs={"crops": crops, "regions": regions}, max_weeks=3, seed=4)
    farm.reset()
    truncated = False
    steps = 0
    while not truncated:
        _, _, terminated, truncated, _ = farm.step(0)
        assert not terminated
        steps += 1
    assert steps == 3
    assert ("unlock_region", None, "SemiAridSteppe") in farm.action_converter.actions


def test_reset_seeds_weather(crops, regions):
    farm = Farm(mode="season", engine_kwargs={"crops": crops, "regions": regions})
    first, _ = farm.reset(seed=11)
    again, _ = farm.reset(seed=11)
    assert np.array_equal(first, again)


def test_random_agent_runs(season_farm):
    reward = run_gym_xp(season_farm, Farm_RandomAgent(seed=0), max_steps=500, render=False)
    assert season_farm.engine.phase == TurnPhase.Harvest
    assert reward + 60 == pytest.approx(season_farm.engine.final_score)


def test_policy_agent_runs(season_farm, capsys):
    run_gym_xp(season_farm, Farm_PolicyAgent(wheat_policy), render=True)
    engine = season_farm.engine
    assert engine.phase == TurnPhase.Harvest
    assert engine.harvest_gold > 0
    assert "Reward received" in capsys.readouterr().out


def test_run_policy_xp_on_engine(season):
    def irrigate_first_plot(engine):
        if engine.week_index == 0:
            engine.plant_crop("Wheat")
        engine.queue_irrigation(0)

    score = run_policy_xp(season, irrigate_first_plot)
    assert season.phase == TurnPhase.Harvest
    assert score == season.final_score


def test_make_farm_from_yaml(tmp_path):
    (tmp_path / "weeks.yaml").write_text(
        "weeks:\n" + "".join("  - {rain_mm: 4.0, et_mm: 6.0, phase: GreenUp}\n" for _ in range(3)),
        encoding="utf-8",
    )
    (tmp_path / "farm.yaml").write_text(
        "Farm:\n  mode: season\n  region: TemperateContinental\n  total_weeks: 3\n  seed: 5\n"
        "environment: weeks.yaml\n",
        encoding="utf-8",
    )
    farm = make_farm(tmp_path / "farm.yaml")
    assert (tmp_path / "farm_balance_vanilla.yaml").exists()
    assert farm.engine.region_definition.region == RegionType.TemperateContinental
    assert farm.engine.total_weeks == 3
    observation, _ = farm.reset()
    assert observation[2] == pytest.approx(4.0)
    assert observation[3] == pytest.approx(6.0)


def test_make_endless_farm_autosaves(tmp_path):
    (tmp_path / "farm.yaml").write_text(
        "Farm:\n  mode: endless\n  max_weeks: 2\nsave: save.yaml\n", encoding="utf-8"
    )
    farm = make_farm(tmp_path / "farm.yaml")
    farm.reset()
    farm.step(0)
    assert (tmp_path / "save.yaml").exists()
