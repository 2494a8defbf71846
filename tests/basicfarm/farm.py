import os

from farmfromspace_engine.make_farm import make_farm
from farmfromspace_engine.run_farm import run_gym_xp
from tests.game_agents.basic_agents import Farm_RandomAgent


def env():
    yaml_path = os.path.join(os.path.dirname(__file__), "farm.yaml")
    return make_farm(yaml_path)


if __name__ == "__main__":
    agent = Farm_RandomAgent()
    run_gym_xp(env(), agent, max_steps=200, render=True)
