import numpy as np

from farmfromspace_engine.core.structure.types import TurnPhase
from farmfromspace_engine.core.utils.logging_utils import get_logger

logger = get_logger("farmfromspace.run")


def run_gym_xp(farm, agent, max_steps=np.inf, render=True):
    """
    Runs ``agent`` on ``farm`` until termination, truncation or ``max_steps``.
    Returns the cumulated reward.
    """
    agent.init(farm)
    observation, information = farm.reset()
    agent.reset(observation)
    if render:
        farm.render()

    terminated = truncated = False
    total_reward = 0.0
    i = 0
    while not (terminated or truncated) and i < max_steps:
        action = agent.choose_action()
        observation, reward, terminated, truncated, info = farm.step(action)
        if render:
            farm.renderer.render_step(action, observation, reward, terminated, truncated, info)
        agent.update(observation, reward, terminated, truncated, info)
        total_reward += reward
        i += 1

    if render:
        farm.render()
    logger.info(f"Episode finished after {i} steps! Total reward: {total_reward}")
    return total_reward


def run_policy_xp(engine, policy, max_weeks=10000, show_actions=False):
    """
    Plays a weekly policy directly on a turn engine.

    ``policy(engine)`` issues the planning commands of the current week; the
    run then resolves and advances, until the harvest or ``max_weeks``.
    Returns the final score (season) or the remaining gold (endless).
    """
    weeks = 0
    while engine.phase != TurnPhase.Harvest and weeks < max_weeks:
        gold_before = engine.gold
        policy(engine)
        if show_actions:
            print(f"Week = {engine.week_index}, spent {gold_before - engine.gold} gold")
        engine.end_planning_and_resolve()
        engine.next_week()
        weeks += 1
    if engine.final_score is not None:
        return engine.final_score
    return engine.gold
