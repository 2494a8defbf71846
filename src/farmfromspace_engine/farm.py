import gymnasium as gym
from gymnasium.utils import seeding

from farmfromspace_engine.core.dynamics.endless import EndlessTurnEngine
from farmfromspace_engine.core.dynamics.season import SeasonTurnEngine
from farmfromspace_engine.core.spaces.action_conversion import ActionConverter
from farmfromspace_engine.core.spaces.space_builder import SpaceBuilder
from farmfromspace_engine.core.structure.types import GameMode, TurnPhase, parse_enum
from farmfromspace_engine.rendering.farm_renderer import FarmRenderer


class Farm(gym.Env):
    """
    Gym environment wrapping a turn engine, for agents.

    Parameters
    ----------
    mode : GameMode or str
        "season" (terminates at harvest) or "endless" (truncated after
        ``max_weeks`` weeks).
    engine_kwargs : dict
        Keyword arguments of :class:`SeasonTurnEngine` or
        :class:`EndlessTurnEngine` (balance, crops, regions, region, ...).
        A ``provider`` given here is reused across resets; otherwise each
        reset draws a new weather seed from the environment's generator.
    max_weeks : int
        Truncation horizon of endless farms.
    seed : int
        Seed of the random-number generator.
    render_mode : str
        "text" or "json".

    Notes
    -----
    Each step runs one command. The reward is the gold delta of the step; in
    season mode the harvest gold is added on the terminal step, so the
    episode return plus the starting gold equals the final score.
    """

    metadata = {"render_modes": ["text", "json"]}

    def __init__(self, mode=GameMode.Season, engine_kwargs=None, max_weeks=52, seed=None, render_mode="text", name="farm"):
        self.mode = parse_enum(GameMode, mode)
        self.engine_kwargs = dict(engine_kwargs or {})
        self.max_weeks = max_weeks
        self.render_mode = render_mode
        self.shortname = name

        self.seed(seed)
        self.engine = self._make_engine()

        self.action_converter = ActionConverter(self)
        self.space_builder = SpaceBuilder(self)
        self.observation_space = self.space_builder.build_gym_observation_space()
        self.action_space = self.space_builder.build_gym_action_space(seed)

        self.renderer = FarmRenderer(self, render_mode)

    def seed(self, seed=None):
        """
        Modifies the seed of the random generator used in the environment.
        """
        self._np_random, seed = seeding.np_random(seed)
        return [seed]

    def _make_engine(self):
        kwargs = dict(self.engine_kwargs)
        if "provider" not in kwargs:
            kwargs["seed"] = int(self.np_random.integers(0, 2**31 - 1))
        if self.mode == GameMode.Season:
            return SeasonTurnEngine(**kwargs)
        return EndlessTurnEngine(**kwargs)

    def reset(self, seed=None, options=None):
        """
        Resets the environment with a fresh engine.
        """
        super().reset(seed=seed, options=options)
        self.engine = self._make_engine()
        self.renderer.history = []
        return self.space_builder.observe(self.engine), self._info(accepted=True)

    def step(self, action):
        """
        Runs one command on the engine (Gym standard API).
        """
        gold_before = self.engine.gold
        accepted = self.action_converter.apply(self.engine, action)
        reward = float(self.engine.gold - gold_before)

        terminated = self.engine.phase == TurnPhase.Harvest
        if terminated and accepted:
            reward += self.engine.harvest_gold
        truncated = self.mode == GameMode.Endless and self.engine.week_index >= self.max_weeks

        observation = self.space_builder.observe(self.engine)
        return observation, reward, terminated, truncated, self._info(accepted, action)

    def _info(self, accepted, action=None):
        info = {
            "accepted": accepted,
            "week": self.engine.week_index,
            "week_label": self.engine.current_week_label,
            "phase": self.engine.phase.value,
            "gold": self.engine.gold,
        }
        if action is not None:
            info["action"] = self.action_converter.describe(action)
        if self.engine.final_score is not None:
            info["final_score"] = self.engine.final_score
        return info

    def render(self):
        """Render the current state of the farm."""
        return self.renderer.render()

    def close(self):
        super().close()
        self.renderer.close()

    def __str__(self):
        s = f"Short name: {self.shortname}\nMode: {self.mode.value}\n"
        s += str(self.engine)
        s += f"Gym actions ({self.action_converter.n}):\n"
        for i in range(self.action_converter.n):
            s += f"\t{i}: {self.action_converter.describe(i)}\n"
        return s
