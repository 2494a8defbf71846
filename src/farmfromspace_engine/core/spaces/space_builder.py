import numpy as np
from gymnasium.spaces import Box, Discrete

GLOBAL_FEATURES = ("gold", "week", "rain_mm", "et_mm", "vegetation_phase")
PLOT_FEATURES = ("unlocked", "planted", "soil_fraction", "growth_progress", "ready")


class SpaceBuilder:
    """
    Constructs the observation and action spaces of the farm environment.

    Observations are a flat vector: the global features, then the plot
    features for every plot slot (zeros for slots never materialized).
    """

    def __init__(self, env):
        self.env = env
        self.max_plots = env.engine.balance.max_plots_per_region

    @property
    def observation_size(self):
        return len(GLOBAL_FEATURES) + len(PLOT_FEATURES) * self.max_plots

    def build_gym_observation_space(self):
        low = np.zeros(self.observation_size, dtype=np.float32)
        high = np.ones(self.observation_size, dtype=np.float32)
        low[0], high[0] = -np.inf, np.inf  # gold
        high[1] = np.inf  # week
        high[2], high[3] = 200.0, 50.0
        high[4] = 3.0
        return Box(low=low, high=high, dtype=np.float32)

    def build_gym_action_space(self, seed=None):
        return Discrete(self.env.action_converter.n, seed=seed)

    def observe(self, engine):
        obs = np.zeros(self.observation_size, dtype=np.float32)
        env = engine.environment
        obs[0] = engine.gold
        obs[1] = engine.week_index
        if env is not None:
            obs[2], obs[3], obs[4] = env.rain_mm, env.et_mm, env.phase.value

        offset = len(GLOBAL_FEATURES)
        for view in engine.snapshot().plots:
            if view.index >= self.max_plots:
                continue
            i = offset + len(PLOT_FEATURES) * view.index
            obs[i : i + len(PLOT_FEATURES)] = (
                float(view.unlocked),
                float(bool(view.crop_name)),
                view.soil_fraction,
                view.growth_progress,
                float(view.ready_for_harvest),
            )
        return obs
