import numpy as np


class Farm_Agent:
    def __init__(self):
        self.farm = None

    def reset(self, observation):
        pass

    def init(self, farm):
        self.farm = farm

    def update(self, observation, reward, terminated, truncated, info):
        pass

    def choose_action(self):
        raise NotImplementedError


class Farm_RandomAgent(Farm_Agent):
    """
    Picks random actions among those targeting unlocked plots, ending the
    week more and more often as the week goes on.
    """

    def __init__(self, seed=None):
        super(Farm_RandomAgent, self).__init__()
        self.rng = np.random.default_rng(seed)
        self.x = 1

    def reset(self, observation):
        self.x = 1

    def choose_action(self):
        self.x += 0.5
        if self.rng.random() > 2 / self.x:
            self.x = 1
            return 0  # end week
        allowed = self.farm.action_converter.allowed_actions(self.farm.engine)
        return int(self.rng.choice(allowed))


class Farm_PolicyAgent(Farm_Agent):
    """
    Plays a fixed weekly schedule: ``policy(week)`` lists the commands
    (as ``(command, plot, argument)`` tuples) of the week, then the week ends.
    """

    def __init__(self, policy):
        super(Farm_PolicyAgent, self).__init__()
        self.policy = policy
        self.queue = []

    def reset(self, observation):
        self.queue = []

    def choose_action(self):
        if not self.queue:
            self.queue = list(self.policy(self.farm.engine.week_index)) + [("end_week", None, None)]
        command = self.queue.pop(0)
        return self.farm.action_converter.actions.index(command)


def wheat_policy(week):
    """Plants wheat on both free plots, splits the nitrogen over the first two weeks."""
    if week == 0:
        return [("plant", 0, "Wheat"), ("plant", 1, "Wheat"), ("nitrogen_a", 0, None)]
    if week == 1:
        return [("nitrogen_b", 0, None), ("irrigate", 1, None)]
    return []
