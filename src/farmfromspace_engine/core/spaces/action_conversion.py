from farmfromspace_engine.core.structure.types import GameMode, RegionType

END_WEEK = ("end_week", None, None)


class ActionConverter:
    """
    Converts between gym (integer) actions and engine commands.

    Action 0 ends the week (resolution then week advance). Then, for each plot
    slot: irrigate, plant each crop of the catalog, nitrogen part A and B,
    harvest, unlock. Endless farms add one unlock action per region.
    """

    PLOT_COMMANDS = ("irrigate", "nitrogen_a", "nitrogen_b", "harvest", "unlock")

    def __init__(self, env):
        self.env = env
        self.crop_names = list(env.engine.crops.names())
        self.max_plots = env.engine.balance.max_plots_per_region
        self.actions = self.build_actions()

    def build_actions(self):
        actions = [END_WEEK]
        for plot in range(self.max_plots):
            actions.append(("irrigate", plot, None))
            for name in self.crop_names:
                actions.append(("plant", plot, name))
            for command in self.PLOT_COMMANDS[1:]:
                actions.append((command, plot, None))
        if self.env.engine.mode == GameMode.Endless:
            for region in RegionType:
                actions.append(("unlock_region", None, region.name))
        return actions

    @property
    def n(self):
        return len(self.actions)

    def gymaction_to_command(self, action):
        return self.actions[int(action)]

    def describe(self, action):
        command, plot, argument = self.gymaction_to_command(action)
        s = command
        if plot is not None:
            s += f" plot {plot}"
        if argument is not None:
            s += f" {argument}"
        return s

    def apply(self, engine, action):
        """Runs the engine command(s) of ``action``. Returns whether the engine accepted it."""
        command, plot, argument = self.gymaction_to_command(action)
        if command == "end_week":
            return engine.end_planning_and_resolve() and engine.next_week()
        if command == "unlock":
            return engine.unlock_plot(plot)
        if command == "unlock_region":
            return engine.unlock_region(argument)
        if not engine.select_plot(plot):
            return False
        if command == "irrigate":
            return engine.queue_irrigation()
        if command == "plant":
            return engine.plant_crop(argument)
        if command == "nitrogen_a":
            return engine.apply_nitrogen_part_a()
        if command == "nitrogen_b":
            return engine.apply_nitrogen_part_b()
        if command == "harvest":
            return engine.mode == GameMode.Endless and engine.harvest_selected_plot()
        raise ValueError(f"Unknown command {command}")

    def allowed_actions(self, engine):
        """Indices of the actions whose plot is unlocked (or that target no plot)."""
        allowed = []
        for i, (command, plot, _) in enumerate(self.actions):
            if plot is None or command == "unlock" or engine.economy.is_plot_unlocked(plot):
                allowed.append(i)
        return allowed
