def render_step_text(farm, action, observation, reward, terminated, truncated, info):
    # Called after a step.
    engine = farm.engine
    s = f"Farm:\t{farm.shortname}\tWeek {engine.week_index} ({engine.current_week_label})\n"
    s += f"Phase: {engine.phase.value}\n"
    s += f"Action: {action} -> {farm.action_converter.describe(action)}"
    s += " (accepted)\n" if info.get("accepted") else " (ignored)\n"
    s += "Observation: " + " ".join(f"{x:.2f}" for x in observation) + "\n"
    s += f"Reward received: {reward}\n"
    s += "Information:\n"
    for key, value in info.items():
        s += f"\t- {key}: {value}\n"
    if terminated:
        s += "Terminated.\n"
    if truncated:
        s += "Truncated.\n"
    print(s)
