import json
from dataclasses import asdict

from farmfromspace_engine.rendering.text_renderer import render_step_text


class FarmRenderer:
    """
    Text and JSON rendering of a farm environment. The JSON mode keeps one
    snapshot per rendered step and exports them on close.
    """

    def __init__(self, env, render_mode="text"):
        self.env = env
        self.render_mode = render_mode
        self.history = []

    def close(self):
        if self.render_mode == "text":
            print("End of rendering")
        if self.render_mode == "json":
            self.export_history_to_json("./")

    def render(self):
        if self.render_mode == "text":
            return self.render_text()
        if self.render_mode == "json":
            return self.render_json()
        return None

    def render_text(self):
        s = str(self.env.engine)
        print("-" * 50)
        print(s, end="")
        print("-" * 50)
        return s

    def render_step(self, action, observation, reward, terminated, truncated, info):
        if self.render_mode == "text":
            render_step_text(self.env, action, observation, reward, terminated, truncated, info)
        elif self.render_mode == "json":
            self.render_json()

    def state_to_dict(self):
        snapshot = asdict(self.env.engine.snapshot())
        env = self.env.engine.environment
        snapshot["environment"] = env.to_dict() if env is not None else None
        return snapshot

    def render_json(self):
        snapshot = self.state_to_dict()
        self.history.append(snapshot)
        return json.dumps(snapshot)

    def export_history_to_json(self, folder):
        path = f"{folder}/{self.env.shortname}_history.json"
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.history, f, indent=2)
        return path
