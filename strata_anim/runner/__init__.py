from .replay import mount, replay, replay_realtime, state_of

__all__ = ["mount", "replay", "replay_realtime", "state_of"]
