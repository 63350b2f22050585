"""Connect Dots Gymnasium Environment."""

import gymnasium as gym
import numpy as np

from connectdots_src.dots.editor import PointerEvent, PointerKind
from connectdots_src.dots.grid import Color, Coordinate
from connectdots_src.dots.session import GameSession
from connectdots_src.util.config import get_int

POINTER_KINDS: list[PointerKind] = list(PointerKind)


class ConnectDotsEnv(gym.Env):
    """Connect Dots environment for gymnasium.

    An action is ``(kind, x, y)`` where kind indexes PointerKind (down, move,
    up) and (x, y) is the cell under the pointer; the cell is ignored for up.
    The observation is the board's color grid indexed [y, x].
    """

    metadata = {"render_modes": ["ansi"]}

    def __init__(
        self,
        session: GameSession,
        max_steps: int | None = None,
        render_mode: str | None = None,
    ):
        """Initialize the environment around an existing session."""
        super().__init__()
        self.session = session
        self.max_steps = max_steps if max_steps is not None else get_int("gym.max_steps", 500)
        self.render_mode = render_mode
        self._steps = 0

        size = self.session.board.size
        self.observation_space = gym.spaces.Box(
            low=int(Color.NO_COLOR),
            high=max(int(c) for c in Color),
            shape=(size, size),
            dtype=np.int8,
        )
        self.action_space = gym.spaces.MultiDiscrete([len(POINTER_KINDS), size, size])

    def reset(self, *, seed: int | None = None, options: dict | None = None) -> tuple[np.ndarray, dict]:
        """Restart the current level."""
        super().reset(seed=seed)
        self.session.repeat()
        self.session.drain_segment_deltas()
        self._steps = 0
        return self.session.board.grid, self._info()

    def step(self, action: np.ndarray) -> tuple[np.ndarray, float, bool, bool, dict]:
        """Feed one pointer event to the session.

        The reward is the change in covered cells as a share of the board,
        plus 1.0 when the step completes the level.
        """
        kind, x, y = (int(v) for v in action)
        event = PointerEvent(POINTER_KINDS[kind], Coordinate(x, y))

        before, was_completed = self.session.coverage, self.session.completed
        self.session.handle(event)
        self.session.drain_segment_deltas()
        self._steps += 1

        reward = (self.session.coverage - before) / self.session.area
        if self.session.completed and not was_completed:
            reward += 1.0

        terminated = self.is_game_over()
        truncated = not terminated and self._steps >= self.max_steps
        return self.session.board.grid, float(reward), terminated, truncated, self._info()

    def render(self) -> str | None:
        if self.render_mode == "ansi":
            return self.session.board.board_str()
        return None

    def is_game_over(self) -> bool:
        """Check if the game is over."""
        return self.session.completed

    def _info(self) -> dict:
        return {"moves": self.session.moves, "coverage": self.session.coverage}
