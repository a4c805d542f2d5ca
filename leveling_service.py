import logging
import math

from algorithms import ProgressionMath
from events import LeveledUp
from save_state import SaveState

logger = logging.getLogger(__name__)


class LevelingService:
    """Fold EXP gains into a save state, resolving any level-ups."""

    LEVEL_UP_COINS: int = 10

    def __init__(self, level_up_coins: int | None = None) -> None:
        self.level_up_coins = (
            self.LEVEL_UP_COINS if level_up_coins is None else level_up_coins
        )

    def apply_exp(self, state: SaveState, delta: float) -> list[LeveledUp]:
        """Add ``delta`` EXP to ``state`` in place.

        Non-positive deltas leave the state untouched. Several level-ups from
        one delta are reported as a single ``LeveledUp`` for the final level.
        """
        if not math.isfinite(delta):
            raise ValueError("EXP delta must be finite")
        if delta <= 0:
            return []
        start_level = state.level
        state.exp += delta
        while state.exp >= state.next_level_exp:
            state.exp -= state.next_level_exp
            state.level += 1
            state.coins += self.level_up_coins
            state.next_level_exp = float(ProgressionMath.level_threshold(state.level))
        if state.level == start_level:
            return []
        logger.info("Leveled up from %d to %d", start_level, state.level)
        return [LeveledUp(level=state.level)]
