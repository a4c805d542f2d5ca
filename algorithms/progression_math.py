import math
from dataclasses import dataclass
from typing import Iterable, TYPE_CHECKING

if TYPE_CHECKING:
    from save_state import DietEntry, ExerciseSet, ExpMultipliers, Settings


@dataclass(frozen=True)
class WorkoutYield:
    strength_exp: float
    endurance_exp: float
    total_minutes: float
    total_volume: float

    @property
    def exp(self) -> float:
        return self.strength_exp + self.endurance_exp


@dataclass(frozen=True)
class DietYield:
    vitality_exp: float

    @property
    def exp(self) -> float:
        return self.vitality_exp


class ProgressionMath:
    """Pure formulas turning activity records into EXP."""

    BASE_THRESHOLD: float = 100.0
    GROWTH: float = 1.2
    CALORIE_BAND: float = 100.0
    CALORIE_BONUS: float = 25.0

    @classmethod
    def level_threshold(cls, level: int) -> int:
        """Return the EXP needed to advance from ``level`` to the next one."""
        if level < 1:
            raise ValueError("level must be at least 1")
        try:
            return math.floor(cls.BASE_THRESHOLD * cls.GROWTH ** (level - 1))
        except OverflowError:
            raise ValueError(f"level {level} is out of range")

    @staticmethod
    def workout_yield(
        items: Iterable["ExerciseSet"], multipliers: "ExpMultipliers"
    ) -> WorkoutYield:
        total_minutes = 0.0
        total_volume = 0.0
        for item in items:
            total_minutes += item.minutes
            total_volume += item.weight * item.reps * item.sets
        return WorkoutYield(
            strength_exp=total_volume * multipliers.total_weight,
            endurance_exp=total_minutes * multipliers.minutes,
            total_minutes=total_minutes,
            total_volume=total_volume,
        )

    @classmethod
    def diet_yield(cls, record: "DietEntry", settings: "Settings") -> DietYield:
        """Protein EXP plus a flat bonus for landing near the calorie goal."""
        vitality = record.protein * settings.exp_multipliers.protein
        if abs(record.calories - settings.calorie_goal) <= cls.CALORIE_BAND:
            vitality += cls.CALORIE_BONUS
        return DietYield(vitality_exp=vitality)

    @staticmethod
    def exp_percent(exp: float, next_level_exp: float) -> float:
        if next_level_exp <= 0:
            raise ValueError("next_level_exp must be positive")
        return min(100.0, exp / next_level_exp * 100.0)
