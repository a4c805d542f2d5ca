import datetime
import logging
import uuid
from dataclasses import dataclass, field
from typing import Callable, Iterable, Mapping

from algorithms import ProgressionMath
from events import ActivityLogged, DomainEvent
from leveling_service import LevelingService
from save_state import (
    DietEntry,
    ExerciseSet,
    PhotoEntry,
    SaveState,
    WeightEntry,
    WorkoutEntry,
)
from tools import PhotoTools

logger = logging.getLogger(__name__)


def utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class LoggedActivity:
    record: object
    exp: float = 0.0
    events: list[DomainEvent] = field(default_factory=list)


class ActivityService:
    """Append activity records to the ledgers and grant their yields.

    Every ledger is prepended so the most recent record comes first. Records
    are never edited or removed once logged.
    """

    def __init__(
        self,
        leveling: LevelingService,
        clock: Callable[[], datetime.datetime] = utc_now,
        id_factory: Callable[[], str] = new_id,
    ) -> None:
        self.leveling = leveling
        self.clock = clock
        self.id_factory = id_factory

    def log_workout(
        self, state: SaveState, items: Iterable[ExerciseSet | Mapping]
    ) -> LoggedActivity:
        sets = [ExerciseSet.model_validate(i).model_copy() for i in items]
        record = WorkoutEntry(id=self.id_factory(), date=self.clock(), items=sets)
        yld = ProgressionMath.workout_yield(record.items, state.settings.exp_multipliers)
        state.workouts.insert(0, record)
        state.stats.strength += yld.strength_exp
        state.stats.endurance += yld.endurance_exp
        events = self.leveling.apply_exp(state, yld.exp)
        logger.debug(
            "Workout %s: %.1f min, %.1f kg volume, %.2f EXP",
            record.id,
            yld.total_minutes,
            yld.total_volume,
            yld.exp,
        )
        return LoggedActivity(
            record, yld.exp, [ActivityLogged("workout", record.id, yld.exp), *events]
        )

    def log_diet(
        self,
        state: SaveState,
        calories: float,
        protein: float,
        carbs: float = 0.0,
        fat: float = 0.0,
    ) -> LoggedActivity:
        record = DietEntry(
            id=self.id_factory(),
            date=self.clock(),
            calories=calories,
            protein=protein,
            carbs=carbs,
            fat=fat,
        )
        yld = ProgressionMath.diet_yield(record, state.settings)
        state.diet.insert(0, record)
        state.stats.vitality += yld.vitality_exp
        events = self.leveling.apply_exp(state, yld.exp)
        return LoggedActivity(
            record, yld.exp, [ActivityLogged("diet", record.id, yld.exp), *events]
        )

    def log_weight(
        self, state: SaveState, weight: float, body_fat: float | None = None
    ) -> LoggedActivity:
        record = WeightEntry(date=self.clock(), weight=weight, body_fat=body_fat)
        state.weights.insert(0, record)
        return LoggedActivity(record, 0.0, [ActivityLogged("weight", None, 0.0)])

    def log_photo(
        self, state: SaveState, image: bytes, media_type: str | None = None
    ) -> LoggedActivity:
        if media_type is None:
            media_type = PhotoTools.sniff_media_type(image)
        record = PhotoEntry.from_bytes(self.id_factory(), self.clock(), image, media_type)
        state.photos.insert(0, record)
        return LoggedActivity(record, 0.0, [ActivityLogged("photo", record.id, 0.0)])
