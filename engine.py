from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Mapping, Optional

from activity_service import ActivityService, new_id, utc_now
from db import SnapshotRepository
from errors import AlreadyCompletedError, InvalidFormatError, NotFoundError
from events import DomainEvent
from leveling_service import LevelingService
from quest_service import QuestService
from save_state import (
    STORAGE_KEY,
    ExerciseSet,
    ExpMultipliers,
    Record,
    SaveState,
    Settings,
    default_state,
)
from snapshot import ExportedSnapshot, SnapshotCodec

logger = logging.getLogger(__name__)


def _field_names(model: type[Record], changes: Mapping) -> dict:
    """Map snapshot keys such as ``calorieGoal`` onto model field names."""
    if not isinstance(changes, Mapping):
        raise ValueError(f"{model.__name__} changes must be a mapping")
    aliases = {f.alias: name for name, f in model.model_fields.items() if f.alias}
    out = {}
    for key, value in changes.items():
        name = aliases.get(key, key)
        if name not in model.model_fields:
            raise ValueError(f"unknown setting: {key}")
        out[name] = value
    return out


@dataclass
class OperationResult:
    state: SaveState
    events: list[DomainEvent] = field(default_factory=list)
    record: object = None
    exp_gained: float = 0.0
    changed: bool = True


class ProgressionEngine:
    """Owns the save state and exposes the only operations that change it.

    Every operation runs against a deep copy and swaps it in only once it has
    fully succeeded, so a failure never leaves a half-updated state behind.
    ``on_change`` is called with the new state after each committed change.
    """

    def __init__(
        self,
        state: SaveState | None = None,
        on_change: Optional[Callable[[SaveState], None]] = None,
        clock: Callable[[], datetime.datetime] = utc_now,
        id_factory: Callable[[], str] = new_id,
        leveling: LevelingService | None = None,
    ) -> None:
        self._state = state if state is not None else default_state()
        self.on_change = on_change
        self.leveling = leveling or LevelingService()
        self.activities = ActivityService(self.leveling, clock, id_factory)
        self.quests = QuestService(self.leveling)

    @classmethod
    def open(
        cls,
        repo: SnapshotRepository,
        key: str = STORAGE_KEY,
        **kwargs,
    ) -> "ProgressionEngine":
        """Load the persisted save under ``key`` and persist every change back."""
        data = repo.load(key)
        state = None
        if data is not None:
            try:
                state = SnapshotCodec.deserialize(data)
            except InvalidFormatError:
                stamp = kwargs.get("clock", utc_now)().strftime("%Y%m%dT%H%M%S%fZ")
                backup = f"{key}.invalid-{stamp}"
                logger.error(
                    "Stored snapshot %r is invalid; kept as %r, starting fresh",
                    key,
                    backup,
                )
                repo.save(backup, data)

        def persist(new_state: SaveState) -> None:
            repo.save(key, SnapshotCodec.serialize(new_state))

        return cls(state, on_change=persist, **kwargs)

    @property
    def state(self) -> SaveState:
        return self._state

    def _draft(self) -> SaveState:
        return self._state.model_copy(deep=True)

    def _commit(
        self,
        draft: SaveState,
        events: list[DomainEvent],
        record: object = None,
        exp_gained: float = 0.0,
    ) -> OperationResult:
        self._state = draft
        if self.on_change is not None:
            self.on_change(draft)
        return OperationResult(draft, events, record, exp_gained)

    def _unchanged(self) -> OperationResult:
        return OperationResult(self._state, changed=False)

    def log_workout(self, items: Iterable[ExerciseSet | Mapping]) -> OperationResult:
        draft = self._draft()
        logged = self.activities.log_workout(draft, items)
        return self._commit(draft, logged.events, logged.record, logged.exp)

    def log_diet(
        self,
        calories: float,
        protein: float,
        carbs: float = 0.0,
        fat: float = 0.0,
    ) -> OperationResult:
        draft = self._draft()
        logged = self.activities.log_diet(draft, calories, protein, carbs, fat)
        return self._commit(draft, logged.events, logged.record, logged.exp)

    def log_weight(self, weight: float, body_fat: float | None = None) -> OperationResult:
        draft = self._draft()
        logged = self.activities.log_weight(draft, weight, body_fat)
        return self._commit(draft, logged.events, logged.record)

    def log_photo(self, image: bytes, media_type: str | None = None) -> OperationResult:
        draft = self._draft()
        logged = self.activities.log_photo(draft, image, media_type)
        return self._commit(draft, logged.events, logged.record)

    def complete_quest(self, quest_id: str) -> OperationResult:
        """Complete a quest once; unknown or finished quests are a no-op."""
        draft = self._draft()
        try:
            quest, events = self.quests.complete(draft, quest_id)
        except (NotFoundError, AlreadyCompletedError) as e:
            logger.debug("Quest completion ignored: %s", e)
            return self._unchanged()
        return self._commit(draft, events, quest, quest.reward_exp)

    def update_settings(self, **changes) -> OperationResult:
        """Apply partial settings changes given by field name or snapshot key.

        Multipliers may be given as a nested ``exp_multipliers`` mapping. The
        merged settings are validated as a whole before anything changes, so
        one bad value rejects the entire update.
        """
        current = self._state.settings.model_dump()
        changes = _field_names(Settings, changes)
        multipliers = _field_names(
            ExpMultipliers, changes.pop("exp_multipliers", {})
        )
        merged = {**current, **changes}
        merged["exp_multipliers"] = {**current["exp_multipliers"], **multipliers}
        settings = Settings.model_validate(merged)
        draft = self._draft()
        draft.settings = settings
        return self._commit(draft, [], settings)

    def replace(self, state: SaveState) -> OperationResult:
        """Swap in ``state`` wholesale; nothing of the prior state survives."""
        state = SaveState.model_validate(state.model_dump())
        return self._commit(state, [])

    def reset(self) -> OperationResult:
        logger.info("Resetting save state to defaults")
        return self._commit(default_state(), [])

    def import_snapshot(self, data: bytes | str) -> OperationResult:
        state = SnapshotCodec.deserialize(data)
        logger.info("Imported snapshot at level %d", state.level)
        return self._commit(state, [])

    def export_snapshot(self) -> ExportedSnapshot:
        return SnapshotCodec.export(self._state)

    def duplicate_snapshot(self) -> ExportedSnapshot:
        return SnapshotCodec.duplicate(self._state)
