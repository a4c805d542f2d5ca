import datetime
import itertools
import json
import os
import sys
import unittest

from pydantic import ValidationError

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from db import SnapshotRepository
from engine import ProgressionEngine
from errors import InvalidFormatError
from events import LeveledUp, QuestCompleted
from save_state import STORAGE_KEY, default_state
from snapshot import SnapshotCodec

SQUAT = {"exercise": "Squat", "sets": 3, "reps": 5, "weight": 60, "minutes": 30}


class ProgressionEngineTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.saved = []
        counter = itertools.count(1)
        self.engine = ProgressionEngine(
            on_change=self.saved.append,
            clock=lambda: datetime.datetime(2024, 3, 1, tzinfo=datetime.timezone.utc),
            id_factory=lambda: f"r{next(counter)}",
        )

    def test_starts_from_default(self) -> None:
        self.assertEqual(self.engine.state, default_state())

    def test_log_workout_persists(self) -> None:
        result = self.engine.log_workout([SQUAT])
        self.assertTrue(result.changed)
        self.assertAlmostEqual(result.exp_gained, 150)
        self.assertEqual(result.record.id, "r1")
        self.assertIn(LeveledUp(2), result.events)
        self.assertEqual(len(self.saved), 1)
        self.assertIs(self.saved[0], self.engine.state)
        self.assertAlmostEqual(self.engine.state.stats.strength, 90)
        self.assertAlmostEqual(self.engine.state.stats.endurance, 60)

    def test_previous_state_is_not_mutated(self) -> None:
        before = self.engine.state
        self.engine.log_diet(2150, 150)
        self.assertEqual(before, default_state())
        self.assertIsNot(before, self.engine.state)

    def test_failed_operation_leaves_state(self) -> None:
        before = self.engine.state
        bad = dict(SQUAT, reps=-5)
        with self.assertRaises(ValidationError):
            self.engine.log_workout([SQUAT, bad])
        self.assertIs(self.engine.state, before)
        self.assertEqual(self.saved, [])

    def test_complete_quest_once(self) -> None:
        result = self.engine.complete_quest("dq2")
        self.assertEqual(
            result.events, [QuestCompleted("dq2", "Workout 60 min", 60.0, 5)]
        )
        snapshot = SnapshotCodec.serialize(self.engine.state)
        again = self.engine.complete_quest("dq2")
        self.assertFalse(again.changed)
        self.assertEqual(again.events, [])
        self.assertEqual(SnapshotCodec.serialize(self.engine.state), snapshot)
        self.assertEqual(len(self.saved), 1)

    def test_complete_unknown_quest(self) -> None:
        result = self.engine.complete_quest("missing")
        self.assertFalse(result.changed)
        self.assertEqual(self.engine.state, default_state())
        self.assertEqual(self.saved, [])

    def test_update_settings(self) -> None:
        self.engine.update_settings(
            display_name="Hunter", exp_multipliers={"totalWeight": 0.2}
        )
        settings = self.engine.state.settings
        self.assertEqual(settings.display_name, "Hunter")
        self.assertEqual(settings.exp_multipliers.total_weight, 0.2)
        self.assertEqual(settings.exp_multipliers.minutes, 2)
        result = self.engine.log_workout([SQUAT])
        self.assertAlmostEqual(result.exp_gained, 180 + 60)

    def test_settings_change_is_not_retroactive(self) -> None:
        self.engine.log_workout([SQUAT])
        self.engine.update_settings(expMultipliers={"totalWeight": 1, "minutes": 10})
        self.assertAlmostEqual(self.engine.state.stats.strength, 90)

    def test_invalid_settings_rejected(self) -> None:
        with self.assertRaises(ValueError):
            self.engine.update_settings(calorie_goal=0)
        with self.assertRaises(ValueError):
            self.engine.update_settings(favourite_colour="blue")
        with self.assertRaises(ValueError):
            self.engine.update_settings(name="ok", expMultipliers={"protein": -1})
        with self.assertRaises(ValueError):
            self.engine.update_settings(expMultipliers=5)
        with self.assertRaises(ValueError):
            self.engine.update_settings(exp_multipliers=None)
        self.assertEqual(self.engine.state.settings.display_name, "Player")

    def test_import_replaces_state(self) -> None:
        self.engine.log_workout([SQUAT])
        other = ProgressionEngine()
        other.log_diet(1000, 20)
        result = self.engine.import_snapshot(other.export_snapshot().data)
        self.assertEqual(self.engine.state, other.state)
        self.assertEqual(self.engine.state.workouts, [])
        self.assertEqual(result.events, [])

    def test_rejected_import_keeps_state(self) -> None:
        self.engine.log_workout([SQUAT])
        before = SnapshotCodec.serialize(self.engine.state)
        doc = json.loads(before)
        del doc["stats"]
        with self.assertRaises(InvalidFormatError):
            self.engine.import_snapshot(json.dumps(doc))
        self.assertEqual(SnapshotCodec.serialize(self.engine.state), before)
        self.assertEqual(len(self.saved), 1)

    def test_replace_copies_state(self) -> None:
        state = default_state()
        state.coins = 42
        self.engine.replace(state)
        state.coins = 0
        self.assertEqual(self.engine.state.coins, 42)

    def test_reset(self) -> None:
        self.engine.log_workout([SQUAT])
        self.engine.complete_quest("dq1")
        self.engine.log_weight(90)
        self.engine.reset()
        self.assertEqual(self.engine.state, default_state())
        self.assertEqual(self.saved[-1], default_state())

    def test_export_name_has_level(self) -> None:
        self.engine.log_workout([SQUAT])
        self.assertEqual(
            self.engine.export_snapshot().filename,
            "solo-leveling-irl-offline-level-2.json",
        )
        self.assertEqual(
            self.engine.duplicate_snapshot().filename,
            "solo-leveling-save-level-2.json",
        )


class PersistentEngineTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_engine.db"
        if os.path.exists(self.db_path):
            os.remove(self.db_path)
        self.repo = SnapshotRepository(self.db_path)

    def tearDown(self) -> None:
        if os.path.exists(self.db_path):
            os.remove(self.db_path)

    def test_absent_key_gives_default(self) -> None:
        engine = ProgressionEngine.open(self.repo)
        self.assertEqual(engine.state, default_state())
        self.assertIsNone(self.repo.load(STORAGE_KEY))

    def test_every_mutation_is_stored(self) -> None:
        engine = ProgressionEngine.open(self.repo)
        engine.log_workout([SQUAT])
        engine.complete_quest("dq1")
        reopened = ProgressionEngine.open(SnapshotRepository(self.db_path))
        self.assertEqual(reopened.state, engine.state)
        self.assertEqual(reopened.state.level, 2)
        self.assertEqual(reopened.state.coins, 15)

    def test_corrupt_store_is_preserved(self) -> None:
        self.repo.save(STORAGE_KEY, b"{broken")
        engine = ProgressionEngine.open(self.repo)
        self.assertEqual(engine.state, default_state())
        backups = [k for k in self.repo.keys() if k.startswith(f"{STORAGE_KEY}.invalid-")]
        self.assertEqual(len(backups), 1)
        self.assertEqual(self.repo.load(backups[0]), b"{broken")
        engine.log_weight(70)
        restored = SnapshotCodec.deserialize(self.repo.load(STORAGE_KEY))
        self.assertEqual(len(restored.weights), 1)

    def test_repeated_corruption_keeps_every_backup(self) -> None:
        minutes = itertools.count()

        def clock() -> datetime.datetime:
            return datetime.datetime(
                2024, 3, 1, 12, next(minutes), tzinfo=datetime.timezone.utc
            )

        self.repo.save(STORAGE_KEY, b"first")
        ProgressionEngine.open(self.repo, clock=clock)
        self.repo.save(STORAGE_KEY, b"second")
        ProgressionEngine.open(self.repo, clock=clock)
        self.assertEqual(
            self.repo.keys(),
            [
                STORAGE_KEY,
                f"{STORAGE_KEY}.invalid-20240301T120000000000Z",
                f"{STORAGE_KEY}.invalid-20240301T120100000000Z",
            ],
        )
        self.assertEqual(
            self.repo.load(f"{STORAGE_KEY}.invalid-20240301T120000000000Z"), b"first"
        )
        self.assertEqual(
            self.repo.load(f"{STORAGE_KEY}.invalid-20240301T120100000000Z"), b"second"
        )

    def test_custom_key(self) -> None:
        engine = ProgressionEngine.open(self.repo, key="slot-2")
        engine.log_weight(70)
        self.assertEqual(self.repo.keys(), ["slot-2"])


if __name__ == "__main__":
    unittest.main()
