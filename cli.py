import argparse
import json
import logging
import os
import sys

from config import YamlConfig
from db import SnapshotRepository
from engine import OperationResult, ProgressionEngine
from errors import InvalidFormatError
from localization import translator
from save_state import STORAGE_KEY
from stats_service import StatisticsService

logger = logging.getLogger(__name__)


def open_engine(db_path: str, key: str = STORAGE_KEY) -> ProgressionEngine:
    return ProgressionEngine.open(SnapshotRepository(db_path), key)


def parse_item(text: str) -> dict:
    """Parse ``exercise,sets,reps,weight,minutes`` into an exercise set."""
    parts = [p.strip() for p in text.split(",")]
    if len(parts) != 5:
        raise ValueError(
            f"invalid item {text!r}; expected 'exercise,sets,reps,weight,minutes'"
        )
    name, sets, reps, weight, minutes = parts
    return {
        "exercise": name,
        "sets": int(sets),
        "reps": int(reps),
        "weight": float(weight),
        "minutes": float(minutes),
    }


def print_result(result: OperationResult) -> None:
    for event in result.events:
        title, description = translator.notification(event)
        print(f"{title}: {description}" if description else title)


def show_status(db_path: str, key: str = STORAGE_KEY) -> dict:
    summary = StatisticsService().progress(open_engine(db_path, key).state)
    print(json.dumps(summary, indent=2))
    return summary


def log_workout(db_path: str, items: list[str], key: str = STORAGE_KEY) -> OperationResult:
    result = open_engine(db_path, key).log_workout([parse_item(i) for i in items])
    print_result(result)
    return result


def export_save(
    db_path: str,
    output_dir: str = ".",
    key: str = STORAGE_KEY,
    duplicate: bool = False,
) -> str:
    engine = open_engine(db_path, key)
    snapshot = engine.duplicate_snapshot() if duplicate else engine.export_snapshot()
    out_path = os.path.join(output_dir, snapshot.filename)
    with open(out_path, "wb") as f:
        f.write(snapshot.data)
    return out_path


def import_save(path: str, db_path: str, key: str = STORAGE_KEY) -> OperationResult:
    with open(path, "rb") as f:
        data = f.read()
    return open_engine(db_path, key).import_snapshot(data)


def reset_save(db_path: str, key: str = STORAGE_KEY) -> OperationResult:
    return open_engine(db_path, key).reset()


def demo_data(db_path: str, key: str = STORAGE_KEY) -> None:
    """Log a sample workout, meal and weigh-in if the save is empty."""
    engine = open_engine(db_path, key)
    if engine.state.workouts:
        print("Save already contains workouts")
        return
    print_result(
        engine.log_workout(
            [
                {"exercise": "Squat", "sets": 3, "reps": 5, "weight": 60, "minutes": 30},
                {"exercise": "Bench Press", "sets": 3, "reps": 8, "weight": 40, "minutes": 20},
            ]
        )
    )
    print_result(engine.log_diet(2150, 150, 200, 60))
    engine.log_weight(80.0, 18.0)
    print("Demo data inserted")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Progression utility commands")
    parser.add_argument("--config", default="settings.yaml")
    parser.add_argument("--db", default=None)
    sub = parser.add_subparsers(dest="cmd", required=True)

    sub.add_parser("status")

    wk = sub.add_parser("log-workout")
    wk.add_argument(
        "--item",
        action="append",
        required=True,
        help="exercise,sets,reps,weight,minutes (repeatable)",
    )

    diet = sub.add_parser("log-diet")
    diet.add_argument("--calories", type=float, required=True)
    diet.add_argument("--protein", type=float, required=True)
    diet.add_argument("--carbs", type=float, default=0.0)
    diet.add_argument("--fat", type=float, default=0.0)

    wt = sub.add_parser("log-weight")
    wt.add_argument("--weight", type=float, required=True)
    wt.add_argument("--body-fat", type=float, default=None)

    photo = sub.add_parser("log-photo")
    photo.add_argument("--file", required=True)

    quest = sub.add_parser("complete-quest")
    quest.add_argument("quest_id")

    exp = sub.add_parser("export")
    exp.add_argument("--out", default=None)

    dup = sub.add_parser("duplicate")
    dup.add_argument("--out", default=None)

    imp = sub.add_parser("import")
    imp.add_argument("--in", dest="src", required=True)

    rst = sub.add_parser("reset")
    rst.add_argument("--yes", action="store_true", help="confirm losing all progress")

    sub.add_parser("demo")

    args = parser.parse_args(argv)
    try:
        settings = YamlConfig(args.config).settings()
    except ValueError as e:
        print(f"invalid settings: {e}", file=sys.stderr)
        return 2
    logging.basicConfig(level=settings.log_level)
    translator.set_language(settings.language)
    db_path = args.db or settings.db_path
    key = settings.storage_key

    try:
        if args.cmd == "status":
            show_status(db_path, key)
        elif args.cmd == "log-workout":
            log_workout(db_path, args.item, key)
        elif args.cmd == "log-diet":
            print_result(
                open_engine(db_path, key).log_diet(
                    args.calories, args.protein, args.carbs, args.fat
                )
            )
        elif args.cmd == "log-weight":
            print_result(open_engine(db_path, key).log_weight(args.weight, args.body_fat))
        elif args.cmd == "log-photo":
            with open(args.file, "rb") as f:
                print_result(open_engine(db_path, key).log_photo(f.read()))
        elif args.cmd == "complete-quest":
            result = open_engine(db_path, key).complete_quest(args.quest_id)
            if not result.changed:
                print(f"Quest {args.quest_id} not found or already completed")
            print_result(result)
        elif args.cmd in ("export", "duplicate"):
            path = export_save(
                db_path,
                args.out or settings.export_dir,
                key,
                duplicate=args.cmd == "duplicate",
            )
            print(f"Saved {path}")
        elif args.cmd == "import":
            result = import_save(args.src, db_path, key)
            print(f"Import successful: level {result.state.level}")
        elif args.cmd == "reset":
            if not args.yes:
                print("Refusing to reset without --yes", file=sys.stderr)
                return 1
            reset_save(db_path, key)
            print("Save reset")
        elif args.cmd == "demo":
            demo_data(db_path, key)
    except InvalidFormatError as e:
        print(f"Import failed: invalid file format ({e})", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
