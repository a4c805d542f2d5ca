import json
import logging
from dataclasses import dataclass

from errors import InvalidFormatError
from save_state import SaveState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportedSnapshot:
    filename: str
    data: bytes


class SnapshotCodec:
    """Encode and decode the whole save state as one JSON document."""

    EXPORT_NAME = "solo-leveling-irl-offline-level-{level}.json"
    DUPLICATE_NAME = "solo-leveling-save-level-{level}.json"
    OPTIONAL_QUEST_KEYS = ("target", "progress")

    @classmethod
    def to_document(cls, state: SaveState) -> dict:
        doc = state.model_dump(mode="json", by_alias=True)
        for quest in doc["quests"]:
            for key in cls.OPTIONAL_QUEST_KEYS:
                if quest.get(key) is None:
                    quest.pop(key, None)
        return doc

    @classmethod
    def serialize(cls, state: SaveState, indent: int | None = 2) -> bytes:
        """Return the deterministic JSON encoding of ``state``."""
        return json.dumps(
            cls.to_document(state), indent=indent, ensure_ascii=False
        ).encode("utf-8")

    @staticmethod
    def deserialize(data: bytes | str) -> SaveState:
        """Decode a snapshot, rejecting anything that is not a valid save.

        Types are checked strictly and only the camelCase document keys are
        accepted. Nothing is repaired, so one bad value fails the whole document.
        """
        try:
            return SaveState.model_validate_json(
                data, strict=True, by_alias=True, by_name=False
            )
        except ValueError as e:
            logger.warning("Rejected snapshot: %s", e)
            raise InvalidFormatError(str(e)) from e

    @classmethod
    def export(cls, state: SaveState) -> ExportedSnapshot:
        return ExportedSnapshot(
            cls.EXPORT_NAME.format(level=state.level), cls.serialize(state)
        )

    @classmethod
    def duplicate(cls, state: SaveState) -> ExportedSnapshot:
        return ExportedSnapshot(
            cls.DUPLICATE_NAME.format(level=state.level),
            cls.serialize(state, indent=None),
        )
