import logging

from errors import AlreadyCompletedError, NotFoundError
from events import DomainEvent, QuestCompleted
from leveling_service import LevelingService
from save_state import Quest, SaveState

logger = logging.getLogger(__name__)


class QuestService:
    """Manual quest completion. Quests are static seed data; nothing here
    advances ``progress`` or regenerates daily and weekly quests."""

    def __init__(self, leveling: LevelingService) -> None:
        self.leveling = leveling

    def complete(self, state: SaveState, quest_id: str) -> tuple[Quest, list[DomainEvent]]:
        quest = state.find_quest(quest_id)
        if quest is None:
            raise NotFoundError(f"quest {quest_id!r} not found")
        if quest.completed:
            raise AlreadyCompletedError(f"quest {quest_id!r} already completed")
        quest.completed = True
        state.coins += quest.reward_coins
        events: list[DomainEvent] = [
            QuestCompleted(quest.id, quest.title, quest.reward_exp, quest.reward_coins)
        ]
        events.extend(self.leveling.apply_exp(state, quest.reward_exp))
        logger.info(
            "Quest %s completed: +%s EXP, +%d coins",
            quest.id,
            quest.reward_exp,
            quest.reward_coins,
        )
        return quest, events
