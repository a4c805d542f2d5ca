from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class DomainEvent:
    """Something the presentation layer may want to announce."""

    def to_dict(self) -> dict:
        data = asdict(self)
        data["type"] = type(self).__name__
        return data


@dataclass(frozen=True)
class LeveledUp(DomainEvent):
    level: int


@dataclass(frozen=True)
class QuestCompleted(DomainEvent):
    quest_id: str
    title: str
    reward_exp: float
    reward_coins: int


@dataclass(frozen=True)
class ActivityLogged(DomainEvent):
    kind: str
    record_id: str | None
    exp: float
