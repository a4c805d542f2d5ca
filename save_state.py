"""Save-state model: the single aggregate holding character and history data.

Python attributes are snake_case; the snapshot document uses the camelCase
keys of the exported save format through field aliases.
"""

import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from algorithms.progression_math import ProgressionMath
from tools import PhotoTools

STORAGE_KEY = "solo-leveling-irl-offline"
STAT_NAMES = (
    "Strength",
    "Endurance",
    "Agility",
    "Vitality",
    "Intelligence",
    "Willpower",
)


class Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Stats(Record):
    """Attribute accumulators. Agility, Intelligence and Willpower have no
    producing rule yet and only change through imported snapshots."""

    strength: float = Field(alias="Strength", ge=0)
    endurance: float = Field(alias="Endurance", ge=0)
    agility: float = Field(alias="Agility", ge=0)
    vitality: float = Field(alias="Vitality", ge=0)
    intelligence: float = Field(alias="Intelligence", ge=0)
    willpower: float = Field(alias="Willpower", ge=0)


class ExerciseSet(Record):
    exercise: str
    sets: int = Field(ge=0)
    reps: int = Field(ge=0)
    weight: float = Field(ge=0)
    minutes: float = Field(ge=0)


class WorkoutEntry(Record):
    id: str
    date: datetime.datetime
    items: List[ExerciseSet]


class DietEntry(Record):
    id: str
    date: datetime.datetime
    calories: float = Field(ge=0)
    protein: float = Field(ge=0)
    carbs: float = Field(ge=0)
    fat: float = Field(ge=0)


class Quest(Record):
    id: str
    title: str
    type: Literal["daily", "weekly"]
    target: Optional[float] = Field(None, ge=0)
    progress: Optional[float] = Field(None, ge=0)
    reward_exp: float = Field(alias="rewardExp", ge=0)
    reward_coins: int = Field(alias="rewardCoins", ge=0)
    completed: bool


class WeightEntry(Record):
    date: datetime.datetime
    weight: float = Field(gt=0)
    body_fat: Optional[float] = Field(None, alias="bodyFat", ge=0, le=100)


class PhotoEntry(Record):
    id: str
    date: datetime.datetime
    data_url: str = Field(alias="dataUrl")

    @field_validator("data_url")
    @classmethod
    def _check_data_url(cls, value: str) -> str:
        PhotoTools.parse_data_url(value)
        return value

    @classmethod
    def from_bytes(
        cls, id: str, date: datetime.datetime, image: bytes, media_type: str
    ) -> "PhotoEntry":
        return cls(id=id, date=date, data_url=PhotoTools.to_data_url(image, media_type))

    @property
    def media_type(self) -> str:
        return PhotoTools.parse_data_url(self.data_url)[0]

    @property
    def image(self) -> bytes:
        return PhotoTools.parse_data_url(self.data_url)[1]


class ExpMultipliers(Record):
    minutes: float = Field(ge=0)
    total_weight: float = Field(alias="totalWeight", ge=0)
    protein: float = Field(ge=0)


class Settings(Record):
    display_name: str = Field(alias="name")
    calorie_goal: float = Field(alias="calorieGoal", gt=0)
    exp_multipliers: ExpMultipliers = Field(alias="expMultipliers")


class SaveState(Record):
    level: int = Field(ge=1)
    exp: float = Field(ge=0)
    next_level_exp: float = Field(alias="nextLevelExp", gt=0)
    coins: int = Field(ge=0)
    stats: Stats
    workouts: List[WorkoutEntry]
    diet: List[DietEntry]
    quests: List[Quest]
    inventory: List[str]
    weights: List[WeightEntry]
    photos: List[PhotoEntry]
    settings: Settings

    @model_validator(mode="after")
    def _check_progression(self) -> "SaveState":
        if self.next_level_exp != ProgressionMath.level_threshold(self.level):
            raise ValueError(
                f"nextLevelExp {self.next_level_exp} does not match level {self.level}"
            )
        if self.exp >= self.next_level_exp:
            raise ValueError("exp must be below nextLevelExp")
        ids = [q.id for q in self.quests]
        if len(set(ids)) != len(ids):
            raise ValueError("quest ids must be unique")
        return self

    def find_quest(self, quest_id: str) -> Optional[Quest]:
        for quest in self.quests:
            if quest.id == quest_id:
                return quest
        return None


_DEFAULT_DOCUMENT = {
    "level": 1,
    "exp": 0,
    "nextLevelExp": ProgressionMath.level_threshold(1),
    "coins": 0,
    "stats": {name: 0 for name in STAT_NAMES},
    "workouts": [],
    "diet": [],
    "quests": [
        {
            "id": "dq1",
            "title": "Consume 120g protein",
            "type": "daily",
            "target": 120,
            "progress": 0,
            "rewardExp": 50,
            "rewardCoins": 5,
            "completed": False,
        },
        {
            "id": "dq2",
            "title": "Workout 60 min",
            "type": "daily",
            "target": 60,
            "progress": 0,
            "rewardExp": 60,
            "rewardCoins": 5,
            "completed": False,
        },
        {
            "id": "wq1",
            "title": "Increase squat by 5kg",
            "type": "weekly",
            "rewardExp": 150,
            "rewardCoins": 20,
            "completed": False,
        },
    ],
    "inventory": ["Beginner's Training Manual"],
    "weights": [],
    "photos": [],
    "settings": {
        "name": "Player",
        "calorieGoal": 2200,
        "expMultipliers": {"minutes": 2, "totalWeight": 0.1, "protein": 0.5},
    },
}


def default_state() -> SaveState:
    """Return a fresh copy of the first-run save state."""
    return SaveState.model_validate(_DEFAULT_DOCUMENT)
