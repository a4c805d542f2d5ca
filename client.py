import requests
from typing import Optional


class ProgressionClient:
    """Simple REST client for the progression API."""

    def __init__(self, base_url: str = "http://localhost:8000") -> None:
        self.base_url = base_url.rstrip("/")

    def progress(self) -> dict:
        resp = requests.get(f"{self.base_url}/progress")
        resp.raise_for_status()
        return resp.json()

    def log_workout(self, items: list[dict]) -> dict:
        resp = requests.post(f"{self.base_url}/workouts", json=items)
        resp.raise_for_status()
        return resp.json()

    def log_diet(
        self, calories: float, protein: float, carbs: float = 0.0, fat: float = 0.0
    ) -> dict:
        resp = requests.post(
            f"{self.base_url}/diet",
            params={"calories": calories, "protein": protein, "carbs": carbs, "fat": fat},
        )
        resp.raise_for_status()
        return resp.json()

    def log_weight(self, weight: float, body_fat: Optional[float] = None) -> dict:
        params = {"weight": weight}
        if body_fat is not None:
            params["body_fat"] = body_fat
        resp = requests.post(f"{self.base_url}/weights", params=params)
        resp.raise_for_status()
        return resp.json()

    def complete_quest(self, quest_id: str) -> dict:
        resp = requests.post(f"{self.base_url}/quests/{quest_id}/complete")
        resp.raise_for_status()
        return resp.json()

    def export_snapshot(self) -> bytes:
        resp = requests.get(f"{self.base_url}/snapshot/export")
        resp.raise_for_status()
        return resp.content

    def import_snapshot(self, data: bytes) -> dict:
        resp = requests.post(
            f"{self.base_url}/snapshot/import",
            data=data,
            headers={"Content-Type": "application/json"},
        )
        resp.raise_for_status()
        return resp.json()

    def reset(self) -> dict:
        resp = requests.post(f"{self.base_url}/snapshot/reset")
        resp.raise_for_status()
        return resp.json()
