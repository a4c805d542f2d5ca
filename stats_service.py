from __future__ import annotations
from typing import Dict, List

from algorithms import ProgressionMath
from save_state import SaveState


class StatisticsService:
    """Derived read-only views over a save state."""

    KG_TO_LB = 2.20462

    def weight_trend(self, state: SaveState, unit: str = "kg") -> List[Dict]:
        """Return body weight entries oldest first for charting."""
        if unit not in ("kg", "lb"):
            raise ValueError("unit must be 'kg' or 'lb'")
        factor = self.KG_TO_LB if unit == "lb" else 1.0
        return [
            {
                "date": w.date.isoformat(),
                "weight": round(w.weight * factor, 2),
                "body_fat": w.body_fat,
            }
            for w in reversed(state.weights)
        ]

    def progress(self, state: SaveState) -> Dict:
        """Summarise level, EXP bar and currency for a status display."""
        return {
            "name": state.settings.display_name,
            "level": state.level,
            "exp": state.exp,
            "next_level_exp": state.next_level_exp,
            "exp_percent": round(
                ProgressionMath.exp_percent(state.exp, state.next_level_exp), 2
            ),
            "coins": state.coins,
            "stats": state.stats.model_dump(by_alias=True),
            "quests_open": sum(1 for q in state.quests if not q.completed),
        }
