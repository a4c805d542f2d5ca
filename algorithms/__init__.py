from .progression_math import DietYield, ProgressionMath, WorkoutYield

__all__ = ["ProgressionMath", "WorkoutYield", "DietYield"]
