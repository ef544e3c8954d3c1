"""
Weight Predictor
================

Suggests next weights for today's session of a named workout.

Baseline per exercise: the first recorded weight for the same exercise
(case-insensitive) in the 5 most recent earlier sessions of the workout,
newest first; otherwise the exercise's own displayed weight.

Progression on baseline w:
    w < 40        -> w + 2.5
    40 <= w < 80  -> w + 5
    w >= 80       -> w + 10
"""

import logging
import math
from typing import List, Optional

from fitness_agent.repository import WorkoutStore
from fitness_agent.schemas import Exercise, WeightPrediction, WeightSuggestion
from fitness_agent.time_utils import ZonedClock

logger = logging.getLogger(__name__)

HISTORY_LOOKBACK = 5


def suggest_next_weight(last_weight: Optional[float]) -> Optional[float]:
    """Progressive overload step for a baseline; None when there is no baseline."""
    if last_weight is None or math.isnan(last_weight):
        return None
    if last_weight < 40:
        return last_weight + 2.5
    if last_weight < 80:
        return last_weight + 5
    return last_weight + 10


class WeightPredictor:

    def __init__(self, store: WorkoutStore, clock: ZonedClock, history_limit: int = HISTORY_LOOKBACK):
        self.store = store
        self.clock = clock
        self.history_limit = history_limit

    def predict(self, workout_name: str) -> WeightPrediction:
        today = self.clock.today()
        target = workout_name.lower()
        workout = next(
            (w for w in self.store.list_workouts(today) if w.name.lower() == target),
            None,
        )
        if workout is None:
            return WeightPrediction(workout=None, suggestions=[])

        history = self._history_exercises(workout.name, today)

        suggestions = []
        for ex in self.store.list_exercises(workout.id):
            historical = self._last_historical_weight(history, ex.name)
            baseline = historical if historical is not None else ex.default_weight
            suggestions.append(WeightSuggestion(
                exercise=ex.name,
                last_weight=baseline,
                suggested_weight=suggest_next_weight(baseline),
            ))

        logger.info(f"Computed {len(suggestions)} weight suggestions for {workout.name}")
        return WeightPrediction(workout=workout, suggestions=suggestions)

    def _history_exercises(self, workout_name: str, today) -> List[List[Exercise]]:
        """Exercise tables of earlier sessions, newest first."""
        sessions = self.store.find_recent_workouts_by_name(workout_name, self.history_limit, before=today)
        return [self.store.list_exercises(s.id) for s in sessions]

    @staticmethod
    def _last_historical_weight(history: List[List[Exercise]], exercise_name: str) -> Optional[float]:
        name = exercise_name.lower()
        for exercises in history:
            for ex in exercises:
                # A zero weight is treated as "not recorded"
                if ex.name.lower() == name and ex.default_weight:
                    return ex.default_weight
        return None
