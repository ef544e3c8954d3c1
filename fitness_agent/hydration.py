"""
Hydration tracking: one running total per zoned day.
"""
import logging

from fitness_agent.repository import WorkoutStore
from fitness_agent.schemas import HydrationStatus
from fitness_agent.time_utils import ZonedClock

logger = logging.getLogger(__name__)


class HydrationTracker:

    def __init__(self, store: WorkoutStore, clock: ZonedClock, default_goal_oz: float = 120.0):
        self.store = store
        self.clock = clock
        self.default_goal_oz = default_goal_oz

    def _status(self, total: float, goal) -> HydrationStatus:
        goal = goal if goal is not None else self.default_goal_oz
        return HydrationStatus(total=total, goal=goal, remaining=max(goal - total, 0))

    def add(self, amount_oz: float) -> HydrationStatus:
        day = self.store.add_hydration(amount_oz, self.clock.today(), self.default_goal_oz)
        status = self._status(day.total_oz, day.goal_oz)
        logger.info(
            f"Hydration +{amount_oz}oz: total {status.total}oz, goal {status.goal}oz, "
            f"remaining {status.remaining}oz"
        )
        return status

    def current(self) -> HydrationStatus:
        day = self.store.get_or_create_hydration_day(self.clock.today(), self.default_goal_oz)
        return self._status(day.total_oz, day.goal_oz)

    def reminder_text(self, status: HydrationStatus) -> str:
        if status.remaining <= 0:
            return f"💧 Goal reached: {status.total:g} oz today. Keep sipping with meals."
        return (
            f"💧 Hydration check: {status.total:g} of {status.goal:g} oz so far today. "
            f"{status.remaining:g} oz to go."
        )
