"""
Daily briefing: today's scheduled workouts, or a rest-day message.
"""
import logging
from typing import List

from fitness_agent.repository import WorkoutStore
from fitness_agent.schemas import Exercise, Workout
from fitness_agent.time_utils import ZonedClock

logger = logging.getLogger(__name__)

MAX_EXERCISES_TO_SHOW = 4


def rest_day_message(athlete_name: str) -> str:
    return (
        f"🌅 Morning {athlete_name}! No workout is scheduled today.\n\n"
        "🧘 Treat this as a recovery day—light movement, hydration, and good sleep "
        "will set you up for the next session. 😴"
    )


def _therapy_suffix(workout: Workout) -> str:
    flags = workout.therapy_flags()
    return f"\nTherapies: {', '.join(flags)}" if flags else ""


def _is_pilates(workout: Workout) -> bool:
    first_category = workout.categories[0] if workout.categories else ""
    return "pilates" in workout.name.lower() or "pilates" in first_category.lower()


def format_workout_block(workout: Workout, exercises: List[Exercise], header_prefix: str = "") -> List[str]:
    """Header plus bullet lines for one workout (no trailing blank line)."""
    title = f"{header_prefix}{workout.name}{workout.category_label()}{_therapy_suffix(workout)}"

    if exercises:
        lines = [f"🏋️‍♀️ {title}"]
        lines.extend(ex.to_briefing_line() for ex in exercises[:MAX_EXERCISES_TO_SHOW])
        if len(exercises) > MAX_EXERCISES_TO_SHOW:
            lines.append(f"…and {len(exercises) - MAX_EXERCISES_TO_SHOW} more movements.")
        return lines

    if _is_pilates(workout):
        return [
            f"🧘 {title}",
            "• Low‑impact full‑body session. Focus on breathing, control, and core engagement. "
            "Treat this as active recovery. 💆‍♀️",
        ]

    return [
        f"🏃‍♀️ {title}",
        "• Movement‑focused session today. Aim for smooth, controlled reps—about a 7/10 effort. 🔥",
    ]


class BriefingGenerator:

    def __init__(self, store: WorkoutStore, clock: ZonedClock, athlete_name: str = "Tyler"):
        self.store = store
        self.clock = clock
        self.athlete_name = athlete_name

    def generate(self) -> str:
        today = self.clock.today()
        workouts = self.store.list_workouts(today)

        if not workouts:
            return rest_day_message(self.athlete_name)

        # Read-only lookups; sequential because the store's session is not thread-safe
        enriched = [(w, self.store.list_exercises(w.id)) for w in workouts]

        lines = [f"🌅 Morning {self.athlete_name}! Here's today’s training:", ""]
        numbered = len(workouts) > 1
        for index, (workout, exercises) in enumerate(enriched, start=1):
            prefix = f"{index}. " if numbered else ""
            lines.extend(format_workout_block(workout, exercises, prefix))
            lines.append("")

        logger.info(f"Generated briefing for {today.isoformat()} with {len(workouts)} workouts")
        return "\n".join(lines).strip()
