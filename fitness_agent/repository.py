"""
Workout Repository
==================

Data access for workouts, templates, exercises, notes, check-ins and
hydration. The rest of the agent talks to the `WorkoutStore` protocol;
`WorkoutRepository` is the SQLAlchemy implementation.

Every date-bounded method takes the zoned day explicitly.
"""

import logging
import re
from datetime import date, timedelta
from typing import Dict, List, Optional, Protocol, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session

import models
from fitness_agent.schemas import (
    Exercise, HydrationDay, WeightSuggestion, Workout,
    WorkoutFrequency, WorkoutOverview,
)

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE_LIMIT = 20
UNCATEGORIZED = "Uncategorized"

_LEADING_NUMBER = re.compile(r"[0-9]+(?:\.[0-9]*)?|\.[0-9]+")
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class TemplateNotFoundError(LookupError):
    """No template with the requested name exists."""


# ==============================================================================
# Parsing helpers for the displayed exercise table
# ==============================================================================

def parse_weight(weight_text: Optional[str]) -> Optional[float]:
    """
    Reads the leading number of a weight cell: "135" -> 135.0,
    "40 lb" -> 40.0, "1.2.3" -> 1.2, "BW" -> None.
    """
    if not weight_text:
        return None
    match = _LEADING_NUMBER.match(weight_text.strip())
    return float(match.group(0)) if match else None


def parse_sets(sets_value) -> Optional[int]:
    if sets_value is None:
        return None
    if isinstance(sets_value, int):
        return sets_value
    match = _LEADING_INT.match(str(sets_value))
    return int(match.group(1)) if match else None


def format_weight(weight: float) -> str:
    """41.5 -> '41.5', 45.0 -> '45'."""
    if float(weight).is_integer():
        return str(int(weight))
    return str(weight)


def _to_workout(row: models.Workout) -> Workout:
    return Workout(
        id=row.id,
        name=row.name or "Workout",
        workout_date=row.workout_date,
        categories=[c for c in (row.categories or []) if c],
        red_light_therapy=bool(row.red_light_therapy),
        acupuncture=bool(row.acupuncture),
        sauna=bool(row.sauna),
    )


def _to_exercise(row: models.WorkoutExercise) -> Optional[Exercise]:
    name = (row.name or "").strip()
    if not name:
        return None
    return Exercise(
        name=name,
        sets=parse_sets(row.sets),
        reps=row.reps or None,
        default_weight=parse_weight(row.weight_text),
    )


# ==============================================================================
# Store interface
# ==============================================================================

class WorkoutStore(Protocol):
    """Operations the router, predictor and briefing need from storage."""

    def list_workouts(self, day: date) -> List[Workout]: ...

    def list_upcoming_workouts(self, from_day: date, to_day: date) -> List[Workout]: ...

    def list_templates(self) -> List[Workout]: ...

    def list_distinct_template_names(self, limit: int = DEFAULT_TEMPLATE_LIMIT) -> List[str]: ...

    def find_recent_workouts_by_name(self, name: str, limit: int, before: date) -> List[Workout]: ...

    def create_session_from_template(self, name: str, day: date) -> Workout: ...

    def list_exercises(self, workout_id: int) -> List[Exercise]: ...

    def update_exercise_weights(self, workout_id: int, suggestions: Sequence[WeightSuggestion]) -> int: ...

    def append_note(self, workout_id: int, text: str) -> None: ...

    def log_daily_checkin(self, text: str, day: date) -> None: ...

    def compute_overview(self, days_back: int, today: date) -> WorkoutOverview: ...

    def workout_frequency(self, days_back: int, today: date) -> WorkoutFrequency: ...

    def get_or_create_hydration_day(self, day: date, default_goal: float) -> HydrationDay: ...

    def add_hydration(self, amount_oz: float, day: date, default_goal: float) -> HydrationDay: ...


class WorkoutRepository:
    """SQLAlchemy-backed WorkoutStore."""

    def __init__(self, db: Session):
        self.db = db

    # ==========================================================================
    # WORKOUT QUERIES
    # ==========================================================================

    def list_workouts(self, day: date) -> List[Workout]:
        """Sessions scheduled on `day`, in scheduled order."""
        rows = self.db.query(models.Workout).filter(
            models.Workout.workout_date == day
        ).order_by(models.Workout.workout_date.asc(), models.Workout.id.asc()).all()

        logger.info(f"Retrieved {len(rows)} workouts for {day.isoformat()}")
        return [_to_workout(r) for r in rows]

    def list_upcoming_workouts(self, from_day: date, to_day: date) -> List[Workout]:
        rows = self.db.query(models.Workout).filter(
            models.Workout.workout_date >= from_day,
            models.Workout.workout_date <= to_day,
        ).order_by(models.Workout.workout_date.asc(), models.Workout.id.asc()).all()
        return [_to_workout(r) for r in rows]

    def list_templates(self) -> List[Workout]:
        rows = self._template_query().limit(100).all()
        return [_to_workout(r) for r in rows]

    def list_distinct_template_names(self, limit: int = DEFAULT_TEMPLATE_LIMIT) -> List[str]:
        """
        Distinct template names, capped at `limit` while scanning in
        creation order, then sorted alphabetically for display.
        """
        seen: Dict[str, None] = {}
        for row in self._template_query().limit(100).all():
            if row.name:
                seen.setdefault(row.name, None)
                if len(seen) >= limit:
                    break
        return sorted(seen, key=lambda n: (n.casefold(), n))

    def find_recent_workouts_by_name(self, name: str, limit: int, before: date) -> List[Workout]:
        """Sessions with this exact (case-insensitive) name, strictly before `before`, newest first."""
        rows = self.db.query(models.Workout).filter(
            func.lower(models.Workout.name) == name.lower(),
            models.Workout.workout_date.isnot(None),
            models.Workout.workout_date < before,
        ).order_by(models.Workout.workout_date.desc(), models.Workout.id.desc()).limit(limit).all()
        return [_to_workout(r) for r in rows]

    def _template_query(self):
        return self.db.query(models.Workout).filter(
            models.Workout.workout_date.is_(None)
        ).order_by(models.Workout.id.asc())

    # ==========================================================================
    # SESSION CREATION
    # ==========================================================================

    def create_session_from_template(self, name: str, day: date) -> Workout:
        """
        Copies a template's name, categories and exercise table into a new
        session dated `day`. Raises TemplateNotFoundError for unknown names.
        """
        template = self._template_query().filter(
            func.lower(models.Workout.name) == name.lower()
        ).first()
        if template is None:
            raise TemplateNotFoundError(f'No workout template found with name "{name}"')

        session = models.Workout(
            name=template.name,
            workout_date=day,
            categories=list(template.categories or []),
        )
        for ex in template.exercises:
            session.exercises.append(models.WorkoutExercise(
                position=ex.position,
                name=ex.name,
                sets=ex.sets,
                reps=ex.reps,
                weight_text=ex.weight_text,
            ))

        self.db.add(session)
        self.db.commit()
        self.db.refresh(session)

        logger.info(
            f"Created workout session {session.id} from template {template.id} "
            f"({template.name}) for {day.isoformat()}"
        )
        return _to_workout(session)

    # ==========================================================================
    # EXERCISES
    # ==========================================================================

    def list_exercises(self, workout_id: int) -> List[Exercise]:
        rows = self.db.query(models.WorkoutExercise).filter(
            models.WorkoutExercise.workout_id == workout_id
        ).order_by(models.WorkoutExercise.position.asc(), models.WorkoutExercise.id.asc()).all()

        exercises = []
        for row in rows:
            ex = _to_exercise(row)
            if ex:
                exercises.append(ex)
        return exercises

    def update_exercise_weights(self, workout_id: int, suggestions: Sequence[WeightSuggestion]) -> int:
        """
        Writes suggested weights into the displayed weight cell of matching
        exercise rows. Returns the number of rows updated.
        """
        by_name = {
            s.exercise.lower(): s.suggested_weight
            for s in suggestions
            if s.suggested_weight is not None
        }
        if not by_name:
            return 0

        rows = self.db.query(models.WorkoutExercise).filter(
            models.WorkoutExercise.workout_id == workout_id
        ).all()

        updated = 0
        for row in rows:
            weight = by_name.get((row.name or "").strip().lower())
            if weight is None:
                continue
            row.weight_text = format_weight(weight)
            updated += 1

        self.db.commit()
        logger.info(f"Updated {updated} exercise weights on workout {workout_id}")
        return updated

    # ==========================================================================
    # NOTES
    # ==========================================================================

    def append_note(self, workout_id: int, text: str) -> None:
        self.db.add(models.WorkoutNote(workout_id=workout_id, text=text))
        self.db.commit()
        logger.info(f"Appended session note to workout {workout_id}")

    def log_daily_checkin(self, text: str, day: date) -> None:
        self.db.add(models.DailyCheckin(checkin_date=day, note=text))
        self.db.commit()
        logger.info(f"Logged daily check-in for {day.isoformat()}")

    # ==========================================================================
    # STATISTICS
    # ==========================================================================

    def _sessions_between(self, since: date, until: date) -> List[models.Workout]:
        return self.db.query(models.Workout).filter(
            models.Workout.workout_date >= since,
            models.Workout.workout_date <= until,
        ).order_by(models.Workout.workout_date.asc(), models.Workout.id.asc()).all()

    def compute_overview(self, days_back: int, today: date) -> WorkoutOverview:
        """Sessions, distinct names and per-category counts over [today - days_back, today]."""
        since = today - timedelta(days=days_back)
        rows = self._sessions_between(since, today)

        by_category: Dict[str, int] = {}
        names = set()
        for row in rows:
            workout = _to_workout(row)
            if workout.name:
                names.add(workout.name)
            for category in workout.categories or [UNCATEGORIZED]:
                by_category[category] = by_category.get(category, 0) + 1

        return WorkoutOverview(
            total_sessions=len(rows),
            distinct_workouts=len(names),
            by_category=by_category,
            since_date=since.isoformat(),
            until_date=today.isoformat(),
        )

    def workout_frequency(self, days_back: int, today: date) -> WorkoutFrequency:
        """
        Most frequent session name in the window. On a tie the name seen
        first in the (date, id) scan wins.
        """
        since = today - timedelta(days=days_back)
        counts: Dict[str, int] = {}
        for row in self._sessions_between(since, today):
            key = row.name or "Workout"
            counts[key] = counts.get(key, 0) + 1

        if not counts:
            return WorkoutFrequency()

        ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
        name, count = ranked[0]
        return WorkoutFrequency(name=name, count=count)

    # ==========================================================================
    # HYDRATION
    # ==========================================================================

    def get_or_create_hydration_day(self, day: date, default_goal: float) -> HydrationDay:
        row = self.db.query(models.HydrationDay).filter(models.HydrationDay.day == day).first()
        if row is None:
            row = models.HydrationDay(day=day, total_oz=0.0, goal_oz=default_goal)
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
            logger.info(f"Created hydration day {day.isoformat()} with goal {default_goal}oz")

        return HydrationDay(id=row.id, day=row.day, total_oz=row.total_oz or 0.0, goal_oz=row.goal_oz)

    def add_hydration(self, amount_oz: float, day: date, default_goal: float) -> HydrationDay:
        current = self.get_or_create_hydration_day(day, default_goal)
        row = self.db.query(models.HydrationDay).filter(models.HydrationDay.id == current.id).first()
        row.total_oz = (row.total_oz or 0.0) + amount_oz
        self.db.commit()

        logger.info(f"Added {amount_oz}oz hydration for {day.isoformat()} (total {row.total_oz}oz)")
        return HydrationDay(id=row.id, day=row.day, total_oz=row.total_oz, goal_oz=row.goal_oz)
