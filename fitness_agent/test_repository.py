"""
Workout Repository Tests
========================

Runs the SQLAlchemy store against an in-memory SQLite database.
"""
from datetime import date

import pytest

import models
from fitness_agent.conftest import add_workout
from fitness_agent.repository import (
    TemplateNotFoundError, WorkoutRepository, format_weight, parse_sets, parse_weight,
)
from fitness_agent.schemas import WeightSuggestion


class TestParsing:

    @pytest.mark.parametrize("text,expected", [
        ("135", 135.0),
        ("40 lb", 40.0),
        ("22.5", 22.5),
        ("BW", None),
        ("", None),
        (None, None),
        ("1.2.3", 1.2),
        (".5", 0.5),
        ("5.", 5.0),
        (".", None),
    ])
    def test_parse_weight(self, text, expected):
        assert parse_weight(text) == expected

    def test_parse_sets(self):
        assert parse_sets(3) == 3
        assert parse_sets("4 sets") == 4
        assert parse_sets("AMRAP") is None
        assert parse_sets(None) is None

    def test_format_weight(self):
        assert format_weight(45.0) == "45"
        assert format_weight(41.5) == "41.5"


class TestTemplates:

    def test_create_session_round_trip(self, db_session, today):
        add_workout(
            db_session, "Legs & Glutes", categories=["Strength", "Glutes"],
            exercises=[("Hip Thrust", 4, "8-10", "135"), ("Goblet Squat", 3, "12", "BW")],
            sauna=True,
        )
        repo = WorkoutRepository(db_session)

        created = repo.create_session_from_template("legs & glutes", today)
        sessions = repo.list_workouts(today)

        assert [w.id for w in sessions] == [created.id]
        assert sessions[0].name == "Legs & Glutes"
        assert sessions[0].categories == ["Strength", "Glutes"]
        assert sessions[0].sauna is False
        exercises = repo.list_exercises(created.id)
        assert [(e.name, e.sets, e.reps, e.default_weight) for e in exercises] == [
            ("Hip Thrust", 4, "8-10", 135.0),
            ("Goblet Squat", 3, "12", None),
        ]

    def test_unknown_template(self, db_session, today):
        with pytest.raises(TemplateNotFoundError):
            WorkoutRepository(db_session).create_session_from_template("Nope", today)

    def test_dated_session_is_not_a_template(self, db_session, today):
        add_workout(db_session, "Legs & Glutes", workout_date=today)
        with pytest.raises(TemplateNotFoundError):
            WorkoutRepository(db_session).create_session_from_template("Legs & Glutes", today)

    def test_distinct_names_sorted_deduplicated_and_stable(self, db_session, today):
        for name in ["Upper Body", "legs", "Upper Body", "Abs"]:
            add_workout(db_session, name)
        add_workout(db_session, "Dated Only", workout_date=today)
        repo = WorkoutRepository(db_session)

        first = repo.list_distinct_template_names()
        second = repo.list_distinct_template_names()

        assert first == ["Abs", "legs", "Upper Body"]
        assert first == second

    def test_distinct_names_capped_in_creation_order(self, db_session):
        for name in ["Zeta", "Alpha", "Mid"]:
            add_workout(db_session, name)

        assert WorkoutRepository(db_session).list_distinct_template_names(limit=2) == ["Alpha", "Zeta"]

    def test_list_templates_excludes_sessions(self, db_session, today):
        add_workout(db_session, "Template A")
        add_workout(db_session, "Session", workout_date=today)

        names = [w.name for w in WorkoutRepository(db_session).list_templates()]
        assert names == ["Template A"]


class TestSessions:

    def test_upcoming_range_is_inclusive(self, db_session):
        add_workout(db_session, "Before", workout_date=date(2026, 10, 18))
        add_workout(db_session, "Monday", workout_date=date(2026, 10, 19))
        add_workout(db_session, "Sunday", workout_date=date(2026, 10, 25))
        add_workout(db_session, "After", workout_date=date(2026, 10, 26))

        upcoming = WorkoutRepository(db_session).list_upcoming_workouts(date(2026, 10, 19), date(2026, 10, 25))

        assert [w.name for w in upcoming] == ["Monday", "Sunday"]

    def test_recent_by_name_is_strictly_before_and_newest_first(self, db_session, today):
        add_workout(db_session, "Upper", workout_date=date(2026, 10, 5))
        add_workout(db_session, "upper", workout_date=date(2026, 10, 12))
        add_workout(db_session, "Upper", workout_date=today)
        add_workout(db_session, "Upper")  # template
        add_workout(db_session, "Lower", workout_date=date(2026, 10, 13))

        recent = WorkoutRepository(db_session).find_recent_workouts_by_name("Upper", 5, before=today)

        assert [w.workout_date for w in recent] == [date(2026, 10, 12), date(2026, 10, 5)]

    def test_update_weights_writes_displayed_cell(self, db_session, today):
        workout = add_workout(
            db_session, "Upper", workout_date=today,
            exercises=[("Row", 3, "10", "30"), ("Press", 3, "8", "60"), ("Plank", 3, "45s", "")],
        )
        repo = WorkoutRepository(db_session)

        updated = repo.update_exercise_weights(workout.id, [
            WeightSuggestion(exercise="row", last_weight=39, suggested_weight=41.5),
            WeightSuggestion(exercise="Press", last_weight=60, suggested_weight=65),
            WeightSuggestion(exercise="Plank"),
        ])

        assert updated == 2
        cells = {e.name: e.weight_text for e in db_session.query(models.WorkoutExercise).all()}
        assert cells == {"Row": "41.5", "Press": "65", "Plank": ""}

    def test_notes_and_checkins(self, db_session, today):
        workout = add_workout(db_session, "Upper", workout_date=today)
        repo = WorkoutRepository(db_session)

        repo.log_daily_checkin("Slept well", today)
        repo.append_note(workout.id, "Slept well")

        checkin = db_session.query(models.DailyCheckin).one()
        assert (checkin.checkin_date, checkin.note) == (today, "Slept well")
        assert [n.text for n in db_session.get(models.Workout, workout.id).notes] == ["Slept well"]


class TestStatistics:

    def test_overview_counts_uncategorized(self, db_session, today):
        add_workout(db_session, "Legs", workout_date=date(2026, 10, 1), categories=["Strength", "Glutes"])
        add_workout(db_session, "Legs", workout_date=date(2026, 10, 8), categories=["Strength"])
        add_workout(db_session, "Walk", workout_date=date(2026, 10, 9))
        add_workout(db_session, "Ancient", workout_date=date(2026, 1, 1), categories=["Strength"])
        add_workout(db_session, "Template", categories=["Strength"])

        overview = WorkoutRepository(db_session).compute_overview(60, today)

        assert overview.total_sessions == 3
        assert overview.distinct_workouts == 2
        assert overview.by_category == {"Strength": 2, "Glutes": 1, "Uncategorized": 1}
        assert (overview.since_date, overview.until_date) == ("2026-08-20", "2026-10-19")

    def test_frequency_tie_goes_to_first_in_date_order(self, db_session, today):
        # Inserted out of date order so id order and date order disagree
        add_workout(db_session, "A", workout_date=date(2026, 10, 12))
        add_workout(db_session, "B", workout_date=date(2026, 10, 10))
        add_workout(db_session, "A", workout_date=date(2026, 10, 13))
        add_workout(db_session, "B", workout_date=date(2026, 10, 11))

        top = WorkoutRepository(db_session).workout_frequency(30, today)

        assert (top.name, top.count) == ("B", 2)

    def test_frequency_empty_window(self, db_session, today):
        add_workout(db_session, "Old", workout_date=date(2026, 1, 1))

        top = WorkoutRepository(db_session).workout_frequency(30, today)

        assert (top.name, top.count) == ("", 0)


class TestHydration:

    def test_get_or_create_is_idempotent(self, db_session, today):
        repo = WorkoutRepository(db_session)

        first = repo.get_or_create_hydration_day(today, 120)
        second = repo.get_or_create_hydration_day(today, 90)

        assert first.id == second.id
        assert second.goal_oz == 120
        assert db_session.query(models.HydrationDay).count() == 1

    def test_add_accumulates(self, db_session, today):
        repo = WorkoutRepository(db_session)

        repo.add_hydration(16, today, 120)
        day = repo.add_hydration(8.5, today, 120)

        assert day.total_oz == 24.5
        assert day.goal_oz == 120
