"""
Message Router Tests
====================

Rule ordering, handler replies and the error boundary, against a mocked store.
"""
from datetime import date
from unittest.mock import Mock

import pytest

from config import ConfigurationError
from fitness_agent.briefing_generator import rest_day_message
from fitness_agent.coaching_agent import CoachingAgent, DISABLED_REPLY, ERROR_REPLY
from fitness_agent.llm_client import MockLLMClient
from fitness_agent.message_router import (
    APOLOGY_TEXT, CREATE_CHOICE_TEXT, HELP_TEXT, OUT_OF_RANGE_TEXT, MessageRouter,
)
from fitness_agent.repository import TemplateNotFoundError
from fitness_agent.schemas import (
    Exercise, Workout, WorkoutFrequency, WorkoutOverview,
)


def make_store(template_names=(), today_workouts=(), exercises_by_id=None):
    store = Mock()
    store.list_distinct_template_names.return_value = list(template_names)
    store.list_workouts.return_value = list(today_workouts)
    store.list_upcoming_workouts.return_value = []
    store.list_templates.return_value = []
    store.find_recent_workouts_by_name.return_value = []
    exercises_by_id = exercises_by_id or {}
    store.list_exercises.side_effect = lambda workout_id: exercises_by_id.get(workout_id, [])
    return store


@pytest.fixture
def llm():
    return MockLLMClient(reply="Stay steady and move with intention.")


def make_router(store, clock, llm=None):
    return MessageRouter(store, CoachingAgent(llm), clock, athlete_name="Tyler")


class TestRuleOrder:

    @pytest.mark.parametrize("text,expected", [
        ("", "help"),
        ("   ", "help"),
        ("HEY", "greeting"),
        ("brief today", "brief"),
        ("What's left this week?", "rest_of_week"),
        ("Can you help me plan next week", "plan_next_week"),
        ("show me my training history", "training_history"),
        ("Where can I improve?", "improve"),
        ("create a new workout today", "create_new_workout"),
        ("create today's workout page", "template_menu"),
        ("template", "template_menu"),
        ("what's my top workout", "top_workout"),
        ("3", "template_by_number"),
        ("custom", "custom_workout"),
        ("suggested weights for legs", "suggested_weights"),
        ("note slept badly", "note"),
        ("How should I warm up for sprints?", "coaching"),
    ])
    def test_classify(self, clock, text, expected):
        router = make_router(make_store(), clock)
        assert router.classify(text) == expected

    def test_only_ascii_digits_select_a_template(self, clock):
        router = make_router(make_store(["A", "B", "C"]), clock)
        assert router.classify("\u0663") == "coaching"
        assert router.classify("\uff12") == "coaching"

    def test_template_name_matches_case_insensitively(self, clock):
        router = make_router(make_store(["Legs & Glutes"]), clock)
        assert router.classify("LEGS & GLUTES") == "template_by_name"

    def test_template_names_loaded_once_per_message(self, clock):
        store = make_store(["Legs & Glutes"])
        router = make_router(store, clock)

        router.handle_text_message("anything at all")

        store.list_distinct_template_names.assert_called_once_with(20)


class TestStaticReplies:

    def test_blank_message_gets_help_without_touching_store(self, clock):
        store = make_store()
        router = make_router(store, clock)

        assert router.handle_text_message("  \n ") == HELP_TEXT
        assert router.handle_text_message(None) == HELP_TEXT
        store.list_workouts.assert_not_called()

    def test_greeting(self, clock):
        reply = make_router(make_store(), clock).handle_text_message(" Hello ")
        assert reply.startswith("🌅 Morning Tyler. How are you feeling physically and mentally today?")

    def test_create_new_workout_offers_choice(self, clock):
        store = make_store(["Legs & Glutes"])
        reply = make_router(store, clock).handle_text_message("create a new workout today")

        assert reply == CREATE_CHOICE_TEXT
        store.create_session_from_template.assert_not_called()


class TestSchedule:

    def test_brief_on_rest_day(self, clock, today):
        store = make_store()
        assert make_router(store, clock).handle_text_message("BRIEF") == rest_day_message("Tyler")
        store.list_workouts.assert_called_once_with(today)

    def test_rest_of_week_runs_through_sunday(self, clock, today):
        store = make_store()
        store.list_upcoming_workouts.return_value = [
            Workout(id=1, name="Upper Body", workout_date=date(2026, 10, 21), categories=["Strength"]),
            Workout(id=2, name="Long Walk", workout_date=date(2026, 10, 25)),
        ]

        reply = make_router(store, clock).handle_text_message("plans for the rest of the week?")

        store.list_upcoming_workouts.assert_called_once_with(today, date(2026, 10, 25))
        assert reply.split("\n") == [
            "Here’s what remains for this week:",
            "10-21 — Upper Body — Strength",
            "10-25 — Long Walk",
        ]

    def test_rest_of_week_empty(self, clock):
        reply = make_router(make_store(), clock).handle_text_message("rest of the week")
        assert reply.startswith("From today through Sunday, there are no workouts scheduled.")


class TestTemplates:

    def test_menu_lists_numbered_names(self, clock):
        store = make_store(["Legs & Glutes", "Sprint Intervals"])
        reply = make_router(store, clock).handle_text_message("from template")

        assert "1. Legs & Glutes\n2. Sprint Intervals" in reply
        assert reply.startswith("Here are the workout templates I see:")

    def test_menu_without_templates(self, clock):
        reply = make_router(make_store(), clock).handle_text_message("template")
        assert reply.startswith("I do not see any workout templates yet.")

    def test_number_selects_from_menu(self, clock, today):
        store = make_store(["A", "B", "C"])
        reply = make_router(store, clock).handle_text_message("2")

        store.create_session_from_template.assert_called_once_with("B", today)
        assert "**B**" in reply

    def test_very_long_number_is_out_of_range(self, clock):
        store = make_store(["A", "B", "C"])
        reply = make_router(store, clock).handle_text_message("9" * 5000)

        assert reply == OUT_OF_RANGE_TEXT
        store.create_session_from_template.assert_not_called()

    def test_leading_zeros_are_ignored(self, clock, today):
        store = make_store(["A", "B", "C"])
        make_router(store, clock).handle_text_message("0002")

        store.create_session_from_template.assert_called_once_with("B", today)

    @pytest.mark.parametrize("text", ["0", "5"])
    def test_number_out_of_range(self, clock, text):
        store = make_store(["A", "B", "C"])
        reply = make_router(store, clock).handle_text_message(text)

        assert reply == OUT_OF_RANGE_TEXT
        store.create_session_from_template.assert_not_called()

    def test_exact_name_uses_stored_casing(self, clock, today):
        store = make_store(["Legs & Glutes"])
        reply = make_router(store, clock).handle_text_message("legs & glutes")

        store.create_session_from_template.assert_called_once_with("Legs & Glutes", today)
        assert reply.startswith("I’ve created a new workout page for today based on **Legs & Glutes**.")

    def test_template_removed_between_menu_and_reply(self, clock):
        store = make_store(["A"])
        store.create_session_from_template.side_effect = TemplateNotFoundError("gone")

        reply = make_router(store, clock).handle_text_message("1")

        assert reply.startswith("I couldn't find that template anymore.")

    def test_top_workout(self, clock, today):
        store = make_store()
        store.workout_frequency.return_value = WorkoutFrequency(name="Legs & Glutes", count=3)

        reply = make_router(store, clock).handle_text_message("favorite workout?")

        store.workout_frequency.assert_called_once_with(30, today)
        assert "**Legs & Glutes**, completed 3 times." in reply

    def test_top_workout_single_and_empty(self, clock):
        store = make_store()
        store.workout_frequency.return_value = WorkoutFrequency(name="Pilates", count=1)
        assert "completed 1 time." in make_router(store, clock).handle_text_message("top workout")

        store.workout_frequency.return_value = WorkoutFrequency()
        reply = make_router(store, clock).handle_text_message("top workout")
        assert reply.startswith("I don't see any completed workouts in the last 30 days.")


class TestNotes:

    def test_note_goes_to_checkin_and_last_session(self, clock, today):
        sessions = [
            Workout(id=1, name="Sprint Intervals", workout_date=today),
            Workout(id=2, name="Legs & Glutes", workout_date=today),
        ]
        store = make_store(today_workouts=sessions)

        reply = make_router(store, clock).handle_text_message("NOTE Felt great ")

        store.log_daily_checkin.assert_called_once_with("Felt great", today)
        store.append_note.assert_called_once_with(2, "Felt great")
        assert reply == "📝 Got it. I added this note to today’s “Legs & Glutes” session."

    def test_note_without_session_is_checkin_only(self, clock, today):
        store = make_store()

        reply = make_router(store, clock).handle_text_message("note hips tight")

        store.log_daily_checkin.assert_called_once_with("hips tight", today)
        store.append_note.assert_not_called()
        assert "saved this as today’s check-in" in reply


class TestSuggestedWeights:

    def test_writes_suggestions_and_reports_them(self, clock, today):
        session = Workout(id=7, name="Legs & Glutes", workout_date=today)
        store = make_store(
            template_names=["Legs & Glutes", "Upper Body"],
            today_workouts=[session],
            exercises_by_id={7: [
                Exercise(name="Hip Thrust", default_weight=135),
                Exercise(name="Goblet Squat"),
            ]},
        )

        reply = make_router(store, clock).handle_text_message("Suggested weights for Legs & Glutes")

        store.list_distinct_template_names.assert_called_with(50)
        store.update_exercise_weights.assert_called_once()
        workout_id, suggestions = store.update_exercise_weights.call_args[0]
        assert workout_id == 7
        assert [s.suggested_weight for s in suggestions] == [145, None]
        assert "• Hip Thrust — last: 135 lb → suggest: 145 lb" in reply
        assert "• Goblet Squat — start conservatively and focus on clean form." in reply

    def test_asks_which_workout(self, clock):
        store = make_store(["Legs & Glutes"])
        reply = make_router(store, clock).handle_text_message("suggested weights please")

        assert reply.startswith("Tell me which workout you want suggestions for.")
        store.update_exercise_weights.assert_not_called()

    def test_no_session_today(self, clock):
        store = make_store(["Upper Body"])
        reply = make_router(store, clock).handle_text_message("predict weights upper body")

        assert reply.startswith("I don’t see a workout for today named **Upper Body**.")
        store.update_exercise_weights.assert_not_called()


class TestCoaching:

    def test_fallback_passes_trimmed_text(self, clock, llm):
        reply = make_router(make_store(), clock, llm).handle_text_message("  How do I warm up?  ")

        assert reply == "Stay steady and move with intention."
        assert llm.last_prompt == "How do I warm up?"

    def test_unconfigured_coach(self, clock):
        reply = make_router(make_store(), clock).handle_text_message("Should I run today?")
        assert reply == DISABLED_REPLY

    def test_llm_failure_becomes_static_reply(self, clock):
        failing = MockLLMClient(error=RuntimeError("quota"))
        reply = make_router(make_store(), clock, failing).handle_text_message("custom workout please")
        assert reply == ERROR_REPLY

    def test_history_summary_in_prompt(self, clock, llm, today):
        store = make_store()
        store.compute_overview.return_value = WorkoutOverview(
            total_sessions=3,
            distinct_workouts=2,
            by_category={"Pilates": 1, "Strength": 2},
            since_date="2026-08-20",
            until_date="2026-10-19",
        )

        make_router(store, clock, llm).handle_text_message("how my training looks lately")

        store.compute_overview.assert_called_once_with(60, today)
        assert "you logged 3 workout sessions across 2 different workouts." in llm.last_prompt
        assert "- Strength: 2 sessions\n- Pilates: 1 session" in llm.last_prompt

    def test_no_history_skips_llm(self, clock, llm):
        store = make_store()
        store.compute_overview.return_value = WorkoutOverview()

        reply = make_router(store, clock, llm).handle_text_message("what am i neglecting")

        assert reply.startswith("I don't see any completed workouts yet.")
        assert llm.prompts == []

    def test_plan_next_week_lists_templates(self, clock, llm):
        store = make_store()
        store.list_templates.return_value = [Workout(id=1, name="Legs & Glutes", categories=["Strength"])]

        make_router(store, clock, llm).handle_text_message("plan next week")

        assert "• Legs & Glutes — Strength" in llm.last_prompt


class TestErrorBoundary:

    def test_store_failure_becomes_apology(self, clock):
        store = make_store()
        store.list_workouts.side_effect = RuntimeError("database is locked")

        assert make_router(store, clock).handle_text_message("brief") == APOLOGY_TEXT

    def test_configuration_error_is_explained(self, clock):
        store = make_store()
        store.list_workouts.side_effect = ConfigurationError("DATABASE_URL is not set")

        reply = make_router(store, clock).handle_text_message("brief")

        assert reply == "I can't do that yet because something isn't configured: DATABASE_URL is not set"

    def test_template_lookup_failure_becomes_apology(self, clock):
        store = make_store()
        store.list_distinct_template_names.side_effect = RuntimeError("boom")

        assert make_router(store, clock).handle_text_message("template") == APOLOGY_TEXT
