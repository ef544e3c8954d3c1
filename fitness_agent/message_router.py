"""
Message Router
==============

Turns one inbound text into one reply string. Intent selection is the
ordered first-match rule list in `intent_rules`; this module holds the
handler for each rule and the error boundary around them.

`handle_text_message` never raises.
"""

import logging
from typing import Callable, Dict, List

from config import ConfigurationError
from fitness_agent.briefing_generator import BriefingGenerator
from fitness_agent.coaching_agent import CoachingAgent
from fitness_agent.intent_rules import INTENT_RULES, NOTE_PREFIX, InboundMessage, IntentRule, match_intent
from fitness_agent.repository import DEFAULT_TEMPLATE_LIMIT, TemplateNotFoundError, WorkoutStore
from fitness_agent.time_utils import ZonedClock
from fitness_agent.weight_predictor import WeightPredictor

logger = logging.getLogger(__name__)

OVERVIEW_DAYS = 60
FREQUENCY_DAYS = 30

HELP_TEXT = (
    "📝 Send `note ...` to add a session note, or `brief` to get today’s training overview.\n\n"
    "Examples:\n- `brief`\n- `note Energy was low but form felt strong on RDLs.`"
)
APOLOGY_TEXT = "Something went wrong while processing that message. Try again in a bit."
OUT_OF_RANGE_TEXT = (
    "That number does not match any template in your list. Reply with a number from the "
    "list I gave you or the exact name of the workout."
)
CREATE_CHOICE_TEXT = (
    "I can create today’s workout from one of your existing templates, or build a custom "
    "session for how you feel right now.\n\n"
    "Reply `template` to choose from saved workouts, or `custom` to have me design a fresh session."
)


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


class MessageRouter:
    """
    Dispatches texts to the briefing, predictor, store or coaching agent.
    All collaborators are passed in; nothing is shared between calls.
    """

    def __init__(
        self,
        store: WorkoutStore,
        coach: CoachingAgent,
        clock: ZonedClock,
        athlete_name: str = "Tyler",
        max_templates: int = DEFAULT_TEMPLATE_LIMIT,
        weight_template_limit: int = 50,
        rules: List[IntentRule] = INTENT_RULES,
    ):
        self.store = store
        self.coach = coach
        self.clock = clock
        self.athlete_name = athlete_name
        self.max_templates = max_templates
        self.weight_template_limit = weight_template_limit
        self.rules = rules
        self.briefing = BriefingGenerator(store, clock, athlete_name)
        self.predictor = WeightPredictor(store, clock)

        self._handlers: Dict[str, Callable[[InboundMessage], str]] = {
            "help": self._handle_help,
            "greeting": self._handle_greeting,
            "brief": self._handle_brief,
            "rest_of_week": self._handle_rest_of_week,
            "plan_next_week": self._handle_plan_next_week,
            "training_history": self._handle_training_history,
            "improve": self._handle_improve,
            "create_new_workout": self._handle_create_new_workout,
            "template_menu": self._handle_template_menu,
            "top_workout": self._handle_top_workout,
            "template_by_number": self._handle_template_by_number,
            "template_by_name": self._handle_template_by_name,
            "custom_workout": self._handle_custom_workout,
            "suggested_weights": self._handle_suggested_weights,
            "note": self._handle_note,
            "coaching": self._handle_coaching,
        }

    # ==========================================================================
    # PUBLIC ENTRY POINTS
    # ==========================================================================

    def handle_text_message(self, raw_text: str) -> str:
        """Reply for one inbound text. Always returns a string."""
        rule_name = "unmatched"
        try:
            message = InboundMessage.from_raw(raw_text, self._load_template_names)
            rule = match_intent(message, self.rules)
            rule_name = rule.name
            logger.info(f"Inbound message matched rule '{rule_name}'")
            return self._handlers[rule_name](message)
        except ConfigurationError as e:
            logger.error(f"Configuration error in rule '{rule_name}': {e}")
            return f"I can't do that yet because something isn't configured: {e}"
        except TemplateNotFoundError as e:
            logger.warning(f"Template lookup failed in rule '{rule_name}': {e}")
            return "I couldn't find that template anymore. Reply `template` to see the current list."
        except Exception:
            logger.exception(f"Failed to handle message in rule '{rule_name}'")
            return APOLOGY_TEXT

    def classify(self, raw_text: str) -> str:
        """Name of the rule that would handle this text."""
        message = InboundMessage.from_raw(raw_text, self._load_template_names)
        return match_intent(message, self.rules).name

    def generate_daily_briefing(self) -> str:
        """Scheduled entry point; the caller enforces the timeout."""
        return self.briefing.generate()

    def _load_template_names(self) -> List[str]:
        return self.store.list_distinct_template_names(self.max_templates)

    # ==========================================================================
    # STATIC REPLIES
    # ==========================================================================

    def _handle_help(self, message: InboundMessage) -> str:
        return HELP_TEXT

    def _handle_greeting(self, message: InboundMessage) -> str:
        return (
            f"🌅 Morning {self.athlete_name}. How are you feeling physically and mentally today?\n\n"
            "Reply with `note ...` (for example: `note Energy is 7/10, hips feel tight, slept lightly`) "
            "and I’ll log it into today’s session."
        )

    def _handle_create_new_workout(self, message: InboundMessage) -> str:
        return CREATE_CHOICE_TEXT

    # ==========================================================================
    # SCHEDULE
    # ==========================================================================

    def _handle_brief(self, message: InboundMessage) -> str:
        return self.briefing.generate()

    def _handle_rest_of_week(self, message: InboundMessage) -> str:
        today = self.clock.today()
        upcoming = self.store.list_upcoming_workouts(today, ZonedClock.end_of_week(today))

        if not upcoming:
            return (
                "From today through Sunday, there are no workouts scheduled. If you’d like, I can help "
                "you stand up a simple structure for the rest of this week."
            )

        lines = ["Here’s what remains for this week:"]
        for w in upcoming:
            date_label = w.workout_date.strftime("%m-%d") if w.workout_date else "Today"
            lines.append(f"{date_label} — {w.name}{w.category_label()}")
        return "\n".join(lines)

    # ==========================================================================
    # COACHING WITH CONTEXT
    # ==========================================================================

    def _handle_plan_next_week(self, message: InboundMessage) -> str:
        templates = self.store.list_templates()
        if not templates:
            return (
                "I don’t see any workout templates yet. Once you’ve saved a few (Legs & Glutes, "
                "Upper Body & Abs, Sprint Intervals, etc.), I can help you turn them into a weekly structure."
            )

        context = "\n".join(
            ["Here are the workout templates available:"]
            + [f"• {t.name}{t.category_label()}" for t in templates]
        )
        name = self.athlete_name
        return self.coach.generate_coaching_reply(
            f"{context}\n\n"
            f"{name} is asking you to help plan next week's training (Monday through Sunday).\n\n"
            "Based on these templates and the protocol, propose a simple weekly structure with "
            "2 lower-body/glute-focused days, 2 upper/back days, 1–2 conditioning or interval days, "
            "and at least 1 active recovery / Pilates or walking day.\n\n"
            "Respond with a clear list like:\nMon — [Workout]\nTue — [Workout]\n...\n\n"
            "Include 1–2 short coach notes at the end about how to approach the week, "
            "in the Where the Fire Went tone."
        )

    def _handle_training_history(self, message: InboundMessage) -> str:
        overview = self.store.compute_overview(OVERVIEW_DAYS, self.clock.today())
        if overview.total_sessions == 0:
            return (
                "I don't see any completed workouts yet. Once you start logging, I can read your "
                "history back to you and help you see the patterns."
            )

        summary = "\n".join(
            [
                f"From {overview.since_date} to {overview.until_date}, you logged "
                f"{_plural(overview.total_sessions, 'workout session')} across "
                f"{overview.distinct_workouts} different workouts.",
                "",
                "Breakdown by type:",
            ]
            + [f"- {category}: {_plural(count, 'session')}" for category, count in overview.sorted_categories()]
        )
        return self.coach.generate_coaching_reply(
            f"Here is a summary of {self.athlete_name}'s workout history over the last {OVERVIEW_DAYS} days:\n\n"
            f"{summary}\n\nUser question: \"{message.text}\"\n\n"
            "Answer as the Where the Fire Went Fitness Agent and connect these patterns to discipline, "
            "recovery, and next aligned steps."
        )

    def _handle_improve(self, message: InboundMessage) -> str:
        overview = self.store.compute_overview(OVERVIEW_DAYS, self.clock.today())
        if overview.total_sessions == 0:
            return (
                "I don't see any completed workouts yet. Once you’ve logged a few weeks, I can tell you "
                "exactly which edges want more attention."
            )

        summary = "\n".join(
            [
                f"Total sessions (last {OVERVIEW_DAYS} days): {overview.total_sessions}",
                f"Distinct workouts: {overview.distinct_workouts}",
                "",
                "By type:",
            ]
            + [f"{category}: {_plural(count, 'session')}" for category, count in overview.sorted_categories()]
        )
        return self.coach.generate_coaching_reply(
            f"{self.athlete_name} is asking where there is room to improve in training.\n\n"
            f"Here are the stats over the last {OVERVIEW_DAYS} days:\n\n{summary}\n\n"
            "Highlight which training types are overrepresented versus underrepresented, and give 2–3 "
            "concrete adjustments (sessions to add, shift, or soften) that stay within the protocol and "
            "protect the nervous system.\n\nRespond in the established Where the Fire Went tone."
        )

    def _handle_custom_workout(self, message: InboundMessage) -> str:
        return self.coach.generate_coaching_reply(
            f"{self.athlete_name} has asked for a custom workout session for today. Design a single-session "
            "plan that fits the protocol (as defined in the persona), including a brief warm-up and 4–5 "
            "movements with sets and rep ranges. Do not mention databases or tools—just speak directly "
            "in the established Where the Fire Went tone."
        )

    def _handle_coaching(self, message: InboundMessage) -> str:
        return self.coach.generate_coaching_reply(message.text)

    # ==========================================================================
    # TEMPLATES
    # ==========================================================================

    def _handle_template_menu(self, message: InboundMessage) -> str:
        names = message.template_names
        if not names:
            return (
                "I do not see any workout templates yet. Once you have a few saved workouts, I can use "
                "them as templates to stand up new sessions."
            )

        lines = ["Here are the workout templates I see:"]
        lines.extend(f"{index}. {name}" for index, name in enumerate(names, start=1))
        lines.append("")
        lines.append(
            "Reply with the number or the exact name of the template you want to use for today. "
            "Example: `1` or `Legs & Glutes Pt.2`."
        )
        return "\n".join(lines)

    def _handle_top_workout(self, message: InboundMessage) -> str:
        top = self.store.workout_frequency(FREQUENCY_DAYS, self.clock.today())
        if not top.name or top.count == 0:
            return (
                f"I don't see any completed workouts in the last {FREQUENCY_DAYS} days. Once you start "
                "logging sessions, I can tell you which one you come back to the most."
            )

        return (
            f"Over the last {FREQUENCY_DAYS} days, your most frequent workout has been **{top.name}**, "
            f"completed {_plural(top.count, 'time')}.\n\n"
            "This is the pattern your body knows best—use it as an anchor while we deliberately add in "
            "the supporting sessions (upper body, sprints, recovery days)."
        )

    def _handle_template_by_number(self, message: InboundMessage) -> str:
        names = message.template_names
        digits = message.lower.lstrip("0")
        # More digits than the menu size is always out of range
        if not digits or len(digits) > len(str(len(names))):
            return OUT_OF_RANGE_TEXT

        index = int(digits) - 1
        if index >= len(names):
            return OUT_OF_RANGE_TEXT

        name = names[index]
        self.store.create_session_from_template(name, self.clock.today())
        return (
            f"I’ve created a new workout page for today based on **{name}**. "
            "Return to the ritual and let’s move through it with intention."
        )

    def _handle_template_by_name(self, message: InboundMessage) -> str:
        name = next(n for n in message.template_names if n.lower() == message.lower)
        self.store.create_session_from_template(name, self.clock.today())
        return (
            f"I’ve created a new workout page for today based on **{name}**. "
            "Return to the ritual and move through the session with focus."
        )

    # ==========================================================================
    # WEIGHTS AND NOTES
    # ==========================================================================

    def _handle_suggested_weights(self, message: InboundMessage) -> str:
        candidates = self.store.list_distinct_template_names(self.weight_template_limit)
        # First listed template contained in the text wins
        name = next((n for n in candidates if n.lower() in message.lower), None)
        if name is None:
            return (
                "Tell me which workout you want suggestions for. For example: "
                "`suggested weights for Legs & Glutes Pt.2`."
            )

        prediction = self.predictor.predict(name)
        if prediction.workout is None:
            return (
                f"I don’t see a workout for today named **{name}**. Once today’s page is created from "
                "that template, I can generate suggestions directly into it."
            )
        if not prediction.suggestions:
            return (
                f"I couldn’t infer any weights for **{name}** yet. Log at least one session with weights "
                "and I’ll build suggestions from there."
            )

        self.store.update_exercise_weights(prediction.workout.id, prediction.suggestions)

        lines = [f"Here are suggested weights for today’s **{name}** session (written into the Lbs. column):"]
        for s in prediction.suggestions:
            if s.suggested_weight is None:
                lines.append(f"• {s.exercise} — start conservatively and focus on clean form.")
            elif s.last_weight is not None:
                lines.append(f"• {s.exercise} — last: {s.last_weight:g} lb → suggest: {s.suggested_weight:g} lb")
            else:
                lines.append(f"• {s.exercise} — suggest: {s.suggested_weight:g} lb")
        lines.append("")
        lines.append(
            "Treat these as a progressive starting point—never at the expense of form, joints, "
            "or nervous system calm."
        )
        return "\n".join(lines)

    def _handle_note(self, message: InboundMessage) -> str:
        note = message.text[len(NOTE_PREFIX):].strip()
        if not note:
            return "📝 To add a session note, reply like: `note Felt strong on hip thrusts today.`"

        today = self.clock.today()
        self.store.log_daily_checkin(note, today)

        workouts = self.store.list_workouts(today)
        if not workouts:
            return (
                "📝 Got it. I saved this as today’s check-in. There’s no session scheduled today, "
                "so it isn’t attached to a workout."
            )

        # Multiple sessions today: the last one is the most recent
        target = workouts[-1]
        self.store.append_note(target.id, note)
        return f"📝 Got it. I added this note to today’s “{target.name}” session."
