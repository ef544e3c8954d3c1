"""
Intent Rules
============

Ordered registry of text-message intents. Rules are evaluated top to
bottom against the trimmed, lower-cased message and the first match wins;
several predicates overlap, so the order below is part of the behavior.
"""

import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

GREETINGS = ("hi", "hey", "hello")
BRIEF_COMMANDS = ("brief", "brief today")

REST_OF_WEEK_PHRASES = (
    "plans for the rest of the week",
    "plans for the remainder of the week",
    "what’s left this week",
    "what's left this week",
    "what is left this week",
    "rest of the week",
)

PLAN_NEXT_WEEK_PHRASES = (
    "plan next week",
    "help me plan next week",
    "next week plan",
    "training plan for next week",
)

TRAINING_HISTORY_PHRASES = (
    "workout database",
    "training history",
    "how my training looks",
    "how my training has been",
)

IMPROVE_PHRASES = (
    "where can i improve",
    "what am i neglecting",
    "what am i missing in my training",
    "what do i need more of",
)

TOP_WORKOUT_PHRASES = (
    "top workout",
    "most frequent workout",
    "most logged workout",
    "favorite workout",
)

SUGGESTED_WEIGHTS_PHRASES = (
    "suggested weights",
    "what weights should i use",
    "predict weights",
    "weight suggestions",
)

NOTE_PREFIX = "note "

_NUMERIC = re.compile(r"^[0-9]+$")


@dataclass
class InboundMessage:
    """
    One inbound text. `template_names` is loaded on first use and cached
    for this message only.
    """
    text: str
    lower: str
    load_template_names: Callable[[], List[str]] = field(default=lambda: [], repr=False)
    _template_names: Optional[List[str]] = field(default=None, repr=False)

    @classmethod
    def from_raw(cls, raw_text: Optional[str], load_template_names: Callable[[], List[str]]) -> "InboundMessage":
        text = (raw_text or "").strip()
        return cls(text=text, lower=text.lower(), load_template_names=load_template_names)

    @property
    def template_names(self) -> List[str]:
        if self._template_names is None:
            self._template_names = list(self.load_template_names())
        return self._template_names

    def contains_any(self, phrases: Tuple[str, ...]) -> bool:
        return any(p in self.lower for p in phrases)


@dataclass
class IntentRule:
    """One (predicate, handler) pair. `name` keys the router's handler table."""
    name: str
    description: str
    matches: Callable[[InboundMessage], bool]


def _is_template_menu_request(m: InboundMessage) -> bool:
    return (
        m.lower == "template"
        or "from template" in m.lower
        or (
            m.lower.startswith("create")
            and "today" in m.lower
            and ("workout" in m.lower or "page" in m.lower)
        )
    )


def _matches_template_name(m: InboundMessage) -> bool:
    return any(name.lower() == m.lower for name in m.template_names)


INTENT_RULES: List[IntentRule] = [
    IntentRule("help", "Empty message: usage help", lambda m: not m.text),
    IntentRule("greeting", "Greeting: morning check-in prompt", lambda m: m.lower in GREETINGS),
    IntentRule("brief", "Today's training briefing", lambda m: m.lower in BRIEF_COMMANDS),
    IntentRule("rest_of_week", "Scheduled workouts through Sunday",
               lambda m: m.contains_any(REST_OF_WEEK_PHRASES)),
    IntentRule("plan_next_week", "Weekly plan drafted from templates",
               lambda m: m.contains_any(PLAN_NEXT_WEEK_PHRASES)),
    IntentRule("training_history", "60-day history narrative",
               lambda m: m.contains_any(TRAINING_HISTORY_PHRASES)),
    IntentRule("improve", "Over/under-represented categories",
               lambda m: m.contains_any(IMPROVE_PHRASES)),
    IntentRule("create_new_workout", "Offer template vs custom",
               lambda m: "create" in m.lower and "new" in m.lower and "workout" in m.lower),
    IntentRule("template_menu", "Numbered list of templates", _is_template_menu_request),
    IntentRule("top_workout", "Most frequent workout over 30 days",
               lambda m: m.contains_any(TOP_WORKOUT_PHRASES)),
    IntentRule("template_by_number", "Instantiate template by menu number",
               lambda m: bool(_NUMERIC.match(m.lower))),
    IntentRule("template_by_name", "Instantiate template by exact name", _matches_template_name),
    IntentRule("custom_workout", "Custom session from the coach",
               lambda m: m.lower == "custom" or "custom workout" in m.lower),
    IntentRule("suggested_weights", "Progressive weight suggestions",
               lambda m: m.contains_any(SUGGESTED_WEIGHTS_PHRASES)),
    IntentRule("note", "Log a note to check-ins and today's session",
               lambda m: m.lower.startswith(NOTE_PREFIX)),
    IntentRule("coaching", "Open-ended coaching fallback", lambda m: True),
]


def match_intent(message: InboundMessage, rules: List[IntentRule] = INTENT_RULES) -> IntentRule:
    """First rule whose predicate holds. The last rule always matches."""
    for rule in rules:
        if rule.matches(message):
            return rule
    raise LookupError("No intent rule matched")
