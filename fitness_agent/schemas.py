"""
Pydantic Schemas for the Fitness Agent
Domain views over stored workouts plus request/response bodies
"""
from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import date


# ============ Domain Views ============

class Exercise(BaseModel):
    """One parsed row of a workout's exercise table."""
    name: str = Field(..., min_length=1)
    sets: Optional[int] = None
    reps: Optional[str] = None  # free text, e.g. "8-12"
    default_weight: Optional[float] = None  # parsed from the displayed weight cell

    def to_briefing_line(self) -> str:
        """'• name — sets x reps', dropping the detail part when empty."""
        sets_part = f"{self.sets} x " if self.sets else ""
        details = f"{sets_part}{self.reps or ''}".strip()
        suffix = f" — {details}" if details else ""
        return f"• {self.name}{suffix}"


class Workout(BaseModel):
    """A template (no date) or a dated session."""
    id: int
    name: str
    workout_date: Optional[date] = None
    categories: List[str] = Field(default_factory=list)
    red_light_therapy: bool = False
    acupuncture: bool = False
    sauna: bool = False

    def category_label(self) -> str:
        """' — Strength, Glutes' or empty."""
        if not self.categories:
            return ""
        return f" — {', '.join(self.categories)}"

    def therapy_flags(self) -> List[str]:
        flags = []
        if self.red_light_therapy:
            flags.append("Red Light")
        if self.acupuncture:
            flags.append("Acupuncture")
        if self.sauna:
            flags.append("Sauna")
        return flags


class HydrationDay(BaseModel):
    id: int
    day: date
    total_oz: float = 0.0
    goal_oz: Optional[float] = None


class WeightSuggestion(BaseModel):
    exercise: str
    last_weight: Optional[float] = None
    suggested_weight: Optional[float] = None


class WeightPrediction(BaseModel):
    """Predictor output. workout is None when today's session does not exist yet."""
    workout: Optional[Workout] = None
    suggestions: List[WeightSuggestion] = Field(default_factory=list)


class WorkoutOverview(BaseModel):
    total_sessions: int = 0
    distinct_workouts: int = 0
    by_category: Dict[str, int] = Field(default_factory=dict)
    since_date: str = ""
    until_date: str = ""

    def sorted_categories(self) -> List[tuple]:
        """Categories by count, most frequent first (stable for ties)."""
        return sorted(self.by_category.items(), key=lambda item: item[1], reverse=True)


class WorkoutFrequency(BaseModel):
    name: str = ""
    count: int = 0


class HydrationStatus(BaseModel):
    total: float
    goal: float
    remaining: float


# ============ Request/Response Schemas ============

class InboundTextRequest(BaseModel):
    """iMessage relay body. Either field may carry the text."""
    text: Optional[str] = None
    message: Optional[str] = None


class InboundTextResponse(BaseModel):
    reply: str


class HydrationRequest(BaseModel):
    amount_oz: float = Field(..., gt=0, le=200)


class HydrationResponse(BaseModel):
    total_oz: float
    goal_oz: float
    remaining_oz: float
