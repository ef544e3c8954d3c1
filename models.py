from sqlalchemy import Column, Integer, String, Float, DateTime, JSON, ForeignKey, Boolean, Date, Text
from sqlalchemy.orm import relationship
from database import Base
from datetime import datetime


class Workout(Base):
    """
    A workout page. No workout_date means it is a template;
    a dated row is a scheduled or completed session.
    """
    __tablename__ = "workouts"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    workout_date = Column(Date, nullable=True, index=True)
    categories = Column(JSON, default=list)  # e.g. ["Strength", "Glutes"]

    # Recovery modalities
    red_light_therapy = Column(Boolean, default=False)
    acupuncture = Column(Boolean, default=False)
    sauna = Column(Boolean, default=False)

    created_at = Column(DateTime, default=datetime.utcnow)

    exercises = relationship(
        "WorkoutExercise",
        back_populates="workout",
        cascade="all, delete-orphan",
        order_by="WorkoutExercise.position",
    )
    notes = relationship("WorkoutNote", back_populates="workout", cascade="all, delete-orphan")


class WorkoutExercise(Base):
    """One row of the exercise table in a workout's body."""
    __tablename__ = "workout_exercises"

    id = Column(Integer, primary_key=True, index=True)
    workout_id = Column(Integer, ForeignKey("workouts.id", ondelete="CASCADE"), index=True)
    position = Column(Integer, default=0)

    name = Column(String, nullable=False)
    sets = Column(Integer, nullable=True)
    reps = Column(String, nullable=True)       # free text, e.g. "8-12"
    weight_text = Column(String, nullable=True)  # displayed "Lbs." cell, e.g. "135" or "40 lb"

    workout = relationship("Workout", back_populates="exercises")


class WorkoutNote(Base):
    __tablename__ = "workout_notes"

    id = Column(Integer, primary_key=True, index=True)
    workout_id = Column(Integer, ForeignKey("workouts.id", ondelete="CASCADE"), index=True)
    text = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    workout = relationship("Workout", back_populates="notes")


class DailyCheckin(Base):
    __tablename__ = "daily_checkins"

    id = Column(Integer, primary_key=True, index=True)
    checkin_date = Column(Date, index=True)
    note = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)


class HydrationDay(Base):
    __tablename__ = "hydration_days"

    id = Column(Integer, primary_key=True, index=True)
    day = Column(Date, unique=True, index=True)
    total_oz = Column(Float, default=0.0)
    goal_oz = Column(Float, nullable=True)
