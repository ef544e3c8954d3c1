"""
Shared fixtures: in-memory SQLite session and a clock pinned to Monday 2026-10-19.
"""
from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models
from database import Base
from fitness_agent.time_utils import fixed_clock

TODAY = date(2026, 10, 19)  # a Monday
TIMEZONE = "America/Chicago"


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def clock():
    return fixed_clock(TIMEZONE, TODAY)


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


def add_workout(db, name, workout_date=None, categories=None, exercises=(), **flags):
    """Insert a workout with (name, sets, reps, weight_text) exercise rows."""
    workout = models.Workout(name=name, workout_date=workout_date, categories=list(categories or []), **flags)
    for position, (ex_name, sets, reps, weight_text) in enumerate(exercises):
        workout.exercises.append(models.WorkoutExercise(
            position=position, name=ex_name, sets=sets, reps=reps, weight_text=weight_text,
        ))
    db.add(workout)
    db.commit()
    db.refresh(workout)
    return workout
