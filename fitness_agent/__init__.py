"""
Fitness Agent - Text-message Fitness Coach
==========================================

Handles inbound SMS / Telegram / iMessage texts:
- Ordered first-match intent rules (no classifier, no conversation state)
- Daily briefing from today's scheduled workouts
- Template-based session creation and note logging
- Progressive-overload weight suggestions
- Coaching fallback through a provider-agnostic LLM interface

Key Design Principles:
1. One text in, one reply out; the router never raises
2. Every "today" is the zoned day in the configured timezone
3. Collaborators (store, coach, clock) are passed in, never global
"""

from fitness_agent.repository import WorkoutStore, WorkoutRepository
from fitness_agent.message_router import MessageRouter
from fitness_agent.briefing_generator import BriefingGenerator
from fitness_agent.weight_predictor import WeightPredictor
from fitness_agent.coaching_agent import CoachingAgent
from fitness_agent.llm_client import LLMClient, GeminiClient

__all__ = [
    'WorkoutStore',
    'WorkoutRepository',
    'MessageRouter',
    'BriefingGenerator',
    'WeightPredictor',
    'CoachingAgent',
    'LLMClient',
    'GeminiClient',
]
