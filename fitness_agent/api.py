"""
FastAPI Router for the Fitness Agent
Transport webhooks (SMS, Telegram, iMessage) and scheduled jobs
"""
import logging
import threading
from typing import Any, Callable, Dict

from fastapi import APIRouter, Body, Depends, Form, HTTPException
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session, sessionmaker
from twilio.twiml.messaging_response import MessagingResponse

from config import Settings
from database import SessionLocal, get_db
from fitness_agent.coaching_agent import CoachingAgent, build_coaching_agent
from fitness_agent.hydration import HydrationTracker
from fitness_agent.message_router import MessageRouter
from fitness_agent.repository import WorkoutRepository
from fitness_agent.schemas import (
    HydrationRequest, HydrationResponse,
    InboundTextRequest, InboundTextResponse,
)
from fitness_agent.telegram import send_telegram_message
from fitness_agent.time_utils import ZonedClock

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["fitness_agent"])


class BriefingTimeoutError(TimeoutError):
    pass


def run_with_timeout(fn: Callable[[], str], seconds: float) -> str:
    """
    Runs fn in a daemon thread; raises BriefingTimeoutError after `seconds`.
    A timed-out worker is abandoned and does not hold up process exit.
    """
    outcome: Dict[str, Any] = {}

    def _worker():
        try:
            outcome["value"] = fn()
        except Exception as e:
            outcome["error"] = e

    thread = threading.Thread(target=_worker, name="daily-briefing", daemon=True)
    thread.start()
    thread.join(seconds)

    if thread.is_alive():
        raise BriefingTimeoutError(f"Daily briefing timed out after {seconds:g}s")
    if "error" in outcome:
        raise outcome["error"]
    return outcome["value"]


# ============ Dependencies ============

def get_clock() -> ZonedClock:
    return ZonedClock(Settings.USER_TIMEZONE)


def get_coach() -> CoachingAgent:
    return build_coaching_agent()


def get_session_factory() -> sessionmaker:
    return SessionLocal


def _build_message_router(db: Session, coach: CoachingAgent, clock: ZonedClock) -> MessageRouter:
    return MessageRouter(
        WorkoutRepository(db),
        coach,
        clock,
        athlete_name=Settings.ATHLETE_NAME,
        max_templates=Settings.int_value("MAX_TEMPLATES"),
        weight_template_limit=Settings.int_value("WEIGHT_TEMPLATE_LIMIT"),
    )


def get_message_router(
    db: Session = Depends(get_db),
    clock: ZonedClock = Depends(get_clock),
    coach: CoachingAgent = Depends(get_coach),
) -> MessageRouter:
    return _build_message_router(db, coach, clock)


def get_briefing_job(
    session_factory: sessionmaker = Depends(get_session_factory),
    clock: ZonedClock = Depends(get_clock),
    coach: CoachingAgent = Depends(get_coach),
) -> Callable[[], str]:
    """
    The scheduled briefing as a callable for the worker thread.
    It opens and closes its own session inside that thread.
    """
    def job() -> str:
        db = session_factory()
        try:
            return _build_message_router(db, coach, clock).generate_daily_briefing()
        finally:
            db.close()

    return job


def get_hydration_tracker(
    db: Session = Depends(get_db),
    clock: ZonedClock = Depends(get_clock),
) -> HydrationTracker:
    return HydrationTracker(
        WorkoutRepository(db),
        clock,
        default_goal_oz=Settings.float_value("HYDRATION_DAILY_GOAL_OZ"),
    )


# ============ Inbound Messages ============

@router.post("/sms/webhook")
def sms_webhook(
    body: str = Form("", alias="Body"),
    message_router: MessageRouter = Depends(get_message_router),
):
    """
    Twilio inbound SMS. Replies with TwiML.
    """
    reply = message_router.handle_text_message(body.strip())
    twiml = MessagingResponse()
    twiml.message(reply)
    return Response(content=str(twiml), media_type="text/xml")


@router.post("/telegram/webhook")
def telegram_webhook(
    update: Dict[str, Any] = Body(...),
    message_router: MessageRouter = Depends(get_message_router),
):
    """
    Telegram Bot update. The reply goes out through sendMessage;
    the webhook itself always answers 200.
    """
    message = update.get("message") or update.get("edited_message") or {}
    text = message.get("text")
    chat_id = (message.get("chat") or {}).get("id")

    if not text or not chat_id:
        logger.warning("Telegram webhook received update without text or chat id")
        return {"ok": True, "ignored": True}

    allowed_chat_id = Settings.TELEGRAM_CHAT_ID
    if allowed_chat_id and str(chat_id) != allowed_chat_id:
        logger.warning(f"Telegram message from unauthorized chat id {chat_id}, ignoring")
        return {"ok": True, "unauthorized": True}

    reply = message_router.handle_text_message(text)
    send_telegram_message(reply, str(chat_id))
    return {"ok": True}


@router.post("/imessage/inbound", response_model=InboundTextResponse)
def imessage_inbound(
    request: InboundTextRequest,
    message_router: MessageRouter = Depends(get_message_router),
):
    """
    iMessage relay: plain JSON in, {"reply": ...} out.
    """
    text = request.text or request.message or ""
    if not text.strip():
        raise HTTPException(status_code=400, detail="Missing text in request body")

    return InboundTextResponse(reply=message_router.handle_text_message(text))


# ============ Scheduled Jobs ============

@router.get("/cron/daily-briefing")
def daily_briefing(briefing_job: Callable[[], str] = Depends(get_briefing_job)):
    """
    Morning briefing under a hard timeout.
    """
    timeout = Settings.float_value("BRIEFING_TIMEOUT_SECONDS")
    try:
        briefing = run_with_timeout(briefing_job, timeout)
    except Exception as e:
        logger.error(f"Failed to generate daily briefing: {e}")
        return JSONResponse(status_code=500, content={"ok": False, "error": str(e) or "Failed to generate briefing"})

    logger.info(f"Daily briefing generated (timezone {Settings.USER_TIMEZONE})")
    return {"ok": True, "workoutBriefing": briefing}


@router.get("/cron/hydration-reminder")
def hydration_reminder(tracker: HydrationTracker = Depends(get_hydration_tracker)):
    """
    Sends today's hydration status to Telegram.
    """
    status = tracker.current()
    send_telegram_message(tracker.reminder_text(status))
    return {"ok": True, "totalOz": status.total, "goalOz": status.goal, "remainingOz": status.remaining}


# ============ Hydration ============

@router.post("/hydration", response_model=HydrationResponse)
def log_hydration(
    request: HydrationRequest,
    tracker: HydrationTracker = Depends(get_hydration_tracker),
):
    status = tracker.add(request.amount_oz)
    return HydrationResponse(total_oz=status.total, goal_oz=status.goal, remaining_oz=status.remaining)
