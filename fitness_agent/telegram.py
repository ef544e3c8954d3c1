"""
Outbound Telegram delivery (Bot API sendMessage).
"""
import logging
from typing import Optional

import requests

from config import Settings

logger = logging.getLogger(__name__)

TELEGRAM_API_BASE = "https://api.telegram.org"


def send_telegram_message(text: str, chat_id: Optional[str] = None, token: Optional[str] = None) -> bool:
    """
    Sends `text` with Markdown parse mode. Returns False (after logging)
    when credentials are missing or the API call fails.
    """
    token = token or Settings.TELEGRAM_BOT_TOKEN
    target_chat_id = chat_id or Settings.TELEGRAM_CHAT_ID

    if not token or not target_chat_id:
        logger.warning("Telegram message not sent: missing TELEGRAM_BOT_TOKEN or TELEGRAM_CHAT_ID")
        return False

    url = f"{TELEGRAM_API_BASE}/bot{token}/sendMessage"
    try:
        response = requests.post(
            url,
            json={"chat_id": target_chat_id, "text": text, "parse_mode": "Markdown"},
            timeout=10,
        )
    except requests.RequestException as e:
        logger.error(f"Error while calling Telegram sendMessage: {e}")
        return False

    if not response.ok:
        logger.error(f"Failed to send Telegram message: {response.status_code} {response.text[:200]}")
        return False

    logger.info(f"Telegram message sent to chat {target_chat_id}")
    return True
