"""Client recall: who is due for a check-up and the WhatsApp link to reach them."""
from __future__ import annotations

import re
from datetime import date, timedelta
from typing import Iterable, List
from urllib.parse import quote

from core.constants import RECALL_MESSAGE_DEFAULT
from core.models import Client

# encodeURIComponent leaves these unescaped
_URI_SAFE = "!*'()"


def recall_cutoff(today: date, months: int) -> date:
    return today - timedelta(days=round(months * 365 / 12))


def is_due_for_recall(client: Client, today: date, months: int) -> bool:
    """Clients never seen, or last seen before the cutoff, are due."""
    if client.last_visit is None:
        return True
    return client.last_visit <= recall_cutoff(today, months)


def recall_list(clients: Iterable[Client], today: date, months: int) -> List[Client]:
    """Due clients, longest absence first (never-seen clients lead)."""
    due = [c for c in clients if is_due_for_recall(c, today, months)]
    return sorted(due, key=lambda c: c.last_visit or date.min)


def render_message(template: str, client_name: str, shop_name: str) -> str:
    # [Nome] is the placeholder shown to users in the settings form
    text = (template or RECALL_MESSAGE_DEFAULT).replace("[Nome]", client_name)
    return text.replace("{nome}", client_name).replace("{loja}", shop_name)


def whatsapp_link(
    phone: str,
    client_name: str,
    shop_name: str,
    template: str = RECALL_MESSAGE_DEFAULT,
    country_code: str = "55",
) -> str:
    """Deep link opening a chat with the message pre-filled."""
    digits = re.sub(r"\D", "", phone or "")
    message = render_message(template, client_name, shop_name)
    return f"https://wa.me/{country_code}{digits}?text={quote(message, safe=_URI_SAFE)}"
