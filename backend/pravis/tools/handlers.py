import logging
from typing import Dict, Optional

from .base import NavigationTarget, SessionContext

logger = logging.getLogger("pravis.tools.handlers")

EMAIL_COMPOSE_PATH = "/dashboard/email-assistant/compose"
CALENDAR_PATH = "/dashboard/tasks"


def _present(**fields: Optional[str]) -> Dict[str, str]:
    # Missing or empty fields are omitted so the destination uses its own default
    return {k: v for k, v in fields.items() if v}


def handle_email_compose(
    ctx: SessionContext,
    to: Optional[str] = None,
    subject: Optional[str] = None,
    body: Optional[str] = None,
) -> NavigationTarget:
    """
    Email composer, prefilled through URL query parameters.
    """
    params = _present(to=to, subject=subject, body=body)
    logger.info(f"Tool Exec: email_compose fields={sorted(params)}")
    return NavigationTarget(path=EMAIL_COMPOSE_PATH, params=params, mode="query")


def handle_calendar(
    ctx: SessionContext,
    date: Optional[str] = None,
    summary: Optional[str] = None,
    startTime: Optional[str] = None,
) -> NavigationTarget:
    """
    Calendar/tasks view; the fields travel as prefill state for the create-event form.
    """
    params = _present(date=date, summary=summary, startTime=startTime)
    logger.info(f"Tool Exec: calendar fields={sorted(params)}")
    return NavigationTarget(path=CALENDAR_PATH, params=params, mode="state")
