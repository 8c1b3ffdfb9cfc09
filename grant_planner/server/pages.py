# server/pages.py
#
# Server-rendered planner page (templates/planner.html). Every render
# reads the session as it is now; calendar links are rebuilt each time.

from pathlib import Path
from typing import Any, Dict, List

from fastapi import Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from .calendar_links import generate_calendar_links, ics_filename
from .errors import PlannerError
from .session_repo import PlannerSession
from .step_repo import StepRepo

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

NAV_TABS = ["Home", "Resources", "About", "Contact"]


def schedule_cards(session: PlannerSession) -> List[Dict[str, Any]]:
    cards = []
    for entry in session.schedule:
        try:
            links = generate_calendar_links(entry.title, entry.deadline)
        except PlannerError as e:
            print("[pages] calendar links skipped:", e)
            links = None
        cards.append(
            {
                "entry": entry,
                "links": links,
                "ics_filename": ics_filename(entry.title),
            }
        )
    return cards


def page_context(session: PlannerSession, repo: StepRepo, brand: str) -> Dict[str, Any]:
    """Template context for one render. Consumes the session's pending alert."""
    return {
        "brand": brand,
        "nav_tabs": NAV_TABS,
        "mechanisms": repo.list(),
        "session": session,
        "outline": session.outline(),
        "cards": schedule_cards(session),
        "active_step": session.active_step,
        "alert": session.pop_alert(),
    }


def render_page(
    request: Request, session: PlannerSession, repo: StepRepo, brand: str
) -> HTMLResponse:
    return templates.TemplateResponse(
        request, "planner.html", page_context(session, repo, brand)
    )
