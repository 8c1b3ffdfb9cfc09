# server/app.py
import os
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from fastapi import Cookie, FastAPI, Form, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, RedirectResponse

from .calendar_links import generate_calendar_links, ics_filename
from .errors import CalendarDateError, InvalidDateRangeError, UnknownMechanismError
from .pages import render_page
from .schedule import deadline_interval, generate_schedule
from .schemas import (
    CalendarLinksOut,
    MechanismOut,
    ScheduleEntryOut,
    ScheduleIn,
    ScheduleOut,
    StepOut,
)
from .session_repo import PlannerSession, SessionRepo
from .step_repo import step_repo

# Load .env from the project root (grant_planner)
ROOT_DIR = Path(__file__).resolve().parent.parent
load_dotenv(ROOT_DIR / ".env")

BRAND_NAME = os.getenv("PLANNER_BRAND_NAME") or "ResearchQuest Consortium"
ALLOWED_ORIGINS = [
    o.strip() for o in (os.getenv("PLANNER_ALLOWED_ORIGINS") or "*").split(",") if o.strip()
]
SESSION_COOKIE = os.getenv("PLANNER_SESSION_COOKIE") or "planner_session"
MAX_SESSIONS = int(os.getenv("PLANNER_MAX_SESSIONS") or 1000)
SESSION_TTL_SECONDS = float(os.getenv("PLANNER_SESSION_TTL_SECONDS") or 6 * 60 * 60)

session_repo = SessionRepo(maxsize=MAX_SESSIONS, ttl_seconds=SESSION_TTL_SECONDS)

app = FastAPI(title="Grant Planner")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _links_out(title: str, deadline: date) -> CalendarLinksOut:
    links = generate_calendar_links(title, deadline)
    return CalendarLinksOut(**links.model_dump(), ics_filename=ics_filename(title))


def _remember(resp: Response, session: PlannerSession) -> Response:
    resp.set_cookie(SESSION_COOKIE, session.session_id, httponly=True, samesite="lax")
    return resp


def _back_to_page(session: PlannerSession) -> Response:
    return _remember(RedirectResponse(url="/", status_code=303), session)


def _session(session_id: Optional[str]) -> PlannerSession:
    return session_repo.get(session_id)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@app.get("/health")
def health() -> Dict[str, Any]:
    return {"ok": True, "ts": datetime.utcnow().isoformat()}


# ---------------------------------------------------------------------------
# Planner page
# ---------------------------------------------------------------------------


@app.get("/", response_class=HTMLResponse)
def page(
    request: Request,
    planner_session: Optional[str] = Cookie(default=None, alias=SESSION_COOKIE),
) -> Response:
    session = _session(planner_session)
    return _remember(render_page(request, session, step_repo, BRAND_NAME), session)


@app.post("/fields")
def edit_fields(
    mechanism: str = Form(default=""),
    start_date: str = Form(default=""),
    end_date: str = Form(default=""),
    planner_session: Optional[str] = Cookie(default=None, alias=SESSION_COOKIE),
) -> Response:
    session = _session(planner_session)
    session.update_fields(mechanism=mechanism, start_date=start_date, end_date=end_date)
    return _back_to_page(session)


@app.post("/generate")
def generate(
    mechanism: str = Form(default=""),
    start_date: str = Form(default=""),
    end_date: str = Form(default=""),
    planner_session: Optional[str] = Cookie(default=None, alias=SESSION_COOKIE),
) -> Response:
    session = _session(planner_session)
    session.update_fields(mechanism=mechanism, start_date=start_date, end_date=end_date)
    session.generate()
    return _back_to_page(session)


@app.post("/detail/close")
def close_detail(
    planner_session: Optional[str] = Cookie(default=None, alias=SESSION_COOKIE),
) -> Response:
    session = _session(planner_session)
    session.close_detail()
    return _back_to_page(session)


@app.post("/detail/{source}/{index}")
def open_detail(
    source: str,
    index: int,
    planner_session: Optional[str] = Cookie(default=None, alias=SESSION_COOKIE),
) -> Response:
    session = _session(planner_session)
    if source == "schedule":
        items = session.schedule
    elif source == "outline":
        items = session.outline()
    else:
        raise HTTPException(status_code=404, detail="unknown_detail_source")

    if not 0 <= index < len(items):
        raise HTTPException(status_code=404, detail="step_not_found")

    session.open_detail(items[index])
    return _back_to_page(session)


# ---------------------------------------------------------------------------
# JSON API – mechanisms & steps
# ---------------------------------------------------------------------------


@app.get("/api/mechanisms", response_model=List[MechanismOut])
def mechanisms() -> List[MechanismOut]:
    return [
        MechanismOut(id=m.id, label=m.label, step_count=len(m.steps))
        for m in step_repo.list()
    ]


@app.get("/api/mechanisms/{mechanism_id}/steps", response_model=List[StepOut])
def mechanism_steps(mechanism_id: str) -> List[StepOut]:
    if mechanism_id not in step_repo:
        raise HTTPException(status_code=404, detail="mechanism_not_found")
    return [StepOut(**s.model_dump()) for s in step_repo.steps(mechanism_id)]


# ---------------------------------------------------------------------------
# JSON API – schedule & calendar links
# ---------------------------------------------------------------------------


@app.post("/api/schedule", response_model=ScheduleOut)
def schedule(payload: ScheduleIn) -> ScheduleOut:
    try:
        entries = generate_schedule(payload.mechanism, payload.start_date, payload.end_date)
    except UnknownMechanismError:
        raise HTTPException(status_code=404, detail="mechanism_not_found")
    except InvalidDateRangeError as e:
        print("[app] schedule rejected:", e)
        raise HTTPException(status_code=400, detail="invalid_date_range")

    return ScheduleOut(
        mechanism=payload.mechanism,
        start_date=payload.start_date,
        end_date=payload.end_date,
        interval_days=deadline_interval(payload.start_date, payload.end_date, len(entries)),
        entries=[
            ScheduleEntryOut(**e.model_dump(), links=_links_out(e.title, e.deadline))
            for e in entries
        ],
    )


@app.get("/api/calendar-links", response_model=CalendarLinksOut)
def calendar_links(title: str, date: date) -> CalendarLinksOut:
    try:
        return _links_out(title, date)
    except CalendarDateError as e:
        print("[app] calendar links rejected:", e)
        raise HTTPException(status_code=400, detail="invalid_calendar_date")
