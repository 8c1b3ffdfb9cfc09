# server/session_repo.py
#
# Transient planner UI state, one PlannerSession per browser cookie.
# Kept in memory only; nothing is written to disk.

import secrets
import time
from collections import OrderedDict
from typing import Callable, List, Optional, Tuple

from .errors import PlannerError
from .schedule import generate_schedule
from .step_models import ScheduleEntry, Step
from .step_repo import StepRepo, step_repo

MISSING_MECHANISM = "Please select a funding mechanism."
MISSING_DATES = "Please select both start and end dates."


class PlannerSession:
    """
    Selected mechanism + dates, the last generated schedule, and the
    detail overlay (None when closed).
    """

    def __init__(self, session_id: str, repo: Optional[StepRepo] = None):
        self.session_id = session_id
        self.repo = repo or step_repo
        self.mechanism = ""
        self.start_date = ""
        self.end_date = ""
        self.schedule: List[ScheduleEntry] = []
        self.active_step: Optional[Step] = None
        self.alert: Optional[str] = None

    # -- field edits -------------------------------------------------------

    def update_fields(
        self,
        mechanism: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> None:
        if mechanism is not None:
            self.mechanism = mechanism
        if start_date is not None:
            self.start_date = start_date
        if end_date is not None:
            self.end_date = end_date

    # -- generate ----------------------------------------------------------

    def generate(self) -> bool:
        """
        Replace the schedule from the current fields.

        On a missing field or a rejected range the schedule is left as it
        was and an alert is queued for the page.
        """
        if not self.mechanism:
            self.alert = MISSING_MECHANISM
            return False
        if not self.start_date or not self.end_date:
            self.alert = MISSING_DATES
            return False

        try:
            schedule = generate_schedule(
                self.mechanism, self.start_date, self.end_date, repo=self.repo
            )
        except (PlannerError, ValueError) as e:
            print("[session] generate rejected:", e)
            self.alert = str(e)
            return False

        self.schedule = schedule
        return True

    def outline(self) -> List[Step]:
        return self.repo.steps(self.mechanism) if self.mechanism else []

    # -- detail overlay ----------------------------------------------------

    @property
    def detail_open(self) -> bool:
        return self.active_step is not None

    def open_detail(self, step: Step) -> None:
        self.active_step = step

    def close_detail(self) -> None:
        self.active_step = None

    def pop_alert(self) -> Optional[str]:
        alert, self.alert = self.alert, None
        return alert


class SessionRepo:
    """
    In-memory sessions keyed by cookie value.

    Unknown ids are never adopted; a fresh id is issued instead. At most
    ``maxsize`` sessions are kept (least recently used evicted first) and a
    session idle for ``ttl_seconds`` is dropped on the next lookup.
    """

    def __init__(
        self,
        repo: Optional[StepRepo] = None,
        maxsize: int = 1000,
        ttl_seconds: float = 6 * 60 * 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._repo = repo
        self._maxsize = maxsize
        self._ttl = ttl_seconds
        self._clock = clock
        # session id -> (session, last_seen)
        self._sessions: "OrderedDict[str, Tuple[PlannerSession, float]]" = OrderedDict()

    def get(self, session_id: Optional[str]) -> PlannerSession:
        """Return the live session for this id, or a new one under a new id."""
        now = self._clock()
        self._purge_expired(now)

        entry = self._sessions.get(session_id) if session_id else None
        if entry is not None:
            session = entry[0]
            self._sessions[session.session_id] = (session, now)
            self._sessions.move_to_end(session.session_id)
            return session

        session = PlannerSession(_mk_session_id(), repo=self._repo)
        while self._sessions and len(self._sessions) >= self._maxsize:
            self._sessions.popitem(last=False)
        self._sessions[session.session_id] = (session, now)
        return session

    def _purge_expired(self, now: float) -> None:
        expired = [sid for sid, (_, seen) in self._sessions.items() if now - seen > self._ttl]
        for sid in expired:
            del self._sessions[sid]

    def drop(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)


def _mk_session_id() -> str:
    return f"ps_{secrets.token_hex(8)}"
