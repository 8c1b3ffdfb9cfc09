# server/schemas.py
"""
Pydantic schemas for the Grant Planner JSON API.

This file defines the structured payloads used by:
- /api/mechanisms              (MechanismOut)
- /api/mechanisms/{id}/steps   (StepOut, DetailBlockOut)
- /api/schedule                (ScheduleIn, ScheduleOut, ScheduleEntryOut)
- /api/calendar-links          (CalendarLinksOut)
"""

from datetime import date
from typing import List

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# /api/mechanisms
# ---------------------------------------------------------------------------

class MechanismOut(BaseModel):
    id: str
    label: str
    step_count: int


# ---------------------------------------------------------------------------
# /api/mechanisms/{id}/steps
# ---------------------------------------------------------------------------

class SpanOut(BaseModel):
    text: str
    strong: bool = False


class DetailBlockOut(BaseModel):
    spans: List[SpanOut] = Field(default_factory=list)


class StepOut(BaseModel):
    title: str
    tip: str
    details: List[DetailBlockOut] = Field(default_factory=list)
    mechanism: str


# ---------------------------------------------------------------------------
# /api/calendar-links
# ---------------------------------------------------------------------------

class CalendarLinksOut(BaseModel):
    google: str
    outlook: str
    ical: str
    ics_filename: str


# ---------------------------------------------------------------------------
# /api/schedule
# ---------------------------------------------------------------------------

class ScheduleIn(BaseModel):
    mechanism: str = Field(..., min_length=1, description="e.g. 'NIH'")
    start_date: date
    end_date: date


class ScheduleEntryOut(StepOut):
    # ISO YYYY-MM-DD when serialized
    deadline: date
    links: CalendarLinksOut


class ScheduleOut(BaseModel):
    mechanism: str
    start_date: date
    end_date: date
    interval_days: int
    entries: List[ScheduleEntryOut] = Field(default_factory=list)
