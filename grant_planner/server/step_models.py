# server/step_models.py

from datetime import date
from typing import List

from pydantic import BaseModel, ConfigDict, Field


NIH = "NIH"


class Span(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    strong: bool = Field(
        default=False,
        description="Emphasis marker, e.g. the 'Significance:' lead-in",
    )


class DetailBlock(BaseModel):
    """One bullet of guidance, as an ordered run of spans."""

    model_config = ConfigDict(frozen=True)

    spans: List[Span] = Field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(s.text for s in self.spans)


class Step(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    tip: str = Field(..., description="One-line advice shown next to the title")
    details: List[DetailBlock] = Field(
        default_factory=list,
        description="Detailed guidance shown in the overlay",
    )
    mechanism: str = Field(default="", description="Mechanism id, e.g. 'NIH'")


class Mechanism(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Selector value, e.g. 'NIH'")
    label: str = Field(..., description="e.g. 'NIH Training Grant'")
    steps: List[Step] = Field(default_factory=list)


class ScheduleEntry(Step):
    deadline: date


class CalendarLinks(BaseModel):
    google: str
    outlook: str
    ical: str


def block(*parts) -> DetailBlock:
    """
    Build a DetailBlock from plain strings and (text, True) pairs.

    block(("Significance:", True), " Explain the problem.")
    """
    spans = []
    for p in parts:
        if isinstance(p, tuple):
            spans.append(Span(text=p[0], strong=p[1]))
        else:
            spans.append(Span(text=p))
    return DetailBlock(spans=spans)
