# server/calendar_links.py
# ---------------------------------------------------------
# Calendar export links for one all-day deadline.
#
#   - google:  Google Calendar TEMPLATE action
#   - outlook: Outlook.com compose deep link
#   - ical:    data: URI holding a minimal VCALENDAR/VEVENT
#
# Pure string building, no network.
# ---------------------------------------------------------

from datetime import date as date_type, timedelta
from urllib.parse import quote

from .errors import CalendarDateError
from .schedule import DateLike, coerce_date
from .step_models import CalendarLinks

GOOGLE_BASE = "https://calendar.google.com/calendar/render"
OUTLOOK_BASE = "https://outlook.live.com/calendar/0/deeplink/compose"

# Same unreserved set as JavaScript's encodeURIComponent
_URI_COMPONENT_SAFE = "!*'()"


def encode_component(text: str) -> str:
    return quote(text, safe=_URI_COMPONENT_SAFE)


def compact_date(value: DateLike) -> str:
    """2025-01-31 -> 20250131"""
    return coerce_date(value).isoformat().replace("-", "")


def generate_calendar_links(title: str, date: DateLike) -> CalendarLinks:
    day = coerce_date(date)
    if day >= date_type.max:
        raise CalendarDateError(
            f"No calendar day follows {day.isoformat()} for the event end."
        )
    start = compact_date(day)
    end = compact_date(day + timedelta(days=1))
    text = encode_component(title)

    google = f"{GOOGLE_BASE}?action=TEMPLATE&text={text}&dates={start}/{end}"
    outlook = f"{OUTLOOK_BASE}?subject={text}&startdt={day.isoformat()}"
    ical = (
        "data:text/calendar;charset=utf8,"
        "BEGIN:VCALENDAR%0AVERSION:2.0%0ABEGIN:VEVENT"
        f"%0ASUMMARY:{text}"
        f"%0ADTSTART;VALUE=DATE:{start}"
        f"%0ADTEND;VALUE=DATE:{end}"
        "%0AEND:VEVENT%0AEND:VCALENDAR"
    )
    return CalendarLinks(google=google, outlook=outlook, ical=ical)


def ics_filename(title: str) -> str:
    return f"{title}.ics"
