# src/taskmaster/nlp/date_extractor.py

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta

from dateutil import parser as dateparser
from dateutil.relativedelta import relativedelta

logger = logging.getLogger(__name__)

_RELATIVE_OFFSET = re.compile(
    r"\bin\s+(?P<n>\d+|an?|one)\s+(?P<unit>minutes?|mins?|hours?|hrs?|days?|weeks?)\b",
    re.IGNORECASE,
)
_DAY_WORD = re.compile(r"\b(?P<word>today|tonight|tomorrow|tmrw|tmr)\b", re.IGNORECASE)
_TIMEISH = re.compile(r"[:/\-.]|\d{4}|\d(am|pm)\b", re.IGNORECASE)

_UNIT_DELTAS = {"m": "minutes", "h": "hours", "d": "days", "w": "weeks"}

_JUMP = dateparser.parserinfo()


@dataclass(frozen=True, slots=True)
class DateMatch:
    when: datetime
    matched_text: str

    def describe(self) -> str:
        return f"Detected: {self.when.strftime('%a %d %b %Y, %H:%M')}"


def _looks_like_date(matched: str) -> bool:
    """
    dateutil's fuzzy mode happily reads "2" in "buy 2 apples" as a day of the
    month; require something more date-like than a bare number.
    """
    tokens = [t for t in re.split(r"[\s,]+", matched) if t and not _JUMP.jump(t)]
    if not tokens:
        return False
    for tok in tokens:
        if re.search(r"[a-z]", tok, re.IGNORECASE):
            return True
        if _TIMEISH.search(tok):
            return True
    return False


def _matched_text(text: str, skipped: tuple[str, ...]) -> str:
    pieces: list[str] = []
    pos = 0
    for tok in skipped:
        idx = text.find(tok, pos)
        if idx < 0:
            continue
        pieces.append(text[pos:idx])
        pos = idx + len(tok)
    pieces.append(text[pos:])
    return " ".join(p.strip() for p in pieces if p.strip())


class NaturalDateExtractor:
    """
    Best-guess date/time from free text ("Dentist tomorrow at 5pm").

    - relative offsets: "in 20 minutes", "in 2 hours", "in 3 days", "in a week"
    - day words: today / tonight / tomorrow (+ an optional time)
    - anything dateutil's fuzzy parser recognises: "June 5 10:00", "friday 9am"

    Missing time components default to `default_hour` (tonight: `evening_hour`).
    Returns at most one match; never raises on odd input.
    """

    def __init__(self, *, default_hour: int = 12, evening_hour: int = 20) -> None:
        self.default_hour = default_hour
        self.evening_hour = evening_hour

    def extract(self, text: str, *, now: datetime | None = None) -> DateMatch | None:
        s = (text or "").strip()
        if not s:
            return None
        ref = now if now is not None else datetime.now().astimezone()
        if ref.tzinfo is None:
            ref = ref.astimezone()

        m = _RELATIVE_OFFSET.search(s)
        if m:
            return DateMatch(when=ref + self._offset(m.group("n"), m.group("unit")), matched_text=m.group(0))

        m = _DAY_WORD.search(s)
        if m:
            return self._from_day_word(s, m, ref)

        base = ref.replace(hour=self.default_hour, minute=0, second=0, microsecond=0)
        return self._fuzzy(s, base)

    # ---- helpers ----

    @staticmethod
    def _offset(n_raw: str, unit_raw: str) -> relativedelta:
        n = 1 if n_raw.lower() in ("a", "an", "one") else int(n_raw)
        unit = _UNIT_DELTAS[unit_raw.lower()[0]]
        return relativedelta(**{unit: n})

    def _from_day_word(self, text: str, m: re.Match[str], ref: datetime) -> DateMatch:
        word = m.group("word").lower()
        day = ref + timedelta(days=1) if word in ("tomorrow", "tmrw", "tmr") else ref
        hour = self.evening_hour if word == "tonight" else self.default_hour
        base = day.replace(hour=hour, minute=0, second=0, microsecond=0)

        remainder = (text[: m.start()] + " " + text[m.end():]).strip()
        timed = self._fuzzy(remainder, base.replace(hour=0), date_locked=True) if remainder else None
        if timed is not None:
            return DateMatch(when=timed.when, matched_text=f"{m.group(0)} {timed.matched_text}")
        return DateMatch(when=base, matched_text=m.group(0))

    def _fuzzy(self, text: str, base: datetime, *, date_locked: bool = False) -> DateMatch | None:
        try:
            parsed, skipped = dateparser.parse(
                text,
                default=base.replace(tzinfo=None),
                fuzzy_with_tokens=True,
            )
        except (ValueError, OverflowError):
            logger.debug("No date found in %r", text)
            return None

        matched = _matched_text(text, skipped)
        if not _looks_like_date(matched):
            return None

        if date_locked:
            # "tomorrow at 5pm": the day word owns the date, the text only the time.
            if (parsed.year, parsed.month, parsed.day) != (base.year, base.month, base.day):
                return None

        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=base.tzinfo)
        return DateMatch(when=parsed, matched_text=matched)
