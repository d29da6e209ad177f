"""
Regex slot extractors for user commands (English + Arabic).

Each field has an ordered table of (language, pattern); English patterns are
tried before Arabic ones and the first match wins. Captures stop at the next
field keyword, a sentence terminator, or the end of the prompt.
"""

import re
from typing import Optional, Sequence, Tuple

from .types import Slots

EN, AR, ANY = "en", "ar", "any"

Pattern = Tuple[str, "re.Pattern[str]"]

REGISTER_DEFAULTS = {"name": "Fallback User", "age": 25, "job_title": "Unknown"}

_QUOTES = "\"'"

# Registration: "name is Ahmed age is 30 job is Engineer" / "اسمه أحمد عمره 28 وظيفته مهندس"
_REGISTER_NAME: Sequence[Pattern] = (
    (EN, re.compile(r"(?:name\s+is|named)\s+(.+?)(?:\s+(?:age|job|works|and)\b|$|[.,])", re.I)),
    (AR, re.compile(r"(?:اسمه|اسم)\s+(.+?)(?:\s+(?:عمره|سن|سنه|وظيفته|يعمل|شغال)|$|[.,،])", re.S)),
)
_REGISTER_AGE: Sequence[Pattern] = (
    (EN, re.compile(r"(?:age\s+is\s+|age\s+)(\d+)", re.I)),
    (EN, re.compile(r"(\d+)\s*(?:years|yrs)", re.I)),
    (AR, re.compile(r"(?:عمره|سن|سنه)\s+(\d+)")),
)
_REGISTER_JOB: Sequence[Pattern] = (
    (EN, re.compile(r"(?:job(?:\s+title)?\s+is|works\s+as)\s+(.+?)(?:$|[.,])", re.I)),
    # optional conjunction "و" glued to the keyword
    (AR, re.compile(r"(?:(?:^|\s)و?)(?:وظيفته|يعمل|شغال)\s+(.+?)(?:$|[.,،])", re.S)),
)

# Update: "update id 5 name to Sara age 40" / "تعديل رقم 5 عمره 40"
# keywords of both languages share one pattern per field
_UPDATE_NAME: Sequence[Pattern] = (
    (ANY, re.compile(
        r"(?:name|اسمه|اسم)\s+(?:(?:is|to|becomes)\s+)?(.+?)"
        r"(?:\s+(?:age|job|works|and|id)\b|\s+(?:عمره|عمر|سن|وظيفته|يعمل|شغال|رقم)|$|[.,،])",
        re.I | re.S,
    )),
)
_UPDATE_AGE: Sequence[Pattern] = (
    (ANY, re.compile(r"(?:age|عمره|عمر|سن)\s+(?:(?:is|to|becomes)\s+)?(\d+)", re.I)),
)
_UPDATE_JOB: Sequence[Pattern] = (
    (ANY, re.compile(
        r"(?:job(?:\s+title)?|works|وظيفته|وظيف|عمل)\s+(?:(?:is|as|to|becomes)\s+)?(.+?)"
        r"(?:\s+(?:name|age|and|id)\b|\s+رقم|$|[.,،])",
        re.I | re.S,
    )),
)

_ID = re.compile(r"(?:id|رقم)\s*(\d+)", re.I)


def _clean(value: str) -> Optional[str]:
    cleaned = value.strip()
    for quote in _QUOTES:
        cleaned = cleaned.replace(quote, "")
    return cleaned.strip() or None


def first_match(text: str, patterns: Sequence[Pattern]) -> Optional[str]:
    """Return group 1 of the first pattern that matches, in table order."""
    for _language, pattern in patterns:
        m = pattern.search(text)
        if m:
            return m.group(1)
    return None


def _text(text: str, patterns: Sequence[Pattern]) -> Optional[str]:
    raw = first_match(text, patterns)
    return _clean(raw) if raw is not None else None


def _to_int(raw: Optional[str]) -> Optional[int]:
    # \d also accepts Arabic-Indic digits, which int() understands
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        # digit runs past the interpreter's conversion limit count as absent
        return None


def _number(text: str, patterns: Sequence[Pattern]) -> Optional[int]:
    return _to_int(first_match(text, patterns))


def extract_id(text: str) -> Optional[int]:
    m = _ID.search(text)
    return _to_int(m.group(1) if m else None)


def extract_register_slots(text: str) -> Slots:
    """Registration slots; absent fields take REGISTER_DEFAULTS, never None."""
    name = _text(text, _REGISTER_NAME)
    age = _number(text, _REGISTER_AGE)
    job_title = _text(text, _REGISTER_JOB)
    return Slots(
        name=name if name is not None else REGISTER_DEFAULTS["name"],
        age=age if age is not None else REGISTER_DEFAULTS["age"],
        job_title=job_title if job_title is not None else REGISTER_DEFAULTS["job_title"],
    )


def extract_update_slots(text: str) -> Slots:
    """Update slots; absent fields stay None so the directory leaves them unchanged."""
    return Slots(
        name=_text(text, _UPDATE_NAME),
        age=_number(text, _UPDATE_AGE),
        job_title=_text(text, _UPDATE_JOB),
        id=extract_id(text),
    )
