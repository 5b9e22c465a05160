from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional

from .schemas import QUANTIFIED_TYPES, ParsedLog, ParsedLogType

UNRECOGNIZED_ACTIVITY = "UNRECOGNIZED_ACTIVITY"

CARE_KEYWORDS = [
    "baby",
    "infant",
    "newborn",
    "little one",
    # feeding
    "feed",
    "ate",
    "drank",
    "nurse",
    "nursing",
    "bottle",
    "breast",
    "formula",
    "milk",
    "solid",
    "food",
    "oz",
    "ml",
    # sleep
    "sleep",
    "slept",
    "nap",
    "napped",
    "bed",
    "bedtime",
    "asleep",
    "wake",
    "woke",
    "waking",
    # diaper
    "diaper",
    "wet",
    "dirty",
    "poop",
    "poopy",
    "pee",
    "changed",
    # general care
    "crying",
    "fussy",
    "happy",
    "gassy",
    "temperature",
    "fever",
    "medicine",
    "doctor",
    "appointment",
]

MIN_NOTE_WORDS = 3

_BABY_WORD = re.compile(r"\bbaby\b", re.IGNORECASE)


@dataclass
class PolicyDecision:
    accepted: bool
    parsed: ParsedLog
    reason: Optional[str] = None
    reasons: List[str] = field(default_factory=list)


def contains_care_keyword(transcript: str) -> bool:
    """Substring match against the baby-care vocabulary, case-insensitive."""
    lower = (transcript or "").lower()
    return any(keyword in lower for keyword in CARE_KEYWORDS)


def _mentions_baby(*texts: Optional[str]) -> bool:
    return any(text and _BABY_WORD.search(text) for text in texts)


def decide(transcript: str, parsed: ParsedLog) -> PolicyDecision:
    """Accept or reject a classified transcript.

    Rules short-circuit in order: explicit REJECT, implausible short NOTE,
    missing quantity on FEEDING/SLEEP/DIAPER. Confidence is reported to the
    client but never used to reject.
    """

    def reject(reason: str) -> PolicyDecision:
        return PolicyDecision(False, parsed, UNRECOGNIZED_ACTIVITY, [reason])

    if parsed.type == ParsedLogType.REJECT:
        return reject(parsed.rejection_reason or "classifier rejected transcript")

    if parsed.type == ParsedLogType.NOTE:
        word_count = len((transcript or "").split())
        if word_count < MIN_NOTE_WORDS and not _mentions_baby(transcript, parsed.notes):
            return reject(f"note too short ({word_count} words) without mentioning the baby")

    if parsed.type in QUANTIFIED_TYPES:
        if parsed.amount is None or parsed.amount <= 0:
            return reject(f"{parsed.type.value.lower()} without a positive amount")

    return PolicyDecision(True, parsed, None, ["accepted"])
