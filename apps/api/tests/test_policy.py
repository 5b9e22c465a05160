from babylog.policy import UNRECOGNIZED_ACTIVITY, contains_care_keyword, decide
from babylog.schemas import ParsedLog, ParsedLogType


def _parsed(log_type: ParsedLogType, **kwargs) -> ParsedLog:
    return ParsedLog(type=log_type, **kwargs)


def test_keyword_screen_examples() -> None:
    cases = [
        ("Baby drank 4 oz of formula", True),
        ("Changed a wet diaper", True),
        ("She napped for an hour", True),
        ("Little one was FUSSY after the doctor", True),
        ("xyz abc 123", False),
        ("blah blah", False),
        ("", False),
    ]
    for transcript, expected in cases:
        assert contains_care_keyword(transcript) is expected, transcript


def test_reject_type_always_rejected() -> None:
    for confidence in (0.0, 0.5, 1.0):
        decision = decide(
            "Baby drank 4 oz",
            _parsed(ParsedLogType.REJECT, amount=4, confidence=confidence, rejection_reason="nonsense"),
        )
        assert decision.accepted is False
        assert decision.reason == UNRECOGNIZED_ACTIVITY
        assert decision.reasons == ["nonsense"]


def test_quantified_types_require_positive_amount() -> None:
    for log_type in (ParsedLogType.FEEDING, ParsedLogType.SLEEP, ParsedLogType.DIAPER):
        for amount in (None, 0, -2):
            decision = decide("Baby drank some milk", _parsed(log_type, amount=amount, confidence=0.9))
            assert decision.accepted is False, (log_type, amount)
            assert decision.reason == UNRECOGNIZED_ACTIVITY

        accepted = decide("Baby drank some milk", _parsed(log_type, amount=0.5, confidence=0.0))
        assert accepted.accepted is True, log_type
        assert accepted.reason is None


def test_note_plausibility_rules() -> None:
    long_note = decide("She was fussy today", _parsed(ParsedLogType.NOTE, confidence=0.2))
    assert long_note.accepted is True

    short_without_baby = decide("fussy today", _parsed(ParsedLogType.NOTE, notes="fussy"))
    assert short_without_baby.accepted is False
    assert short_without_baby.reason == UNRECOGNIZED_ACTIVITY

    short_with_baby = decide("baby fussy", _parsed(ParsedLogType.NOTE))
    assert short_with_baby.accepted is True

    baby_in_notes = decide("so fussy", _parsed(ParsedLogType.NOTE, notes="Baby seemed fussy"))
    assert baby_in_notes.accepted is True


def test_note_without_amount_is_fine() -> None:
    decision = decide("Baby smiled at grandma today", _parsed(ParsedLogType.NOTE, amount=None))
    assert decision.accepted is True
