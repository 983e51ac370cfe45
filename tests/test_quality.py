from ibdaily.models import QualityStatus
from ibdaily.services.quality import (
    check_low_effort,
    check_submission_quality,
    contains_filler_phrase,
    jaccard_similarity,
    tokenize,
    validate_bullets,
)

GOOD_BULLETS = [
    "Derived the quadratic formula by completing the square",
    "Compared SN1 and SN2 mechanisms for tertiary halides",
    "Practised Paper 2 essay planning on Macbeth ambition",
]


def test_tokenize_drops_short_words_and_punctuation():
    assert tokenize("It's a DNA-based model, ok?") == ["dna", "based", "model"]


def test_jaccard_similarity():
    assert jaccard_similarity([], []) == 1.0
    assert jaccard_similarity(["cell"], []) == 0.0
    assert jaccard_similarity(["cell", "wall"], ["cell", "membrane"]) == 1 / 3


def test_filler_phrases():
    assert contains_filler_phrase("idk") is True
    assert contains_filler_phrase("Same as yesterday") is True
    assert contains_filler_phrase("nothing much happened in class today") is True
    assert contains_filler_phrase("Integration by parts for definite integrals") is False


def test_requires_two_bullets():
    assert validate_bullets(["Only one bullet written here today", "", ""]) == [
        "At least 2 bullets must be non-empty"
    ]


def test_bullet_length_limits():
    errors = validate_bullets(["too short", "x" * 141, ""])

    assert errors == [
        "Bullet 1 must be at least 20 characters (currently 9)",
        "Bullet 2 must be at most 140 characters (currently 141)",
    ]


def test_good_submission():
    result = check_submission_quality(GOOD_BULLETS)

    assert result.status == QualityStatus.good
    assert result.reasons == []
    assert result.validation_errors == []


def test_validation_errors_block_before_effort_checks():
    result = check_submission_quality(["idk", "", ""])

    assert result.validation_errors
    assert result.reasons == []


def test_similar_to_yesterday_is_low_effort():
    result = check_submission_quality(GOOD_BULLETS, yesterday_bullets=list(GOOD_BULLETS))

    assert result.status == QualityStatus.low_effort
    assert result.reasons == ["Very similar to yesterday's submission (100% overlap)"]


def test_duplicate_bullets_are_low_effort():
    reasons = check_low_effort([GOOD_BULLETS[0], GOOD_BULLETS[0].upper(), ""])

    assert reasons == ["Contains duplicate bullets"]


def test_filler_bullet_is_low_effort():
    reasons = check_low_effort([GOOD_BULLETS[0], "nothing new to report from chemistry", ""])

    assert reasons == ["Bullet 2 contains filler phrase"]
