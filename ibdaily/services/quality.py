"""Submission validation and low-effort detection.

Validation errors block a submission. Low-effort reasons only flag it: the
submission is stored with ``QualityStatus.low_effort`` and the reasons, and it
stops counting toward the leaderboard tiebreaker.
"""
import re
from dataclasses import dataclass, field

from ibdaily.models.submission import QualityStatus

MIN_NON_EMPTY_BULLETS = 2
MIN_BULLET_LENGTH = 20
MAX_BULLET_LENGTH = 140
SIMILARITY_THRESHOLD = 0.7

FILLER_PHRASES = (
    "idk",
    "i don't know",
    "i dont know",
    "same as yesterday",
    "nothing",
    "nothing new",
    "n/a",
    "na",
    "none",
    "no idea",
    "whatever",
    "stuff",
    "things",
    "blah",
    "asdf",
    "test",
    "testing",
    "xxx",
    "abc",
    "123",
)

_NON_WORD = re.compile(r"[^\w\s]")


@dataclass(frozen=True)
class QualityCheckResult:
    status: QualityStatus
    reasons: list[str] = field(default_factory=list)
    validation_errors: list[str] = field(default_factory=list)


def tokenize(text: str) -> list[str]:
    return [token for token in _NON_WORD.sub(" ", text.lower()).split() if len(token) > 2]


def jaccard_similarity(first: list[str], second: list[str]) -> float:
    if not first and not second:
        return 1.0
    if not first or not second:
        return 0.0
    left, right = set(first), set(second)
    return len(left & right) / len(left | right)


def contains_filler_phrase(bullet: str) -> bool:
    lower = bullet.strip().lower()
    return any(
        lower == filler or lower.startswith(filler + " ") or lower.endswith(" " + filler)
        for filler in FILLER_PHRASES
    )


def validate_bullets(bullets: list[str]) -> list[str]:
    non_empty = [bullet for bullet in bullets if bullet.strip()]
    if len(non_empty) < MIN_NON_EMPTY_BULLETS:
        return [f"At least {MIN_NON_EMPTY_BULLETS} bullets must be non-empty"]

    errors = []
    for index, raw in enumerate(bullets, start=1):
        bullet = raw.strip()
        if not bullet:
            continue
        if len(bullet) < MIN_BULLET_LENGTH:
            errors.append(
                f"Bullet {index} must be at least {MIN_BULLET_LENGTH} characters (currently {len(bullet)})"
            )
        if len(bullet) > MAX_BULLET_LENGTH:
            errors.append(
                f"Bullet {index} must be at most {MAX_BULLET_LENGTH} characters (currently {len(bullet)})"
            )
    return errors


def similarity_score(first: list[str], second: list[str]) -> float:
    return jaccard_similarity(tokenize(" ".join(first)), tokenize(" ".join(second)))


def check_low_effort(bullets: list[str], yesterday_bullets: list[str] | None = None) -> list[str]:
    reasons = []
    for index, raw in enumerate(bullets, start=1):
        if raw.strip() and contains_filler_phrase(raw):
            reasons.append(f"Bullet {index} contains filler phrase")

    if yesterday_bullets:
        similarity = similarity_score(bullets, yesterday_bullets)
        if similarity >= SIMILARITY_THRESHOLD:
            reasons.append(f"Very similar to yesterday's submission ({round(similarity * 100)}% overlap)")

    normalized = [bullet.strip().lower() for bullet in bullets if bullet.strip()]
    if len(set(normalized)) < len(normalized):
        reasons.append("Contains duplicate bullets")
    return reasons


def check_submission_quality(
    bullets: list[str], yesterday_bullets: list[str] | None = None
) -> QualityCheckResult:
    errors = validate_bullets(bullets)
    if errors:
        return QualityCheckResult(status=QualityStatus.low_effort, validation_errors=errors)

    reasons = check_low_effort(bullets, yesterday_bullets)
    status = QualityStatus.low_effort if reasons else QualityStatus.good
    return QualityCheckResult(status=status, reasons=reasons)
