"""
Per-session scoring used by the metrics recorder.

Both functions are pure and return integers clamped to 0..100.
"""
import math

POMODORO_SECONDS = 25 * 60
SUSTAINED_FOCUS_SECONDS = 50 * 60


def expected_breaks(duration: float) -> int:
    """One break per 25 minutes of study."""
    return math.floor(duration / POMODORO_SECONDS)


def _clamp(value: float) -> int:
    return int(min(100, max(0, value)))


def productivity_score(
    completed: bool,
    actual_duration: float,
    planned_duration: float,
    breaks_taken: int = 0,
    break_duration: float = 0,
) -> int:
    """
    Score a session on completion, adherence to the planned duration and
    break cadence.
    """
    if not completed:
        return 0

    # Base score for completion
    score = 60

    if planned_duration > 0:
        ratio = actual_duration / planned_duration
    elif actual_duration > 0:
        ratio = math.inf
    else:
        ratio = None

    if ratio is not None:
        if 0.9 <= ratio <= 1.1:
            score += 30
        elif 0.8 <= ratio <= 1.2:
            score += 20
        elif ratio >= 0.7:
            score += 10

    if (
        breaks_taken >= expected_breaks(actual_duration)
        and break_duration < actual_duration * 0.2
    ):
        score += 10

    return _clamp(score)


def focus_quality(duration: float, breaks_taken: int = 0, break_duration: float = 0) -> int:
    """
    Score a session's focus: penalize too many or too long breaks, reward
    long sessions that stayed within the expected break count.
    """
    quality = 100
    expected = expected_breaks(duration)

    if breaks_taken > expected * 1.5:
        quality -= 20

    if break_duration > duration * 0.25:
        quality -= 30

    # Sustained focus
    if duration > SUSTAINED_FOCUS_SECONDS and breaks_taken <= expected:
        quality += 10

    return _clamp(quality)
