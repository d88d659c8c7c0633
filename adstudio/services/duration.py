"""
duration.py

Spoken-duration estimate for ad scripts and the fit check against the
ad length the user picked.
"""

import math
import re
from dataclasses import dataclass
from enum import Enum


# Average radio read rate. Estimates are compared against fixed ad slots,
# so one canonical rate is used everywhere.
WORDS_PER_MINUTE = 140

# Multiplier applied to raw speaking time. 1.0 means no allowance for pauses.
PAUSE_BUFFER = 1.0

# Optional allowance for pauses and natural speech variation (+15%).
PAUSE_ALLOWANCE = 1.15

SECONDS_PER_MINUTE = 60

# Ad lengths offered to the user, in seconds
TARGET_DURATIONS = (15, 30, 45, 60)
DEFAULT_TARGET_SECONDS = 30

_WORD_CHAR = re.compile(r"\w")


class Verdict(str, Enum):
    FITS = "fits"
    OVERFLOW = "overflow"


@dataclass(frozen=True)
class DurationCheck:
    verdict: Verdict
    margin_seconds: float

    @property
    def fits(self) -> bool:
        return self.verdict is Verdict.FITS


def count_words(text: str) -> int:
    """Count whitespace-separated tokens that carry at least one letter or digit."""
    if not text:
        return 0
    return sum(1 for token in text.split() if _WORD_CHAR.search(token))


def estimate(
    text: str,
    words_per_minute: float = WORDS_PER_MINUTE,
    buffer: float = PAUSE_BUFFER,
) -> float:
    """
    Estimate how long `text` takes to read aloud.

    Returns:
        seconds (float, >= 0). Empty, whitespace-only or punctuation-only
        text is 0.0.
    """
    if words_per_minute <= 0:
        raise ValueError("words_per_minute must be positive")

    word_count = count_words(text)
    if word_count == 0:
        return 0.0

    return (word_count / words_per_minute) * SECONDS_PER_MINUTE * buffer


def words_for(
    seconds: float,
    words_per_minute: float = WORDS_PER_MINUTE,
    buffer: float = PAUSE_BUFFER,
) -> int:
    """Largest word count whose estimate still fits in `seconds`."""
    if seconds <= 0:
        return 0
    return int(seconds * words_per_minute / (SECONDS_PER_MINUTE * buffer))


def evaluate(estimate_seconds: float, target_seconds: int) -> DurationCheck:
    """Fits when the estimate is at or under the target; margin is estimate - target."""
    margin = estimate_seconds - target_seconds
    verdict = Verdict.FITS if estimate_seconds <= target_seconds else Verdict.OVERFLOW
    return DurationCheck(verdict=verdict, margin_seconds=margin)


def whole_seconds(seconds: float) -> int:
    """Round to whole seconds with halves going up (12.5 reads as 13)."""
    return int(math.floor(seconds + 0.5))


def describe(check: DurationCheck, estimate_seconds: float, target_seconds: int) -> str:
    rounded = whole_seconds(estimate_seconds)
    if check.verdict is Verdict.OVERFLOW:
        return (
            f"Script is too long! Estimated duration: {rounded} seconds. "
            "Please shorten the script or increase the ad duration."
        )
    return f"Script duration: {rounded} seconds (fits within {target_seconds} second limit)"


def overflow_notice(estimate_seconds: float, target_seconds: int) -> str:
    """Message shown when audio generation is refused for a long script."""
    return (
        f"The script is estimated to take {whole_seconds(estimate_seconds)} seconds, "
        f"but the selected duration is {target_seconds} seconds. "
        "Please shorten the script or choose a longer duration."
    )
