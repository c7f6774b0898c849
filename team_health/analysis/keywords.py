"""Keyword tables used as proxies for team behaviours.

Each proxy is a named ``KeywordSet`` so a stricter matcher (stemming,
multi-language) can replace one without touching the aggregation code in
``metrics.py``.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class KeywordSet:
    """A named set of phrases matched case-insensitively as substrings."""

    name: str
    phrases: tuple[str, ...]

    def matches(self, text: str) -> bool:
        lowered = text.lower()
        return any(phrase in lowered for phrase in self.phrases)

    def count_matching(self, texts: list[str]) -> int:
        return sum(1 for text in texts if self.matches(text))


# Edmondson (1999) psychological safety
HELP_SEEKING = KeywordSet("help_seeking", ("help", "assist", "support", "guidance", "advice"))
ERROR_REPORTING = KeywordSet("error_reporting", ("mistake", "error", "failed", "issue", "problem"))
INNOVATION = KeywordSet("innovation", ("idea", "suggestion", "improve", "better", "new approach"))

# Van Dun et al. (2024) burnout
STRESS = KeywordSet("stress", ("urgent", "deadline", "pressure", "stress", "overwhelmed", "tired"))

# Tuckman (1965) storming
CONFLICT = KeywordSet("conflict", ("disagree", "conflict", "argument", "frustrated", "angry"))

# Hackman's conditions
DIRECTION = KeywordSet("direction", ("goal", "objective", "target", "mission", "vision"))
SUPPORTIVE = KeywordSet("supportive", ("thanks", "great", "awesome", "good job", "appreciate"))
COACHING = KeywordSet("coaching", ("feedback", "coach", "mentor", "guide", "support"))

# Ratio multipliers applied before clamping to [0, 1]
SCORE_MULTIPLIERS: dict[str, float] = {
    HELP_SEEKING.name: 1.0,
    ERROR_REPORTING.name: 1.0,
    INNOVATION.name: 1.0,
    DIRECTION.name: 10.0,
    SUPPORTIVE.name: 5.0,
    COACHING.name: 8.0,
}
