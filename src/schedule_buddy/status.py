"""Knowledge point status classification."""
from enum import Enum


class KnowledgeStatus(Enum):
    NOT_STARTED = (0, "Not started")
    LEARNING = (50, "Learning")
    MASTERED = (100, "Mastered")
    STUCK = (25, "Stuck")

    def __init__(self, level: int, label: str):
        self.level = level
        self.label = label

    @classmethod
    def from_level(cls, level: int) -> "KnowledgeStatus":
        """Classify a mastery level (0-100) into a status bucket.

        Out-of-range levels are clamped to the valid domain first.
        """
        level = max(0, min(100, level))
        if level >= 80:
            return cls.MASTERED
        elif level >= 40:
            return cls.LEARNING
        elif level > 0:
            return cls.STUCK
        return cls.NOT_STARTED


_NEXT_STATUS = {
    KnowledgeStatus.NOT_STARTED: KnowledgeStatus.LEARNING,
    KnowledgeStatus.LEARNING: KnowledgeStatus.MASTERED,
    KnowledgeStatus.MASTERED: KnowledgeStatus.STUCK,
    # Cycling never returns to NOT_STARTED.
    KnowledgeStatus.STUCK: KnowledgeStatus.LEARNING,
}


def next_status(status: KnowledgeStatus) -> KnowledgeStatus:
    """Status reached by a manual 'advance' tap."""
    return _NEXT_STATUS[status]


def get_status_color(status: KnowledgeStatus) -> str:
    if status is KnowledgeStatus.MASTERED:
        return "green"
    elif status is KnowledgeStatus.LEARNING:
        return "cyan"
    elif status is KnowledgeStatus.STUCK:
        return "dark_orange"
    return "grey50"
