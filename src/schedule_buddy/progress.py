"""Knowledge mastery progress aggregation and list filtering."""
import math
from enum import Enum
from typing import Iterable

from schedule_buddy.models import KnowledgePoint, KnowledgeProgress
from schedule_buddy.status import KnowledgeStatus


class KnowledgeFilter(Enum):
    ALL = "All"
    NOT_STARTED = "Not started"
    LEARNING = "Learning"
    MASTERED = "Mastered"
    STUCK = "Stuck"
    KEYPOINT = "Key points"


def calculate_progress(points: Iterable[KnowledgePoint]) -> KnowledgeProgress:
    """Count points per status and average their mastery levels.

    The percent is the mean raw mastery level rounded half up. Key points
    are not weighted.
    """
    counts = {status: 0 for status in KnowledgeStatus}
    total = 0
    level_sum = 0
    for point in points:
        counts[KnowledgeStatus.from_level(point.mastery_level)] += 1
        level_sum += point.mastery_level
        total += 1
    if total == 0:
        percent = 0
    else:
        percent = max(0, min(100, math.floor(level_sum / total + 0.5)))
    return KnowledgeProgress(
        total_count=total,
        mastered_count=counts[KnowledgeStatus.MASTERED],
        learning_count=counts[KnowledgeStatus.LEARNING],
        not_started_count=counts[KnowledgeStatus.NOT_STARTED],
        stuck_count=counts[KnowledgeStatus.STUCK],
        percent=percent,
    )


def _matches_filter(point: KnowledgePoint, knowledge_filter: KnowledgeFilter) -> bool:
    if knowledge_filter is KnowledgeFilter.ALL:
        return True
    if knowledge_filter is KnowledgeFilter.KEYPOINT:
        return point.is_key_point
    status = KnowledgeStatus.from_level(point.mastery_level)
    return status.name == knowledge_filter.name


def filter_points(
    points: Iterable[KnowledgePoint],
    knowledge_filter: KnowledgeFilter = KnowledgeFilter.ALL,
    query: str = "",
) -> list[KnowledgePoint]:
    """Apply a status filter and a case-insensitive title search."""
    query = query.strip().lower()
    return [
        p for p in points
        if (not query or query in p.title.lower()) and _matches_filter(p, knowledge_filter)
    ]
