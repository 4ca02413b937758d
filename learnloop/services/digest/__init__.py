"""
Weekly Digest Services

- stats.py: Week bounds, streaks and session aggregates (pure)
- insights.py: Baseline insight templates and generated-insight parsing
- recommendations.py: Recommendation assembly
- repository.py: Database queries
- service.py: DigestService and the batch entry point
"""

from learnloop.services.digest.service import (
    DigestOutcome,
    DigestService,
    generate_weekly_digests_for_all_users,
)
from learnloop.services.digest.stats import LearningStats, week_bounds

__all__ = [
    "DigestOutcome",
    "DigestService",
    "LearningStats",
    "generate_weekly_digests_for_all_users",
    "week_bounds",
]
