"""
Digest Recommendations

Order of assembly:
1. Popular topics (popularity > 0, most popular first) from the user's
   top category that don't appear among their recent session topics,
   at most five
2. A harder-material nudge when the user has history and averages > 75
3. A structured-path nudge when the user hasn't started any learning path
4. Generic advice until the list holds `target` entries
"""

from typing import Sequence

from learnloop.services.digest.stats import LearningStats

MAX_TOPIC_RECOMMENDATIONS = 5
HARDER_MATERIAL_THRESHOLD = 75

HARDER_MATERIAL_RECOMMENDATION = (
    "Try advancing to more challenging topics to maximize your learning"
)
LEARNING_PATH_RECOMMENDATION = (
    "Explore structured learning paths to build skills systematically"
)
GENERIC_RECOMMENDATIONS = [
    "Schedule regular review sessions to reinforce what you've learned",
    "Try explaining topics you've studied to someone else to solidify understanding",
    "Set specific learning goals for next week to stay motivated",
    "Explore related topics to build a more comprehensive understanding",
]


def build_recommendations(
    stats: LearningStats,
    recent_topics: Sequence[str],
    category_topics: Sequence[str],
    has_path_progress: bool,
    target: int = 5,
) -> list[str]:
    """
    Args:
        stats: The week's statistics
        recent_topics: Topics of the user's most recent sessions (any week)
        category_topics: Topic names of the top category, most popular first,
            already restricted to popularity > 0
        has_path_progress: Whether the user has started any learning path
        target: Pad with generic advice up to this many entries
    """
    seen = set(recent_topics)
    recommendations = [t for t in category_topics if t not in seen][
        :MAX_TOPIC_RECOMMENDATIONS
    ]

    if (
        recent_topics
        and stats.average_score is not None
        and stats.average_score > HARDER_MATERIAL_THRESHOLD
    ):
        recommendations.append(HARDER_MATERIAL_RECOMMENDATION)

    if not has_path_progress:
        recommendations.append(LEARNING_PATH_RECOMMENDATION)

    for generic in GENERIC_RECOMMENDATIONS:
        if len(recommendations) >= target:
            break
        recommendations.append(generic)

    return recommendations
