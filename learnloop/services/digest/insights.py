"""
Digest Insights

Baseline insights are fixed templates filled from LearningStats. A
generator may add one or two free-form insights; anything it returns
that isn't a well-formed insight is dropped.
"""

import json
import logging
from typing import Any, Optional, Sequence

from learnloop.enums.learning import InsightType, PerformanceLevel
from learnloop.services.digest.stats import LearningStats
from learnloop.services.learning.content_generator import round_half_up

logger = logging.getLogger(__name__)


INSIGHTS_PROMPT = """Based on the following user learning data, generate 1-2 insightful observations about their learning patterns,
progress, or potential areas for growth. Keep each insight concise (under 100 words) and actionable.

User learning stats:
- Completed {completed} out of {total} learning sessions
- Average quiz score: {average}
- Current learning streak: {streak} days
- Top category: {top_category}
- Top performing topic: {top_topic}
- Recent topics studied: {recent_topics}
- Time spent learning: {minutes} minutes

Return the response as a JSON object in this format:
{{
  "insights": [
    {{
      "type": "insight_type",
      "title": "Short Insight Title",
      "description": "Detailed insight (1-2 sentences)"
    }}
  ]
}}
type is one of "learning_pattern", "progress", "recommendation", "growth_area"."""


def performance_level(average_score: float) -> PerformanceLevel:
    if average_score >= 80:
        return PerformanceLevel.EXCELLENT
    if average_score >= 60:
        return PerformanceLevel.GOOD
    return PerformanceLevel.NEEDS_IMPROVEMENT


_PERFORMANCE_REMARKS = {
    PerformanceLevel.EXCELLENT: "Great job!",
    PerformanceLevel.GOOD: "Keep practicing to improve.",
    PerformanceLevel.NEEDS_IMPROVEMENT: "More review might help boost your scores.",
}


def build_baseline_insights(stats: LearningStats) -> list[dict[str, Any]]:
    """
    Template insights, each included only when its precondition holds:
    activity (any sessions), performance (any score), streak (> 0 days),
    time investment (> 0 minutes).
    """
    insights: list[dict[str, Any]] = []

    if stats.total_sessions > 0:
        insights.append(
            {
                "type": InsightType.ACTIVITY.value,
                "title": "Activity Summary",
                "description": (
                    f"You completed {stats.completed_sessions} out of "
                    f"{stats.total_sessions} learning sessions this week."
                ),
                "data": {
                    "completed": stats.completed_sessions,
                    "total": stats.total_sessions,
                    "completionRate": round_half_up(
                        stats.completed_sessions / stats.total_sessions * 100
                    ),
                },
            }
        )

    if stats.average_score is not None:
        level = performance_level(stats.average_score)
        rounded = round_half_up(stats.average_score)
        insights.append(
            {
                "type": InsightType.PERFORMANCE.value,
                "title": "Performance Overview",
                "description": (
                    f"Your average quiz score was {rounded}%. "
                    f"{_PERFORMANCE_REMARKS[level]}"
                ),
                "data": {"avgScore": rounded, "level": level.value},
            }
        )

    if stats.streak > 0:
        insights.append(
            {
                "type": InsightType.STREAK.value,
                "title": "Learning Streak",
                "description": (
                    f"You're on a {stats.streak} day learning streak. Keep it going!"
                ),
                "data": {"days": stats.streak},
            }
        )

    if stats.time_spent_minutes > 0:
        minutes = stats.time_spent_minutes
        insights.append(
            {
                "type": InsightType.TIME_SPENT.value,
                "title": "Time Investment",
                "description": (
                    f"You've invested about {minutes} minutes learning this week."
                ),
                "data": {
                    "minutes": minutes,
                    "hours": minutes // 60,
                    "remainingMinutes": minutes % 60,
                },
            }
        )

    return insights


def build_insights_prompt(stats: LearningStats, recent_topics: Sequence[str]) -> str:
    if stats.average_score is not None:
        average = f"{round_half_up(stats.average_score)}%"
    else:
        average = "No quizzes completed"
    return INSIGHTS_PROMPT.format(
        completed=stats.completed_sessions,
        total=stats.total_sessions,
        average=average,
        streak=stats.streak,
        top_category=stats.top_category or "None",
        top_topic=stats.top_performing_topic or "None",
        recent_topics=", ".join(recent_topics),
        minutes=stats.time_spent_minutes,
    )


def _is_valid_insight(item: Any) -> bool:
    if not isinstance(item, dict):
        return False
    return all(
        isinstance(item.get(key), str) and item[key].strip()
        for key in ("type", "title", "description")
    )


def parse_generated_insights(text: Optional[str], limit: int = 2) -> list[dict[str, Any]]:
    """
    Accept a JSON array of insights or an object with an "insights" array.

    Malformed JSON yields no insights. Entries without a type, title and
    description are dropped. At most `limit` insights are kept.
    """
    if not text:
        return []
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning(f"Could not parse generated insights: {e}")
        return []

    if isinstance(data, dict):
        data = data.get("insights")
    if not isinstance(data, list):
        return []

    insights = []
    for item in data:
        if not _is_valid_insight(item):
            continue
        insight = {
            "type": item["type"],
            "title": item["title"],
            "description": item["description"],
        }
        if isinstance(item.get("data"), dict):
            insight["data"] = item["data"]
        insights.append(insight)
        if len(insights) >= limit:
            break
    return insights
