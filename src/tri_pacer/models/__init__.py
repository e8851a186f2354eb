"""Data models for the triathlon pace planner."""

from .course import (
    COURSE_DISTANCES,
    RACE_TIME_SPLITS,
    WORLD_RECORDS,
    Course,
    CourseDistances,
    Discipline,
    DisciplineSplit,
    WorldRecord,
    course_distances,
    race_time_split,
    resolve_course,
    world_record_seconds,
)
from .pacing import (
    Comparison,
    ComparisonStatus,
    CurrentPaceInput,
    CurrentStats,
    GoalTime,
    ImprovementSuggestion,
    Pace,
    PaceImprovement,
    PaceResult,
    PacingMode,
    SpeedImprovement,
)
from .training import (
    ActivityRecord,
    ActivityStats,
    ActivityType,
    DisciplineComparison,
    GoalComparison,
    Lap,
    PaceStats,
    PersonalizedPlan,
    SpeedStats,
    TrainingRecommendation,
)

__all__ = [
    # Course tables
    "COURSE_DISTANCES",
    "RACE_TIME_SPLITS",
    "WORLD_RECORDS",
    "Course",
    "CourseDistances",
    "Discipline",
    "DisciplineSplit",
    "WorldRecord",
    "course_distances",
    "race_time_split",
    "resolve_course",
    "world_record_seconds",
    # Pacing
    "Comparison",
    "ComparisonStatus",
    "CurrentPaceInput",
    "CurrentStats",
    "GoalTime",
    "ImprovementSuggestion",
    "Pace",
    "PaceImprovement",
    "PaceResult",
    "PacingMode",
    "SpeedImprovement",
    # Training
    "ActivityRecord",
    "ActivityStats",
    "ActivityType",
    "DisciplineComparison",
    "GoalComparison",
    "Lap",
    "PaceStats",
    "PersonalizedPlan",
    "SpeedStats",
    "TrainingRecommendation",
]
