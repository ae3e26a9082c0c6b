from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from datetime import datetime, date
from typing import Annotated, Dict, List, Literal, Optional, Union

from sigil.constants import (
    DEFAULT_CONSISTENCY_DAYS, DEFAULT_TOTAL_DAYS, DEFAULT_DAY_START_TIME,
    DEFAULT_TASK_COLOR,
)


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire and in the stored document."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


FrequencyType = Literal["daily", "weekly"]
GoalInterval = Literal["daily", "weekly", "monthly"]
GoalType = Literal["at_least", "no_more_than"]
BreachKind = Literal["consistency", "dark_streak", "pact"]
BreachStatus = Literal["breached", "dare_accepted", "declined", "frozen"]


# === Stored document ===

class RecordEntry(CamelModel):
    id: str
    date: date
    value: float = Field(..., ge=0)
    task_type: Optional[str] = None
    notes: Optional[str] = None


class AtLeastGoal(CamelModel):
    kind: Literal["at_least"] = "at_least"
    target: float
    interval: GoalInterval
    bonus_percentage: float = 0


class NoMoreThanGoal(CamelModel):
    kind: Literal["no_more_than"] = "no_more_than"
    target: float
    interval: GoalInterval
    bonus_percentage: float = 0


Goal = Annotated[Union[AtLeastGoal, NoMoreThanGoal], Field(discriminator="kind")]


class TaskDefinition(CamelModel):
    id: str
    name: str
    color: str = DEFAULT_TASK_COLOR
    unit: Optional[str] = None
    custom_unit_name: Optional[str] = None
    intensity_thresholds: Optional[List[float]] = None
    dark_streak_enabled: bool = False
    frequency_type: FrequencyType = "daily"
    frequency_count: Optional[int] = None
    goal_value: Optional[float] = None
    goal_interval: Optional[GoalInterval] = None
    goal_type: GoalType = "at_least"
    goal_completion_bonus_percentage: Optional[float] = None

    @property
    def goal(self) -> Optional[Union[AtLeastGoal, NoMoreThanGoal]]:
        """The recurring goal as a tagged value, or None when the task has none."""
        if not self.goal_value or self.goal_value <= 0 or not self.goal_interval:
            return None
        goal_class = AtLeastGoal if self.goal_type == "at_least" else NoMoreThanGoal
        return goal_class(
            target=self.goal_value,
            interval=self.goal_interval,
            bonus_percentage=self.goal_completion_bonus_percentage or 0,
        )


class HighGoal(CamelModel):
    id: str
    name: str
    task_id: str
    target_value: float
    start_date: date
    end_date: date


class TodoItem(CamelModel):
    id: str
    text: str
    completed: bool = False
    created_at: datetime
    due_date: Optional[date] = None
    penalty: Optional[int] = None
    penalty_applied: bool = False
    is_dare: bool = False


class Breach(CamelModel):
    id: str
    kind: BreachKind
    key: str
    task_id: Optional[str] = None
    task_name: Optional[str] = None
    penalty: int
    status: BreachStatus = "breached"
    dare: str
    created_at: datetime
    resolved_at: Optional[datetime] = None


class UserSettings(CamelModel):
    day_start_enabled: bool = False
    day_start_time: str = DEFAULT_DAY_START_TIME
    consistency_days: int = DEFAULT_CONSISTENCY_DAYS
    total_days: int = DEFAULT_TOTAL_DAYS


class UserState(CamelModel):
    """Everything persisted for one user."""
    records: List[RecordEntry] = []
    task_definitions: List[TaskDefinition] = []
    bonus_points: float = 0
    unlocked_achievements: List[str] = []
    spent_skill_points: Dict[str, float] = {}
    unlocked_skills: List[str] = []
    freeze_crystals: int = 0
    awarded_streak_milestones: Dict[str, List[int]] = {}
    high_goals: List[HighGoal] = []
    todo_items: List[TodoItem] = []
    settled_goal_periods: Dict[str, Dict[str, bool]] = {}
    breaches: List[Breach] = []
    awarded_tier_bonuses: List[str] = []
    friends: List[str] = []
    settings: UserSettings = Field(default_factory=UserSettings)

    def get_task(self, task_id: Optional[str]) -> Optional[TaskDefinition]:
        if not task_id:
            return None
        return next((t for t in self.task_definitions if t.id == task_id), None)

    @property
    def total_experience(self) -> float:
        return sum(r.value for r in self.records) + self.bonus_points


# === Requests ===

class RecordCreate(CamelModel):
    date: date
    value: float = Field(..., ge=0)
    task_type: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=2000)


class RecordUpdate(CamelModel):
    # `day` rather than `date` so the annotation is not shadowed by the default
    day: Optional[date] = Field(None, alias="date")
    value: Optional[float] = Field(None, ge=0)
    task_type: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=2000)


class TaskDefinitionCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    color: Optional[str] = None
    unit: Optional[str] = None
    custom_unit_name: Optional[str] = None
    intensity_thresholds: Optional[List[float]] = None
    dark_streak_enabled: bool = False
    frequency_type: FrequencyType = "daily"
    frequency_count: Optional[int] = None
    goal_value: Optional[float] = None
    goal_interval: Optional[GoalInterval] = None
    goal_type: GoalType = "at_least"
    goal_completion_bonus_percentage: Optional[float] = Field(None, ge=0)


class TaskDefinitionUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    color: Optional[str] = None
    unit: Optional[str] = None
    custom_unit_name: Optional[str] = None
    intensity_thresholds: Optional[List[float]] = None
    dark_streak_enabled: Optional[bool] = None
    frequency_type: Optional[FrequencyType] = None
    frequency_count: Optional[int] = None
    goal_value: Optional[float] = None
    goal_interval: Optional[GoalInterval] = None
    goal_type: Optional[GoalType] = None
    goal_completion_bonus_percentage: Optional[float] = Field(None, ge=0)


class HighGoalCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    task_id: str
    target_value: float
    start_date: date
    end_date: date


class HighGoalUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    task_id: Optional[str] = None
    target_value: Optional[float] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class TodoCreate(CamelModel):
    text: str = Field(..., max_length=500)
    due_date: Optional[date] = None
    penalty: Optional[int] = Field(None, ge=0)


class TodoUpdate(CamelModel):
    text: Optional[str] = Field(None, max_length=500)
    completed: Optional[bool] = None


class SettingsUpdate(CamelModel):
    day_start_enabled: Optional[bool] = None
    day_start_time: Optional[str] = None
    consistency_days: Optional[int] = Field(None, ge=1, le=365)
    total_days: Optional[int] = Field(None, ge=1, le=365)


class FriendAdd(CamelModel):
    friend_id: str = Field(..., min_length=1)


class BonusAdjust(CamelModel):
    amount: float


# === Responses ===

class LevelInfo(CamelModel):
    current_level: int
    level_name: str
    tier_name: str
    tier_icon: str
    tier_slug: str
    tier_group: int
    welcome_message: str
    progress_percentage: float
    current_level_value_start: int
    next_level_value_target: Optional[int]
    total_accumulated_value: float
    is_max_level: bool
    value_towards_next_level: float
    points_for_next_level: Optional[int]


class TaskDistributionEntry(CamelModel):
    task_name: str
    value: float
    color: str


class WeekdayEntry(CamelModel):
    day: str
    total: float


class WeeklyRollupEntry(CamelModel):
    week_label: str
    week_start: date
    value: float


class WeekStats(CamelModel):
    total: float
    start_date: date
    end_date: date


class DailyTotal(CamelModel):
    date: date
    value: float
    level: int


class GoalCheckResult(CamelModel):
    task_id: str
    period_key: str
    period_name: str
    start_date: date
    end_date: date
    actual: float
    target: float
    met: bool
    bonus_awarded: Optional[int] = None
    already_evaluated: bool = False


class GoalProgress(CamelModel):
    task_id: str
    goal: Goal
    start_date: date
    end_date: date
    actual: float
    percentage: float


class HighGoalProgress(CamelModel):
    goal: HighGoal
    progress: float
    percentage: float


class SkillNode(CamelModel):
    id: str
    name: str
    description: str
    cost: int
    unlocked: bool = False


class Constellation(CamelModel):
    task_id: str
    task_name: str
    task_color: str
    available_points: float
    nodes: List[SkillNode]


class AchievementStatus(CamelModel):
    id: str
    name: str
    description: str
    category: str
    unlocked: bool


class StreakInfo(CamelModel):
    task_id: Optional[str]
    streak: int
    unit: Literal["days", "weeks"]
    consistency: int


class DashboardResponse(CamelModel):
    level: LevelInfo
    total_experience: float
    streak: int
    consistency: int
    consistency_days: int
    total_last_days: float
    total_days: int
    freeze_crystals: int
    pending_breaches: List[Breach]


class ComparisonEntry(CamelModel):
    task_name: str
    user_value: float
    friend_value: float


class UnlockResult(CamelModel):
    skill_id: str
    unlocked: bool
    available_points: float
