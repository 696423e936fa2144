from fitarc.models.meal import (  # noqa: F401
    MacroTotals,
    MealDay,
    MealElement,
    MealElementInput,
    MealTemplate,
    MealTemplateEntry,
)
from fitarc.models.plan import (  # noqa: F401
    DayResolution,
    EatingMode,
    ElementInput,
    OverrideAction,
    OverrideRecord,
    PlanContext,
    PlanElement,
    StagedOverride,
    Template,
    TemplateElement,
    TrainingSplit,
    UserPreferences,
)
