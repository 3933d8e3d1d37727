"""Pydantic models for the portfolio record tree.

Hierarchy:
  Portfolio → Product → {Metric, Roadmap, ReleaseGoal, ReleasePlan, ReleaseNote}

The record tree is owned by the dashboard data store. The search core only
reads snapshots of it. Field names follow the camelCase keys of the store
(e.g. "releaseGoals", "currentState"); snake_case names are accepted too.
Missing or null values fall back to the field defaults, so partially filled
records never fail validation.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


class RecordModel(BaseModel):
    """Base for all record tree models: camelCase aliases, nulls treated as absent."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class Metric(RecordModel):
    id: str = ""
    name: str = ""
    value: int | float | None = None
    unit: str = ""
    description: str | None = None
    month: int | None = None
    year: int | None = None


class Roadmap(RecordModel):
    id: str = ""
    year: int | None = None
    quarter: int | None = None
    title: str = ""
    description: str = ""
    status: str = ""


class GoalItem(RecordModel):
    """A single sub-goal inside a nested ReleaseGoal."""

    id: str = ""
    description: str = ""
    current_state: str = ""
    target_state: str = ""
    status: str | None = None
    owner: str | None = None


class ReleaseGoal(RecordModel):
    """Monthly release goal.

    Either nested (``goals`` holds one GoalItem per sub-goal) or flat
    (description/currentState/targetState on the goal itself). Older data
    uses ``goal`` and ``futureState`` instead of description/targetState.
    """

    id: str = ""
    month: int | None = None
    year: int | None = None
    description: str = ""
    current_state: str = ""
    target_state: str = ""
    goals: list[GoalItem] = []

    # legacy flat format
    goal: str | None = None
    future_state: str | None = None


class ReleasePlanItem(RecordModel):
    id: str = ""
    title: str = ""
    description: str = ""
    status: str = ""
    owner: str | None = None


class ReleasePlan(RecordModel):
    id: str = ""
    month: int | None = None
    year: int | None = None
    title: str = ""
    description: str = ""
    status: str = ""
    owner: str | None = None
    items: list[ReleasePlanItem] = []


class ReleaseNoteDetail(RecordModel):
    id: str = ""
    title: str = ""
    description: str = ""
    type: str = ""


class ReleaseNote(RecordModel):
    id: str = ""
    month: int | None = None
    year: int | None = None
    title: str = ""
    highlights: str = ""
    description: str = ""
    details: list[ReleaseNoteDetail] = []


class Product(RecordModel):
    id: str = ""
    name: str = ""
    description: str | None = None
    metrics: list[Metric] = []
    roadmap: list[Roadmap] = []
    release_goals: list[ReleaseGoal] = []
    release_plans: list[ReleasePlan] = []
    release_notes: list[ReleaseNote] = []


class Portfolio(RecordModel):
    id: str = ""
    name: str = ""
    description: str | None = None
    products: list[Product] = []
