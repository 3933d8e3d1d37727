"""Walks the record tree and produces the texts to embed.

Goal and plan records come in several shapes (nested item lists, flat fields,
legacy field names). resolve_goal_items() and resolve_plan_items() normalise
them once so that iter_entry_sources() only deals with plain item lists.
"""

from typing import Iterator

from pydantic import BaseModel

from shared.index.models.VectorEntry import EntryCategory, VectorMetadata
from shared.models.portfolio import Portfolio, Product, ReleaseGoal, ReleasePlan, ReleasePlanItem


class ResolvedGoalItem(BaseModel):
    """A goal in normalised form, whatever shape its ReleaseGoal had."""

    id: str
    description: str
    current_state: str
    target_state: str
    target_label: str = "Target state"
    field: str = "goals"


class EntrySource(BaseModel):
    """Everything needed to create a VectorEntry except the embedding."""

    id: str
    category: EntryCategory
    text: str
    metadata: VectorMetadata


def resolve_goal_items(goal: ReleaseGoal) -> list[ResolvedGoalItem]:
    """Normalise a ReleaseGoal into a list of goal items.

    Nested goals are returned one per item. Otherwise the flat fields form a
    single implicit item, with the legacy names goal/futureState standing in
    for description/targetState. A goal without any text yields no items.

    Args:
        goal (ReleaseGoal): The goal record.

    Returns:
        list[ResolvedGoalItem]: The resolved items, in record order.
    """
    if goal.goals:
        return [
            ResolvedGoalItem(
                id=item.id or f"{goal.id}-{index}",
                description=item.description,
                current_state=item.current_state,
                target_state=item.target_state,
            )
            for index, item in enumerate(goal.goals)
        ]

    description = goal.description or goal.goal or ""
    legacy_target = not goal.target_state and bool(goal.future_state)
    target_state = goal.target_state or goal.future_state or ""
    if not (description or goal.current_state or target_state):
        return []
    return [
        ResolvedGoalItem(
            id=goal.id,
            description=description,
            current_state=goal.current_state,
            target_state=target_state,
            target_label="Future state" if legacy_target else "Target state",
            field="goal",
        )
    ]


def resolve_plan_items(plan: ReleasePlan) -> list[ReleasePlanItem]:
    """Plans are indexed through their nested items only; flat plans yield nothing."""
    return list(plan.items)


def _period(month: int | None, year: int | None) -> str:
    return f"{month if month is not None else ''}/{year if year is not None else ''}"


def _format_number(value: int | float | None) -> str:
    if value is None:
        return ""
    # 10.0 renders as "10"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _product_metadata(portfolio: Portfolio, product: Product, field: str, original_text: str) -> VectorMetadata:
    return VectorMetadata(
        portfolio_id=portfolio.id,
        portfolio_name=portfolio.name,
        product_id=product.id,
        product_name=product.name,
        field=field,
        original_text=original_text,
    )


def iter_product_sources(portfolio: Portfolio, product: Product) -> Iterator[EntrySource]:
    """Yield the entry sources of one product: name, description, goals, plans, metrics."""
    yield EntrySource(
        id=f"product-{product.id}-name",
        category=EntryCategory.PRODUCT,
        text=f"Product: {product.name}",
        metadata=_product_metadata(portfolio, product, "name", product.name),
    )

    if product.description:
        yield EntrySource(
            id=f"product-{product.id}-description",
            category=EntryCategory.PRODUCT,
            text=f"Product description: {product.description}",
            metadata=_product_metadata(portfolio, product, "description", product.description),
        )

    for goal in product.release_goals:
        period = _period(goal.month, goal.year)
        for item in resolve_goal_items(goal):
            yield EntrySource(
                id=f"goal-{item.id}",
                category=EntryCategory.GOAL,
                text=(
                    f"Goal for {product.name} ({period}): {item.description}. "
                    f"Current state: {item.current_state}. "
                    f"{item.target_label}: {item.target_state}"
                ),
                metadata=_product_metadata(portfolio, product, item.field, item.description),
            )

    for plan in product.release_plans:
        period = _period(plan.month, plan.year)
        for index, item in enumerate(resolve_plan_items(plan)):
            text = (
                f"Plan for {product.name} ({period}): {item.title}. {item.description}. "
                f"Status: {item.status}."
            )
            if item.owner:
                text += f" Owner: {item.owner}"
            yield EntrySource(
                id=f"plan-{item.id or f'{plan.id}-{index}'}",
                category=EntryCategory.PLAN,
                text=text,
                metadata=_product_metadata(portfolio, product, "plan", item.title),
            )

    for metric in product.metrics:
        text = f"Metric for {product.name}: {metric.name} = {_format_number(metric.value)} {metric.unit}."
        if metric.description:
            text += f" {metric.description}"
        yield EntrySource(
            id=f"metric-{metric.id}",
            category=EntryCategory.METRIC,
            text=text,
            metadata=_product_metadata(portfolio, product, "metric", metric.name),
        )


def iter_entry_sources(portfolios: list[Portfolio]) -> Iterator[EntrySource]:
    """Yield all entry sources of the record tree in index order.

    Order: each portfolio's name, then its products in list order (see
    iter_product_sources). This order decides ties in similarity ranking.

    Args:
        portfolios (list[Portfolio]): The record tree snapshot.

    Yields:
        EntrySource: One source per indexed field.
    """
    for portfolio in portfolios:
        yield EntrySource(
            id=f"portfolio-{portfolio.id}",
            category=EntryCategory.PORTFOLIO,
            text=f"Portfolio: {portfolio.name}",
            metadata=VectorMetadata(
                portfolio_id=portfolio.id,
                portfolio_name=portfolio.name,
                field="name",
                original_text=portfolio.name,
            ),
        )
        for product in portfolio.products:
            yield from iter_product_sources(portfolio, product)
