"""Models stored in and returned by the in-memory vector index."""

from enum import Enum

from pydantic import BaseModel


class EntryCategory(str, Enum):
    """Provenance of a vector entry within the record tree."""

    PORTFOLIO = "portfolio"
    PRODUCT = "product"
    GOAL = "goal"
    PLAN = "plan"
    NOTE = "note"
    METRIC = "metric"


class VectorMetadata(BaseModel):
    """Display metadata stored alongside each vector.

    Attributes:
        portfolio_id:   ID of the owning portfolio.
        portfolio_name: Name of the owning portfolio.
        product_id:     ID of the owning product (None for portfolio entries).
        product_name:   Name of the owning product (None for portfolio entries).
        field:          Source field name (e.g. "name", "description", "goals", "plan", "metric").
        original_text:  The unlabeled source text, used for display.
    """

    portfolio_id: str
    portfolio_name: str
    product_id: str | None = None
    product_name: str | None = None
    field: str
    original_text: str = ""


class VectorEntry(BaseModel):
    """One indexed field of the record tree.

    Attributes:
        id:        Unique entry ID derived from the source record ID and field (e.g. "product-p1-name").
        category:  Provenance category.
        text:      The exact labelled text that was embedded.
        embedding: The embedding vector of text.
        metadata:  Display metadata.
    """

    id: str
    category: EntryCategory
    text: str
    embedding: list[float]
    metadata: VectorMetadata


class VectorMatch(BaseModel):
    """A vector entry paired with its cosine similarity to a query."""

    entry: VectorEntry
    similarity: float
