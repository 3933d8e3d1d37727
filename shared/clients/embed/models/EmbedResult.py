from pydantic import BaseModel


class EmbedResult(BaseModel):
    """Outcome of a single embedding call at the client boundary.

    Exactly one of vector and error is set. Clients never raise from
    do_embed_text(); failures are reported through error instead.

    Attributes:
        engine: Name of the engine that produced the result (e.g. "openai").
        vector: The embedding vector on success.
        error:  Human-readable failure reason on error.
    """

    engine: str
    vector: list[float] | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.vector is not None and self.error is None
