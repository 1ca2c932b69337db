"""Port for the external text-generation service."""

from typing import Protocol

from menu_ingest.domain.errors import GenerationError
from menu_ingest.domain.results import Result


class StructuredGenerationPort(Protocol):
    """Interface for text-generation calls.

    Implementations make exactly one service call per method invocation and
    report failures as ``Err(GenerationError)``. Retries, backoff and rate
    limiting are the caller's responsibility.
    """

    async def generate(
        self,
        *,
        instructions: str,
        prompt: str,
        schema: dict[str, object],
        schema_name: str,
    ) -> Result[dict[str, object], GenerationError]:
        """Force a schema-conforming function call and return its arguments."""

    async def complete(
        self, *, instructions: str, prompt: str
    ) -> Result[str, GenerationError]:
        """Return the free-text response for a prompt."""
