"""OpenAI Responses API client for menu extraction and enrichment."""

import json
import logging
from dataclasses import dataclass

import httpx
from openai import APIError, APITimeoutError, AsyncOpenAI

from menu_ingest.domain.errors import GenerationError, GenerationErrorKind
from menu_ingest.domain.results import Err, Ok, Result
from menu_ingest.services.generation import StructuredGenerationPort

_logger = logging.getLogger(__name__)


@dataclass
class OpenAIGenerationClient(StructuredGenerationPort):
    """Generation port backed by the OpenAI Responses API."""

    client: AsyncOpenAI
    model: str
    temperature: float | None = None
    store: bool = False

    @classmethod
    def create(  # noqa: PLR0913
        cls,
        api_key: str,
        model: str,
        *,
        base_url: str | None = None,
        timeout_seconds: float = 60.0,
        temperature: float | None = None,
    ) -> "OpenAIGenerationClient":
        """Create a client with SDK retries disabled; callers own retry policy."""
        http_client = httpx.AsyncClient(timeout=timeout_seconds)
        client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            http_client=http_client,
            max_retries=0,
            timeout=timeout_seconds,
        )
        return cls(client=client, model=model, temperature=temperature)

    async def generate(
        self,
        *,
        instructions: str,
        prompt: str,
        schema: dict[str, object],
        schema_name: str,
    ) -> Result[dict[str, object], GenerationError]:
        """Call the API with a single forced function tool."""
        request_payload = self._base_payload(instructions, prompt)
        request_payload["tools"] = [
            {
                "type": "function",
                "name": schema_name,
                "description": "Record the structured result for the given text.",
                "parameters": schema,
                "strict": True,
            }
        ]
        request_payload["tool_choice"] = {"type": "function", "name": schema_name}

        response = await self._create(request_payload)
        if isinstance(response, Err):
            return response

        for output in getattr(response.value, "output", None) or []:
            if getattr(output, "type", None) != "function_call":
                continue
            if getattr(output, "name", None) != schema_name:
                continue
            try:
                arguments = json.loads(output.arguments)
            except (TypeError, json.JSONDecodeError) as exc:
                return Err(
                    GenerationError(
                        GenerationErrorKind.NO_STRUCTURED_OUTPUT,
                        f"function call arguments were not valid JSON: {exc}",
                    )
                )
            if not isinstance(arguments, dict):
                return Err(
                    GenerationError(
                        GenerationErrorKind.NO_STRUCTURED_OUTPUT,
                        "function call arguments were not an object",
                    )
                )
            return Ok(arguments)

        return Err(
            GenerationError(
                GenerationErrorKind.NO_STRUCTURED_OUTPUT,
                "model answered with text instead of the required function call",
            )
        )

    async def complete(
        self, *, instructions: str, prompt: str
    ) -> Result[str, GenerationError]:
        """Call the API and return its plain output text."""
        response = await self._create(self._base_payload(instructions, prompt))
        if isinstance(response, Err):
            return response
        output_text = getattr(response.value, "output_text", None)
        if not output_text:
            return Err(
                GenerationError(
                    GenerationErrorKind.SERVICE_ERROR, "OpenAI returned an empty response"
                )
            )
        return Ok(output_text)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()

    def _base_payload(self, instructions: str, prompt: str) -> dict[str, object]:
        request_payload: dict[str, object] = {
            "model": self.model,
            "instructions": instructions,
            "input": prompt,
            "store": self.store,
        }
        if self.temperature is not None:
            request_payload["temperature"] = self.temperature
        return request_payload

    async def _create(
        self, request_payload: dict[str, object]
    ) -> Result[object, GenerationError]:
        try:
            return Ok(await self.client.responses.create(**request_payload))
        except APITimeoutError as exc:
            _logger.warning("OpenAI request timed out: %s", exc)
            return Err(GenerationError(GenerationErrorKind.TIMEOUT, str(exc)))
        except APIError as exc:
            _logger.warning("OpenAI request failed: %s", exc)
            return Err(GenerationError(GenerationErrorKind.SERVICE_ERROR, str(exc)))
