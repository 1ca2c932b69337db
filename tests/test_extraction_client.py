"""Tests for the AI extraction client."""

import asyncio

from menu_ingest.domain.errors import GenerationError, GenerationErrorKind
from menu_ingest.domain.results import Err, Ok
from menu_ingest.services.extraction import (
    EXTRACTION_SCHEMA,
    EXTRACTION_SCHEMA_NAME,
    AIExtractionClient,
)
from tests.conftest import (
    RecordingSleep,
    ScriptedGenerationClient,
    extraction_payload,
    service_error,
)


def test_extract_returns_validated_items(generation_client: ScriptedGenerationClient) -> None:
    generation_client.structured.append(
        extraction_payload(
            {"name": "Margherita", "price": 11, "itemType": "food", "confidence": 92},
            {"name": "  ", "price": 3},
            menu_name="Pizzeria",
        )
    )
    client = AIExtractionClient(port=generation_client, sleep=RecordingSleep())

    result = asyncio.run(client.extract("MARGHERITA 11", label="chunk 1/1"))

    assert isinstance(result, Ok)
    assert result.value.menu_name == "Pizzeria"
    assert [item.name for item in result.value.items] == ["Margherita"]
    assert result.value.items[0].price == 11.0
    assert result.value.dropped_items == 1
    call = generation_client.generate_calls[0]
    assert call["schema_name"] == EXTRACTION_SCHEMA_NAME
    assert "MARGHERITA 11" in call["prompt"]


def test_extract_retries_once_on_service_error(
    generation_client: ScriptedGenerationClient,
) -> None:
    generation_client.structured.extend(
        [service_error(), extraction_payload({"name": "Fries"})]
    )
    sleep = RecordingSleep()
    client = AIExtractionClient(port=generation_client, retry_delay_seconds=2.0, sleep=sleep)

    result = asyncio.run(client.extract("FRIES"))

    assert isinstance(result, Ok)
    assert len(generation_client.generate_calls) == 2
    assert sleep.delays == [2.0]


def test_extract_gives_up_after_second_timeout(
    generation_client: ScriptedGenerationClient,
) -> None:
    timeout = Err(GenerationError(GenerationErrorKind.TIMEOUT, "read timed out"))
    generation_client.structured.extend([timeout, timeout])
    client = AIExtractionClient(port=generation_client, sleep=RecordingSleep())

    result = asyncio.run(client.extract("FRIES"))

    assert result == timeout
    assert len(generation_client.generate_calls) == 2


def test_extract_does_not_retry_missing_structured_output(
    generation_client: ScriptedGenerationClient,
) -> None:
    prose = Err(
        GenerationError(GenerationErrorKind.NO_STRUCTURED_OUTPUT, "model answered with text")
    )
    generation_client.structured.append(prose)
    client = AIExtractionClient(port=generation_client, sleep=RecordingSleep())

    result = asyncio.run(client.extract("FRIES"))

    assert result == prose
    assert len(generation_client.generate_calls) == 1


def test_extract_rejects_payload_without_items(
    generation_client: ScriptedGenerationClient,
) -> None:
    generation_client.structured.append(Ok({"menuName": "Cafe"}))
    client = AIExtractionClient(port=generation_client, sleep=RecordingSleep())

    result = asyncio.run(client.extract("COFFEE 3"))

    assert isinstance(result, Err)
    assert result.error.kind is GenerationErrorKind.NO_STRUCTURED_OUTPUT
    assert "items" in result.error.message


def test_extraction_schema_is_strict() -> None:
    item_schema = EXTRACTION_SCHEMA["properties"]["items"]["items"]

    assert EXTRACTION_SCHEMA["additionalProperties"] is False
    assert item_schema["additionalProperties"] is False
    assert set(item_schema["required"]) == set(item_schema["properties"])
