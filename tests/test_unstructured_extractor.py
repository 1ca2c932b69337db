"""Tests for chunked AI extraction of unstructured menus."""

import asyncio

from menu_ingest.domain.errors import PipelineErrorKind
from menu_ingest.domain.results import Err, Ok
from menu_ingest.services.chunker import TextChunker
from menu_ingest.services.extraction import AIExtractionClient
from menu_ingest.services.unstructured import UnstructuredExtractor, clean_extracted_text
from tests.conftest import (
    RecordingSleep,
    ScriptedGenerationClient,
    extraction_payload,
    service_error,
)

TWO_SECTIONS = "STARTERS\nSoup of the day 6\nBruschetta 7\n\nMAINS\nRibeye 32\nRisotto 18\n"


def _extractor(
    port: ScriptedGenerationClient, sleep: RecordingSleep, max_tokens: int = 8
) -> UnstructuredExtractor:
    return UnstructuredExtractor(
        extraction_client=AIExtractionClient(port=port, sleep=sleep),
        chunker=TextChunker(max_tokens=max_tokens, chars_per_token=4),
        chunk_delay_seconds=1.0,
        sleep=sleep,
    )


def test_clean_extracted_text() -> None:
    raw = "  MENU\r\n\r\n\r\n\r\nSoup\t\t 6\x00 \fMains  \n"

    assert clean_extracted_text(raw) == "MENU\n\nSoup 6\n\nMains"


def test_merges_chunks_in_order(generation_client: ScriptedGenerationClient) -> None:
    generation_client.structured.extend(
        [
            extraction_payload(
                {"name": "Soup of the day", "price": 6, "category": "Starters"},
                {"name": "Bruschetta", "price": 7, "category": "Starters"},
                menu_name="Trattoria",
            ),
            extraction_payload(
                {"name": "Ribeye", "price": 32, "itemType": "food", "confidence": 80},
                {"name": "Risotto", "price": 18},
                menu_name="Ignored",
            ),
        ]
    )
    sleep = RecordingSleep()

    result = asyncio.run(_extractor(generation_client, sleep, max_tokens=10).extract(TWO_SECTIONS))

    assert isinstance(result, Ok)
    draft = result.value
    assert draft.menu_name == "Trattoria"
    assert [item.name for item in draft.items] == [
        "Soup of the day",
        "Bruschetta",
        "Ribeye",
        "Risotto",
    ]
    assert draft.items[2].raw_type == "food"
    assert draft.items[2].source_confidence == 80
    assert draft.processing_notes == []
    assert len(generation_client.generate_calls) == 2
    assert sleep.delays == [1.0]


def test_failed_chunk_is_skipped_with_note(generation_client: ScriptedGenerationClient) -> None:
    generation_client.structured.extend(
        [
            service_error(),
            service_error(),
            extraction_payload({"name": "Ribeye", "price": 32}),
        ]
    )

    result = asyncio.run(
        _extractor(generation_client, RecordingSleep(), max_tokens=10).extract(TWO_SECTIONS)
    )

    assert isinstance(result, Ok)
    assert [item.name for item in result.value.items] == ["Ribeye"]
    assert result.value.processing_notes == [
        "Chunk 1/2 skipped: service error: upstream unavailable"
    ]


def test_drops_items_repeated_from_an_earlier_chunk(
    generation_client: ScriptedGenerationClient,
) -> None:
    house_glass = {"name": "House Wine", "price": 8, "itemType": "wine"}
    generation_client.structured.extend(
        [
            extraction_payload(house_glass, {"name": "House Wine", "price": 30}),
            extraction_payload(house_glass, {"name": "Ribeye", "price": 32}),
        ]
    )

    result = asyncio.run(
        _extractor(generation_client, RecordingSleep(), max_tokens=10).extract(TWO_SECTIONS)
    )

    assert isinstance(result, Ok)
    assert [(item.name, item.price) for item in result.value.items] == [
        ("House Wine", 8.0),
        ("House Wine", 30.0),
        ("Ribeye", 32.0),
    ]
    assert result.value.processing_notes == [
        "Chunk 2/2: dropped 1 item(s) already extracted from an earlier chunk"
    ]


def test_no_items_is_total_failure(generation_client: ScriptedGenerationClient) -> None:
    generation_client.structured.append(extraction_payload())

    result = asyncio.run(
        _extractor(generation_client, RecordingSleep(), max_tokens=100).extract(TWO_SECTIONS)
    )

    assert isinstance(result, Err)
    assert result.error.kind is PipelineErrorKind.TOTAL_EXTRACTION_FAILURE
    assert len(generation_client.generate_calls) == 1


def test_cancel_stops_before_next_chunk(generation_client: ScriptedGenerationClient) -> None:
    cancel = asyncio.Event()
    generation_client.structured.append(extraction_payload({"name": "Soup", "price": 6}))

    async def cancelling_sleep(seconds: float) -> None:
        cancel.set()

    extractor = UnstructuredExtractor(
        extraction_client=AIExtractionClient(port=generation_client, sleep=cancelling_sleep),
        chunker=TextChunker(max_tokens=10, chars_per_token=4),
        sleep=cancelling_sleep,
    )

    result = asyncio.run(extractor.extract(TWO_SECTIONS, cancel=cancel))

    assert isinstance(result, Ok)
    assert [item.name for item in result.value.items] == ["Soup"]
    assert result.value.processing_notes == [
        "Extraction cancelled: 1 of 2 chunks not processed"
    ]
    assert len(generation_client.generate_calls) == 1
