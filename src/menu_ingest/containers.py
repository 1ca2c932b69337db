"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from menu_ingest.adapters.docx_text_extractor import DocxTextExtractor
from menu_ingest.adapters.openai_generation_client import OpenAIGenerationClient
from menu_ingest.adapters.openpyxl_spreadsheet_reader import OpenpyxlSpreadsheetReader
from menu_ingest.adapters.pdfplumber_text_extractor import PdfplumberTextExtractor
from menu_ingest.config import Settings
from menu_ingest.services.beverage_enhancer import BeverageEnhancer
from menu_ingest.services.chunker import TextChunker
from menu_ingest.services.classifier import ItemClassifier
from menu_ingest.services.dispatcher import FormatDispatcher
from menu_ingest.services.enhancement import EnhancementOrchestrator
from menu_ingest.services.extraction import AIExtractionClient
from menu_ingest.services.food_enhancer import FoodEnhancer
from menu_ingest.services.generation import StructuredGenerationPort
from menu_ingest.services.pipeline import MenuIngestionPipeline
from menu_ingest.services.unstructured import UnstructuredExtractor
from menu_ingest.services.wine_enhancer import WineEnhancer


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    generation_client: StructuredGenerationPort
    pipeline: MenuIngestionPipeline
    close_resources: Callable[[], Awaitable[None]]


def build_pipeline(
    settings: Settings, generation_client: StructuredGenerationPort
) -> MenuIngestionPipeline:
    """Wire every pipeline stage around one generation client."""
    extraction_client = AIExtractionClient(
        port=generation_client,
        retry_delay_seconds=settings.extraction_retry_delay_seconds,
    )
    unstructured_extractor = UnstructuredExtractor(
        extraction_client=extraction_client,
        chunker=TextChunker(
            max_tokens=settings.chunk_max_tokens,
            chars_per_token=settings.chars_per_token,
        ),
        chunk_delay_seconds=settings.chunk_delay_seconds,
    )
    delay = settings.enhancement_delay_seconds
    orchestrator = EnhancementOrchestrator(
        enhancers=[
            FoodEnhancer(port=generation_client, delay_seconds=delay),
            BeverageEnhancer(port=generation_client, delay_seconds=delay),
            WineEnhancer(port=generation_client, delay_seconds=delay),
        ]
    )
    return MenuIngestionPipeline(
        dispatcher=FormatDispatcher(
            pdf_extractor=PdfplumberTextExtractor(),
            docx_extractor=DocxTextExtractor(),
            spreadsheet_reader=OpenpyxlSpreadsheetReader(),
            min_text_chars=settings.min_text_chars,
        ),
        unstructured_extractor=unstructured_extractor,
        orchestrator=orchestrator,
        classifier=ItemClassifier(),
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    generation_client = OpenAIGenerationClient.create(
        resolved_settings.openai_api_key,
        resolved_settings.openai_model,
        base_url=resolved_settings.openai_base_url,
        timeout_seconds=resolved_settings.request_timeout_seconds,
        temperature=resolved_settings.openai_temperature,
    )

    async def close_resources() -> None:
        await generation_client.close()

    return AppContainer(
        settings=resolved_settings,
        generation_client=generation_client,
        pipeline=build_pipeline(resolved_settings, generation_client),
        close_resources=close_resources,
    )
