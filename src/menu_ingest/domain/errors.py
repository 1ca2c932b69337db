"""Failure taxonomy for the ingestion pipeline."""

from dataclasses import dataclass
from enum import Enum


class GenerationErrorKind(Enum):
    """Ways a call to the generation service can fail."""

    NO_STRUCTURED_OUTPUT = "no_structured_output"
    SERVICE_ERROR = "service_error"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class GenerationError:
    """Typed failure returned by a generation port."""

    kind: GenerationErrorKind
    message: str

    @property
    def retryable(self) -> bool:
        """Transient failures may be retried by the caller."""
        return self.kind in {
            GenerationErrorKind.SERVICE_ERROR,
            GenerationErrorKind.TIMEOUT,
        }

    def describe(self) -> str:
        labels = {
            GenerationErrorKind.NO_STRUCTURED_OUTPUT: "no structured output",
            GenerationErrorKind.SERVICE_ERROR: "service error",
            GenerationErrorKind.TIMEOUT: "timeout",
        }
        return f"{labels[self.kind]}: {self.message}"


class PipelineErrorKind(Enum):
    """Pipeline-level failure categories."""

    FORMAT_DETECTION = "format_detection"
    STRUCTURED_PARSE = "structured_parse"
    EXTRACTION_TIMEOUT = "extraction_timeout"
    EXTRACTION_SERVICE_ERROR = "extraction_service_error"
    NO_STRUCTURED_OUTPUT = "no_structured_output"
    ENHANCEMENT_VALIDATION = "enhancement_validation"
    TOTAL_EXTRACTION_FAILURE = "total_extraction_failure"


@dataclass(frozen=True)
class PipelineError:
    """Fatal failure that ends a pipeline run with success=false."""

    kind: PipelineErrorKind
    message: str
    details: tuple[str, ...] = ()

    def messages(self) -> list[str]:
        """Return the error followed by any supporting details."""
        return [self.message, *self.details]


def pipeline_kind_for(error: GenerationError) -> PipelineErrorKind:
    """Map a generation failure onto the pipeline taxonomy."""
    if error.kind is GenerationErrorKind.TIMEOUT:
        return PipelineErrorKind.EXTRACTION_TIMEOUT
    if error.kind is GenerationErrorKind.SERVICE_ERROR:
        return PipelineErrorKind.EXTRACTION_SERVICE_ERROR
    return PipelineErrorKind.NO_STRUCTURED_OUTPUT
