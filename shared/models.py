from pydantic import BaseModel, Field

from shared.enums import ExtractionMethod, ScriptLength, ScriptStyle, SlideState
from shared.response_models import ErrorResponse, HealthResponse


# Package structure
class SlideReference(BaseModel):
    """A slide markup part and the per-slide relationship part derived from it."""

    number: int = Field(..., ge=0, description="Slide number parsed from the part name")
    path: str = Field(..., description="Slide markup part path, e.g. ppt/slides/slide3.xml")
    rels_path: str = Field(..., description="Slide relationship part path (may not exist yet)")


# Slide content and scripts
class SlideContent(BaseModel):
    slide_number: int = Field(..., ge=1, description="1-based slide number")
    title: str = Field(default="", description="Slide title (truncated to 100 characters)")
    content: str = Field(default="", description="Body text of the slide")


class ScriptEntry(BaseModel):
    slide_number: int = Field(..., ge=1)
    script: str = Field(default="", description="Spoken script for the slide")
    has_audio: bool = Field(default=False, description="Whether audio bytes were supplied")


class SlideOutcome(BaseModel):
    slide_number: int
    state: SlideState = SlideState.NO_NOTES
    has_audio: bool = False
    detail: str | None = None


class PipelineResult(BaseModel):
    """Summary of one mutation pipeline run."""

    total_slides: int = 0
    notes_written: int = 0
    audio_embedded: int = 0
    skipped_slides: list[int] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    slides: list[SlideOutcome] = Field(default_factory=list)


# Request/Response Models
class ExtractSlidesResponse(BaseModel):
    success: bool = True
    slides: list[SlideContent]
    total_slides: int
    extraction_method: ExtractionMethod = ExtractionMethod.STANDARD


class ScriptGenerationRequest(BaseModel):
    slides: list[SlideContent] = Field(..., min_length=1, description="Slides to write scripts for")
    style: ScriptStyle = Field(default=ScriptStyle.PROFESSIONAL)
    length: ScriptLength = Field(default=ScriptLength.NORMAL)
    use_informal: bool = Field(default=False, description="Address the audience informally")


class ScriptMetadata(BaseModel):
    total_slides: int
    style: ScriptStyle
    length: ScriptLength
    use_informal: bool
    estimated_time_per_slide: str
    words_per_slide: list[int]


class ScriptGenerationResponse(BaseModel):
    success: bool = True
    scripts: list[str]
    full_script: str
    metadata: ScriptMetadata | None = None
    converted: bool = False


class InformalConversionRequest(BaseModel):
    slides: list[ScriptEntry] = Field(..., min_length=1)


__all__ = [
    "ErrorResponse",
    "ExtractSlidesResponse",
    "HealthResponse",
    "InformalConversionRequest",
    "PipelineResult",
    "ScriptEntry",
    "ScriptGenerationRequest",
    "ScriptGenerationResponse",
    "ScriptMetadata",
    "SlideContent",
    "SlideOutcome",
    "SlideReference",
]
