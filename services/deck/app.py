"""FastAPI app for deck text extraction and notes/audio write-back."""

import asyncio
import json
from datetime import datetime, timezone

from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import Response

from services.deck.pipeline import DeckPipeline
from services.slide_analysis.service import load_slide_analyzer
from shared.exceptions import CorruptArchive, MissingRequiredInput, SerializationFailure
from shared.models import ExtractSlidesResponse, HealthResponse
from shared.utils import config, is_pptx_filename, output_filename, setup_logging

logger = setup_logging("deck-api")

PPTX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.presentationml.presentation"

app = FastAPI(
    title="Deck Service",
    description="Extract slide text and write speaker notes and narration audio into decks",
    version="1.0.0",
)

pipeline = DeckPipeline(analyzer=load_slide_analyzer())


async def _read_deck(file: UploadFile) -> bytes:
    if not is_pptx_filename(file.filename):
        raise HTTPException(status_code=400, detail="Only .pptx files are supported")
    data = await file.read()
    if not data:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")
    limit = int(config.get("max_upload_mb", 100)) * 1024 * 1024
    if len(data) > limit:
        raise HTTPException(status_code=413, detail="Uploaded file is too large")
    return data


def _parse_slides(raw: str) -> list[dict]:
    try:
        slides = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid slides JSON: {exc.msg}") from exc
    if not isinstance(slides, list) or not all(isinstance(item, dict) for item in slides):
        raise HTTPException(status_code=400, detail="Slides must be a JSON list of objects")
    return slides


@app.post("/extract-slides", response_model=ExtractSlidesResponse)
async def extract_slides(file: UploadFile = File(...)) -> ExtractSlidesResponse:
    """Return title and body text for every slide in the uploaded deck."""
    deck = await _read_deck(file)
    logger.info("Extracting slides from %s (%d bytes)", file.filename, len(deck))
    try:
        slides, method = await pipeline.extract_slides_with_fallback(deck)
    except (CorruptArchive, MissingRequiredInput) as exc:
        logger.error("Slide extraction failed: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    if not slides:
        raise HTTPException(
            status_code=400,
            detail="No slide text could be extracted. Check that the file is a valid presentation with text.",
        )
    return ExtractSlidesResponse(slides=slides, total_slides=len(slides), extraction_method=method)


@app.post("/add-notes")
async def add_notes(
    request: Request,
    file: UploadFile = File(...),
    slides: str = Form(...),
) -> Response:
    """Write one notes part per script and embed ``audio_<index>`` uploads.

    Returns the updated deck as an attachment.
    """
    deck = await _read_deck(file)
    scripts = _parse_slides(slides)

    form = await request.form()
    audio: list[bytes | None] = []
    for index in range(len(scripts)):
        part = form.get(f"audio_{index}")
        audio.append(await part.read() if hasattr(part, "read") else None)
    logger.info(
        "Adding notes for %d slides (%d with audio) to %s",
        len(scripts),
        sum(1 for clip in audio if clip),
        file.filename,
    )

    try:
        output, result = await asyncio.to_thread(pipeline.add_scripts_and_audio, deck, scripts, audio)
    except (CorruptArchive, MissingRequiredInput) as exc:
        logger.error("Adding notes failed: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid slide entry: {exc}") from exc
    except SerializationFailure as exc:
        logger.error("Writing updated deck failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    filename = output_filename(file.filename, "with_notes")
    return Response(
        content=output,
        media_type=PPTX_MEDIA_TYPE,
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "X-Notes-Written": str(result.notes_written),
            "X-Audio-Embedded": str(result.audio_embedded),
            "X-Slides-Skipped": ",".join(str(number) for number in result.skipped_slides),
        },
    )


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return HealthResponse(status="healthy", timestamp=datetime.now(timezone.utc).isoformat(), service="deck")
