import copy
import io
import sys
import zipfile
from pathlib import Path
from typing import Callable, Generator

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from shared.utils import config as service_config

NS_DECL = (
    'xmlns:a="http://schemas.openxmlformats.org/drawingml/2006/main" '
    'xmlns:r="http://schemas.openxmlformats.org/officeDocument/2006/relationships" '
    'xmlns:p="http://schemas.openxmlformats.org/presentationml/2006/main"'
)

CONTENT_TYPES = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">
  <Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>
  <Default Extension="xml" ContentType="application/xml"/>
  <Override PartName="/ppt/presentation.xml" ContentType="application/vnd.openxmlformats-officedocument.presentationml.presentation.main+xml"/>
{overrides}
</Types>"""

SLIDE_OVERRIDE = (
    '  <Override PartName="/ppt/slides/slide{n}.xml" '
    'ContentType="application/vnd.openxmlformats-officedocument.presentationml.slide+xml"/>'
)

PRESENTATION = f"""<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<p:presentation {NS_DECL}>
  <p:sldIdLst>{{slide_ids}}</p:sldIdLst>
  <p:sldSz cx="12192000" cy="6858000"/>
  <p:notesSz cx="6858000" cy="9144000"/>
</p:presentation>"""

PRESENTATION_RELS = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
  <Relationship Id="rId1" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/slideMaster" Target="slideMasters/slideMaster1.xml"/>
{slide_rels}
</Relationships>"""

SLIDE_RELS = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
  <Relationship Id="rId1" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/slideLayout" Target="../slideLayouts/slideLayout1.xml"/>
</Relationships>"""

SHAPE = """      <p:sp>
        <p:nvSpPr>
          <p:cNvPr id="{shape_id}" name="Shape {shape_id}"/>
          <p:cNvSpPr/>
          <p:nvPr>{placeholder}</p:nvPr>
        </p:nvSpPr>
        <p:spPr/>
        <p:txBody>
          <a:bodyPr/>
{paragraphs}
        </p:txBody>
      </p:sp>"""

PARAGRAPH = "          <a:p><a:r><a:t>{text}</a:t></a:r></a:p>"


def make_slide(
    title: str | None = None,
    bodies: list[str] | None = None,
    title_type: str = "title",
    ext_lst: bool = False,
) -> str:
    """Slide markup with an optional title placeholder and one free shape per body text."""
    shapes = []
    shape_id = 2
    if title is not None:
        shapes.append(
            SHAPE.format(
                shape_id=shape_id,
                placeholder=f'<p:ph type="{title_type}"/>',
                paragraphs=PARAGRAPH.format(text=title),
            )
        )
        shape_id += 1
    for body in bodies or []:
        shapes.append(SHAPE.format(shape_id=shape_id, placeholder="", paragraphs=PARAGRAPH.format(text=body)))
        shape_id += 1
    extension = '<p:extLst><p:ext uri="{BB962C8B-B14F-4D97-AF65-F5344CB8AC3E}"/></p:extLst>' if ext_lst else ""
    return f"""<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<p:sld {NS_DECL}>
  <p:cSld>
    <p:spTree>
      <p:nvGrpSpPr>
        <p:cNvPr id="1" name=""/>
        <p:cNvGrpSpPr/>
        <p:nvPr/>
      </p:nvGrpSpPr>
      <p:grpSpPr/>
{chr(10).join(shapes)}
    </p:spTree>
  </p:cSld>
  <p:clrMapOvr><a:masterClrMapping/></p:clrMapOvr>
  {extension}
</p:sld>"""


def make_deck(
    slides: dict[int, str] | list[str],
    slide_rels: bool = True,
    notes_master: bool = False,
    omit: tuple[str, ...] = (),
    extra_parts: dict[str, bytes | str] | None = None,
) -> bytes:
    """Build a minimal deck container in memory.

    ``slides`` maps slide numbers to markup; a list is numbered from 1.
    Paths in ``omit`` are left out of the archive.
    """
    if isinstance(slides, list):
        slides = {index + 1: markup for index, markup in enumerate(slides)}
    numbers = sorted(slides)
    parts: dict[str, bytes | str] = {
        "[Content_Types].xml": CONTENT_TYPES.format(
            overrides="\n".join(SLIDE_OVERRIDE.format(n=n) for n in numbers)
        ),
        "ppt/presentation.xml": PRESENTATION.format(
            slide_ids="".join(f'<p:sldId id="{255 + n}" r:id="rId{n + 1}"/>' for n in numbers)
        ),
        "ppt/_rels/presentation.xml.rels": PRESENTATION_RELS.format(
            slide_rels="\n".join(
                f'  <Relationship Id="rId{n + 1}" '
                'Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/slide" '
                f'Target="slides/slide{n}.xml"/>'
                for n in numbers
            )
        ),
    }
    for number in numbers:
        parts[f"ppt/slides/slide{number}.xml"] = slides[number]
        if slide_rels:
            parts[f"ppt/slides/_rels/slide{number}.xml.rels"] = SLIDE_RELS
    if notes_master:
        parts["ppt/notesMasters/notesMaster1.xml"] = f'<p:notesMaster {NS_DECL}><p:cSld><p:spTree/></p:cSld></p:notesMaster>'
    parts.update(extra_parts or {})

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for name, data in parts.items():
            if name in omit:
                continue
            archive.writestr(name, data)
    return buffer.getvalue()


def read_deck(data: bytes) -> dict[str, bytes]:
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        return {name: archive.read(name) for name in archive.namelist()}


# Smallest valid RIFF/WAVE header followed by a few silent samples
WAV_BYTES = (
    b"RIFF" + (44).to_bytes(4, "little") + b"WAVE" + b"fmt " + (16).to_bytes(4, "little")
    + b"\x01\x00\x01\x00" + (8000).to_bytes(4, "little") + (8000).to_bytes(4, "little")
    + b"\x01\x00\x08\x00" + b"data" + (8).to_bytes(4, "little") + b"\x80" * 8
)


@pytest.fixture
def slide_factory() -> Callable[..., str]:
    return make_slide


@pytest.fixture
def deck_factory() -> Callable[..., bytes]:
    return make_deck


@pytest.fixture
def deck_reader() -> Callable[[bytes], dict[str, bytes]]:
    return read_deck


@pytest.fixture
def wav_bytes() -> bytes:
    return WAV_BYTES


@pytest.fixture
def three_slide_deck() -> bytes:
    return make_deck(
        [
            make_slide("Introductie", ["Welkom bij deze presentatie", "Vandaag bespreken we de planning"]),
            make_slide("Resultaten", ["De omzet steeg met twintig procent"]),
            make_slide("Afsluiting", ["Bedankt voor jullie aandacht"]),
        ]
    )


@pytest.fixture(autouse=True)
def restore_pipeline_config() -> Generator[None, None, None]:
    """Undo per-test pipeline configuration overrides."""
    original = copy.deepcopy(service_config.pipeline_config)
    try:
        yield
    finally:
        service_config.set_pipeline_config(original)
