"""Speaker-notes part synthesis."""

from __future__ import annotations

import re

from shared.utils import config as service_config

from .ooxml import NS_A, NS_P, NS_R, escape_xml

NOTES_TEMPLATE = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<p:notes xmlns:a="{ns_a}" xmlns:r="{ns_r}" xmlns:p="{ns_p}">
  <p:cSld>
    <p:spTree>
      <p:nvGrpSpPr>
        <p:cNvPr id="1" name=""/>
        <p:cNvGrpSpPr/>
        <p:nvPr/>
      </p:nvGrpSpPr>
      <p:grpSpPr>
        <a:xfrm>
          <a:off x="0" y="0"/>
          <a:ext cx="0" cy="0"/>
          <a:chOff x="0" y="0"/>
          <a:chExt cx="0" cy="0"/>
        </a:xfrm>
      </p:grpSpPr>
      <p:sp>
        <p:nvSpPr>
          <p:cNvPr id="2" name="Slide Image Placeholder 1"/>
          <p:cNvSpPr>
            <a:spLocks noGrp="1" noRot="1" noChangeAspect="1"/>
          </p:cNvSpPr>
          <p:nvPr>
            <p:ph type="sldImg"/>
          </p:nvPr>
        </p:nvSpPr>
        <p:spPr/>
      </p:sp>
      <p:sp>
        <p:nvSpPr>
          <p:cNvPr id="3" name="Notes Placeholder 2"/>
          <p:cNvSpPr>
            <a:spLocks noGrp="1"/>
          </p:cNvSpPr>
          <p:nvPr>
            <p:ph type="body" idx="1"/>
          </p:nvPr>
        </p:nvSpPr>
        <p:spPr/>
        <p:txBody>
          <a:bodyPr/>
          <a:lstStyle/>
{paragraphs}
        </p:txBody>
      </p:sp>
    </p:spTree>
  </p:cSld>
  <p:clrMapOvr>
    <a:masterClrMapping/>
  </p:clrMapOvr>
</p:notes>"""

PARAGRAPH_TEMPLATE = """          <a:p>
            <a:r>
              <a:rPr lang="{lang}" dirty="0"/>
              <a:t>{text}</a:t>
            </a:r>
          </a:p>"""

AUDIO_BANNER = "[Audio available for slide {slide_number}]"

# Characters outside the XML 1.0 Char production
_INVALID_XML_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def build_notes_part(
    script: str,
    slide_number: int,
    has_audio: bool = False,
    language: str | None = None,
    audio_banner: bool | None = None,
) -> bytes:
    """Render a standalone notes part holding ``script`` as a single run.

    The part replaces any existing notes part at the same path; it is never
    merged. When ``has_audio`` is set and the banner is enabled, a short
    audio notice is added as its own paragraph above the script.
    """
    lang = escape_xml(language or service_config.get("notes_language", "nl-NL"))
    if audio_banner is None:
        audio_banner = bool(service_config.get_pipeline_value("notes.audio_banner", False))

    paragraphs = []
    if has_audio and audio_banner:
        banner = AUDIO_BANNER.format(slide_number=slide_number)
        paragraphs.append(PARAGRAPH_TEMPLATE.format(lang=lang, text=escape_xml(banner)))
    text = _INVALID_XML_CHARS.sub("", script or "")
    paragraphs.append(PARAGRAPH_TEMPLATE.format(lang=lang, text=escape_xml(text)))

    xml = NOTES_TEMPLATE.format(
        ns_a=NS_A,
        ns_r=NS_R,
        ns_p=NS_P,
        paragraphs="\n".join(paragraphs),
    )
    return xml.encode("utf-8")
