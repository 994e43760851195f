"""Attach an audio marker and an autoplay timing block to slide markup."""

from __future__ import annotations

import lxml.etree as ET

from shared.exceptions import SlidePartAbsent
from shared.utils import config as service_config, setup_logging

from .archive import ArchiveStore
from .locator import slide_path
from .ooxml import NS, NS_A, NS_P, NS_P14, NS_R, PRESENTATION_PATH, ReservedIds, parse_xml, qn, serialize_xml

logger = setup_logging("slide-patcher")

MARKER_SIZE = 609600  # 0.667 inch
MARKER_MARGIN = 152400
DEFAULT_SLIDE_SIZE = (9144000, 6858000)

_FRAGMENT_NS = f'xmlns:a="{NS_A}" xmlns:p="{NS_P}" xmlns:r="{NS_R}" xmlns:p14="{NS_P14}"'

MARKER_TEMPLATE = """<p:pic {ns}>
  <p:nvPicPr>
    <p:cNvPr id="{shape_id}" name="Audio {slide_number}">
      <a:hlinkClick r:id="" action="ppaction://media"/>
    </p:cNvPr>
    <p:cNvPicPr>
      <a:picLocks noChangeAspect="1"/>
    </p:cNvPicPr>
    <p:nvPr>
      <a:audioFile r:link="{audio_rel}"/>
      <p:extLst>
        <p:ext uri="{{DAA4B4D4-6D71-4841-9C94-3DE7FCFB9230}}">
          <p14:media r:embed="{media_rel}"/>
        </p:ext>
      </p:extLst>
    </p:nvPr>
  </p:nvPicPr>
  <p:blipFill>
    <a:blip r:embed="{image_rel}"/>
    <a:stretch>
      <a:fillRect/>
    </a:stretch>
  </p:blipFill>
  <p:spPr>
    <a:xfrm>
      <a:off x="{x}" y="{y}"/>
      <a:ext cx="{size}" cy="{size}"/>
    </a:xfrm>
    <a:prstGeom prst="rect">
      <a:avLst/>
    </a:prstGeom>
  </p:spPr>
</p:pic>"""

TIMING_TEMPLATE = """<p:timing {ns}>
  <p:tnLst>
    <p:par>
      <p:cTn id="1" dur="indefinite" restart="never" nodeType="tmRoot">
        <p:childTnLst>
          <p:seq concurrent="1" nextAc="seek">
            <p:cTn id="2" dur="indefinite" nodeType="mainSeq">
              <p:childTnLst>
                <p:par>
                  <p:cTn id="3" fill="hold">
                    <p:stCondLst>
                      <p:cond evt="onBegin" delay="{delay}"/>
                    </p:stCondLst>
                    <p:childTnLst>
                      <p:par>
                        <p:cTn id="4" fill="hold">
                          <p:childTnLst>
                            <p:audio>
                              <p:cMediaNode vol="{volume}">
                                <p:cTn id="5" fill="hold" dur="indefinite">
                                  <p:stCondLst>
                                    <p:cond evt="onBegin" delay="0"/>
                                  </p:stCondLst>
                                </p:cTn>
                                <p:tgtEl>
                                  <p:spTgt spid="{shape_id}"/>
                                </p:tgtEl>
                              </p:cMediaNode>
                            </p:audio>
                          </p:childTnLst>
                        </p:cTn>
                      </p:par>
                    </p:childTnLst>
                  </p:cTn>
                </p:par>
              </p:childTnLst>
            </p:cTn>
          </p:seq>
        </p:childTnLst>
      </p:cTn>
    </p:par>
  </p:tnLst>
</p:timing>"""


def _fragment(template: str, **values: object) -> ET._Element:
    parser = ET.XMLParser(remove_blank_text=True)
    return ET.fromstring(template.format(ns=_FRAGMENT_NS, **values).encode("utf-8"), parser)


def has_marker(root: ET._Element, slide_number: int) -> bool:
    shape_id = str(ReservedIds.marker_shape_id(slide_number))
    return any(el.get("id") == shape_id for el in root.iter(qn("p:cNvPr")))


def _retarget_marker(
    root: ET._Element,
    slide_number: int,
    audio_rel_id: str | None,
    media_rel_id: str | None,
    image_rel_id: str | None,
) -> None:
    """Point an existing marker picture at the given relationship ids."""
    shape_id = str(ReservedIds.marker_shape_id(slide_number))
    for pic in root.iter(qn("p:pic")):
        c_nv_pr = pic.find("p:nvPicPr/p:cNvPr", NS)
        if c_nv_pr is None or c_nv_pr.get("id") != shape_id:
            continue
        targets = (
            ("p:nvPicPr/p:nvPr/a:audioFile", "r:link", audio_rel_id),
            (".//p14:media", "r:embed", media_rel_id),
            ("p:blipFill/a:blip", "r:embed", image_rel_id),
        )
        for path, attribute, rel_id in targets:
            element = pic.find(path, NS)
            if element is not None and rel_id:
                element.set(qn(attribute), rel_id)
        return


def has_timing(root: ET._Element) -> bool:
    return root.find("p:timing", NS) is not None


def patch_markup(
    markup: bytes | str,
    slide_number: int,
    audio_rel_id: str | None = None,
    media_rel_id: str | None = None,
    image_rel_id: str | None = None,
    marker_offset: tuple[int, int] | None = None,
    delay_ms: int = 1000,
    volume: int = 80000,
) -> bytes:
    """Return ``markup`` with the audio marker and timing block added.

    Both insertions are guarded: a marker with the reserved shape id is not
    added twice, only repointed at the given relationship ids, and the timing
    block is skipped when the slide already has one.

    Raises:
        lxml.etree.XMLSyntaxError: if the slide markup is malformed.
        ValueError: if the slide has no shape tree.
    """
    root = parse_xml(markup)
    sp_tree = root.find("p:cSld/p:spTree", NS)
    if sp_tree is None:
        raise ValueError(f"Slide {slide_number} has no shape tree")

    shape_id = ReservedIds.marker_shape_id(slide_number)
    if has_marker(root, slide_number):
        _retarget_marker(root, slide_number, audio_rel_id, media_rel_id, image_rel_id)
    else:
        x, y = marker_offset or (
            DEFAULT_SLIDE_SIZE[0] - MARKER_SIZE - MARKER_MARGIN,
            DEFAULT_SLIDE_SIZE[1] - MARKER_SIZE - MARKER_MARGIN,
        )
        sp_tree.append(
            _fragment(
                MARKER_TEMPLATE,
                shape_id=shape_id,
                slide_number=slide_number,
                audio_rel=audio_rel_id or ReservedIds.slide_audio_rel(slide_number),
                media_rel=media_rel_id or ReservedIds.slide_media_rel(slide_number),
                image_rel=image_rel_id or ReservedIds.marker_image_rel(slide_number),
                x=x,
                y=y,
                size=MARKER_SIZE,
            )
        )

    if not has_timing(root):
        timing = _fragment(TIMING_TEMPLATE, shape_id=shape_id, delay=delay_ms, volume=volume)
        # p:extLst must stay the last child of p:sld
        ext_lst = root.find("p:extLst", NS)
        if ext_lst is not None:
            ext_lst.addprevious(timing)
        else:
            root.append(timing)

    return serialize_xml(root)


class SlidePatcher:
    """Apply :func:`patch_markup` to slide parts inside an archive."""

    def __init__(self, archive: ArchiveStore) -> None:
        self.archive = archive
        self.delay_ms = int(service_config.get_pipeline_value("media.audio_delay_ms", 1000))
        self.volume = int(service_config.get_pipeline_value("media.audio_volume", 80000))
        self._marker_offset: tuple[int, int] | None = None

    def marker_offset(self) -> tuple[int, int]:
        """Bottom-right corner of the slide, from ``p:sldSz`` when the deck declares it."""
        if self._marker_offset is not None:
            return self._marker_offset
        width, height = DEFAULT_SLIDE_SIZE
        presentation = self.archive.get(PRESENTATION_PATH)
        if presentation is not None:
            try:
                size = parse_xml(presentation).find("p:sldSz", NS)
            except ET.XMLSyntaxError:
                size = None
            if size is not None:
                width = int(size.get("cx", width))
                height = int(size.get("cy", height))
        self._marker_offset = (width - MARKER_SIZE - MARKER_MARGIN, height - MARKER_SIZE - MARKER_MARGIN)
        return self._marker_offset

    def patch(
        self,
        slide_number: int,
        audio_rel_id: str | None = None,
        media_rel_id: str | None = None,
        image_rel_id: str | None = None,
    ) -> bool:
        """Patch one slide in place.

        Returns False (and logs) when the slide part is missing or cannot be
        patched; processing of other slides is not affected.
        """
        path = slide_path(slide_number)
        markup = self.archive.get(path)
        if markup is None:
            logger.warning("%s; skipping audio marker", SlidePartAbsent(slide_number, path))
            return False
        try:
            patched = patch_markup(
                markup,
                slide_number,
                audio_rel_id=audio_rel_id,
                media_rel_id=media_rel_id,
                image_rel_id=image_rel_id,
                marker_offset=self.marker_offset(),
                delay_ms=self.delay_ms,
                volume=self.volume,
            )
        except (ET.XMLSyntaxError, ValueError) as exc:
            logger.warning("Could not patch slide %s: %s", slide_number, exc)
            return False
        self.archive.put(path, patched)
        logger.info("Added audio controls to slide %s", slide_number)
        return True
