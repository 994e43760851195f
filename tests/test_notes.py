"""Tests for notes part synthesis."""

import lxml.etree as ET

from services.deck.notes import build_notes_part
from services.deck.ooxml import NS, escape_xml


def _body_texts(part: bytes) -> list[str]:
    root = ET.fromstring(part)
    body = root.find(".//p:sp/p:nvSpPr/p:nvPr/p:ph[@type='body']/../../..", NS)
    return [t.text for t in body.iter(f"{{{NS['a']}}}t")]


def test_notes_part_is_well_formed_with_two_placeholders() -> None:
    part = build_notes_part("Goedemorgen allemaal", 1)

    root = ET.fromstring(part)
    placeholders = root.findall(".//p:ph", NS)

    assert root.tag == f"{{{NS['p']}}}notes"
    assert [ph.get("type") for ph in placeholders] == ["sldImg", "body"]
    assert placeholders[1].get("idx") == "1"
    assert _body_texts(part) == ["Goedemorgen allemaal"]


def test_script_is_escaped() -> None:
    script = 'Tom & Jerry <zeggen> "hallo" & \'dag\''

    part = build_notes_part(script, 2)

    assert b"Tom &amp; Jerry &lt;zeggen&gt;" in part
    assert _body_texts(part) == [script]


def test_escaping_does_not_double_escape() -> None:
    assert escape_xml("&lt;") == "&amp;lt;"
    assert escape_xml("a & b < c") == "a &amp; b &lt; c"


def test_control_characters_are_removed() -> None:
    part = build_notes_part("Regel\x00een\x0btwee", 1)

    assert _body_texts(part) == ["Regeleentwee"]


def test_noncharacters_and_lone_surrogates_are_removed() -> None:
    part = build_notes_part("Een\uffffTwee\ud800Drie\ufffe", 2)

    assert _body_texts(part) == ["EenTweeDrie"]


def test_language_is_written_on_the_run() -> None:
    part = build_notes_part("Hello", 1, language="en-US")

    r_pr = ET.fromstring(part).find(".//a:rPr", NS)

    assert r_pr.get("lang") == "en-US"


def test_audio_banner_is_optional() -> None:
    plain = build_notes_part("Script", 3, has_audio=True, audio_banner=False)
    bannered = build_notes_part("Script", 3, has_audio=True, audio_banner=True)
    no_audio = build_notes_part("Script", 3, has_audio=False, audio_banner=True)

    assert _body_texts(plain) == ["Script"]
    assert _body_texts(bannered) == ["[Audio available for slide 3]", "Script"]
    assert _body_texts(no_audio) == ["Script"]


def test_empty_script_still_produces_a_body_run() -> None:
    part = build_notes_part("", 1)

    assert _body_texts(part) == [None]
