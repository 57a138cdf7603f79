"""Tests for cross-reference extraction and resolution."""

from __future__ import annotations

from doccorpus.builder import build_corpus
from doccorpus.models import CrossReference
from doccorpus.parsing.references import extract_references, resolve_references


def test_extracts_internal_external_and_anchor_links_in_order() -> None:
    text = (
        "The standard [[zlib.options `options`]] object. "
        "Returns a new [Gzip](#zlib.Gzip) object, see the "
        "[zlib documentation](http://zlib.net/manual.html#Constants) "
        "and <http://zlib.net/manual.html#Advanced>."
    )
    references = extract_references(text, "zlib.createGzip")

    assert references == [
        CrossReference(source="zlib.createGzip", target="zlib.options", label="`options`"),
        CrossReference(source="zlib.createGzip", target="zlib.Gzip", label="Gzip"),
        CrossReference(
            source="zlib.createGzip",
            target="http://zlib.net/manual.html#Constants",
            label="zlib documentation",
            external=True,
        ),
        CrossReference(
            source="zlib.createGzip",
            target="http://zlib.net/manual.html#Advanced",
            label="http://zlib.net/manual.html#Advanced",
            external=True,
        ),
    ]


def test_internal_reference_without_label_uses_target() -> None:
    references = extract_references("See [[tty.isatty]].", "tty")
    assert references == [CrossReference(source="tty", target="tty.isatty", label="tty.isatty")]


def test_extraction_does_not_touch_text() -> None:
    text = "Returns a new [[Inflate](#zlib.Inflate)  object."
    before = str(text)
    references = extract_references(text, "zlib.createInflate")

    assert text == before
    assert [reference.target for reference in references] == ["zlib.Inflate"]


def test_resolution_flags_dangling_internal_references_only() -> None:
    result = build_corpus(
        {
            "tty.js": """
/**
 * class tty
 *
 * See [[tty.isatty]], [[tty.missing]], [[tty#isatty]] and [Node](http://nodejs.org).
 **/

/**
 * tty.isatty(fd) -> Boolean
 **/
""",
        }
    )
    corpus = result.corpus
    tty = corpus.lookup("tty")
    assert tty is not None

    resolved = resolve_references(tty.references, corpus)
    flags = {reference.target: reference.dangling for reference in resolved}
    assert flags == {
        "tty.isatty": False,
        "tty.missing": True,
        "tty#isatty": False,
        "http://nodejs.org": False,
    }
    assert all(reference.dangling is False for reference in tty.references)
