"""Tests for per-file entity tree assembly."""

from __future__ import annotations

from pathlib import Path

from doccorpus.assembler import assemble_file
from doccorpus.models import EntityKind, WarningKind


def test_reference_error_fixture(fixture_sources: Path) -> None:
    path = fixture_sources / "js-doc" / "Error" / "ReferenceError.js"
    result = assemble_file("js-doc/Error/ReferenceError.js", path.read_text(encoding="utf-8"))

    root = result.root
    assert result.warnings == []
    assert root.kind is EntityKind.CLASS
    assert root.fqn == "ReferenceError"
    assert root.section == "Errors"
    assert root.summary.startswith("A `ReferenceError` is thrown")

    (constructor,) = root.members
    assert constructor.kind is EntityKind.CONSTRUCTOR
    assert constructor.name == "ReferenceError"
    assert constructor.fqn == "new ReferenceError"
    assert constructor.parent == "ReferenceError"
    assert constructor.returns is None
    assert [(param.name, param.optional, param.type_hint) for param in constructor.parameters] == [
        ("message", True, "String"),
        ("fileName", True, "String"),
        ("lineNumber", True, "Number"),
    ]
    assert constructor.parameters[0].description == "Human-readable description of the error"
    assert constructor.summary == "Creates an error object."
    assert constructor.source is not None
    assert constructor.source.line == 9


def test_signature_without_class_gets_synthetic_module() -> None:
    result = assemble_file(
        "misc/window.js",
        "/**\n * tty.getWindowSize(fd) -> Array\n * - fd (Number): The file descriptor to check\n **/\n",
    )

    root = result.root
    assert root.kind is EntityKind.MODULE
    assert root.fqn == "tty"
    (method,) = root.members
    assert method.kind is EntityKind.METHOD
    assert method.name == "getWindowSize"
    assert method.fqn == "tty.getWindowSize"
    assert method.parent == "tty"
    assert method.returns == "Array"
    assert len(method.parameters) == 1
    assert method.parameters[0].name == "fd"
    assert method.parameters[0].optional is False
    assert method.parameters[0].type_hint == "Number"


def test_unqualified_signature_falls_back_to_file_stem() -> None:
    result = assemble_file("lib/helpers.js", "/**\n * noop() -> Void\n **/\n")

    assert result.root.fqn == "helpers"
    assert [member.fqn for member in result.root.members] == ["helpers.noop"]


def test_malformed_block_is_skipped_and_siblings_survive() -> None:
    text = """
/**
 * class tty
 **/

/**
 * tty.isatty(fd)) -> Boolean
 * - fd (Number): The file descriptor to check
 *
 * This block is broken.
 **/

/**
 * tty.setRawMode(mode) -> Void
 * - mode (Boolean): A boolean value indicating how to set the rawness
 **/
"""
    result = assemble_file("tty.js", text)

    assert [warning.kind for warning in result.warnings] == [WarningKind.MALFORMED_SIGNATURE]
    assert result.warnings[0].line == 6
    assert result.warnings[0].subject == "tty.isatty(fd)) -> Boolean"
    assert [member.fqn for member in result.root.members] == ["tty.setRawMode"]
    assert "broken" not in result.root.summary


def test_zlib_fixture_prose_examples_sections_and_anchors(fixture_sources: Path) -> None:
    path = fixture_sources / "nodejs" / "Modules" / "zlib.js"
    root = assemble_file("nodejs/Modules/zlib.js", path.read_text(encoding="utf-8")).root

    assert root.sections == ["Options", "Memory Usage Tuning"]
    assert root.anchors == ["zlib.options"]
    assert root.examples == ["(1 << (windowBits+2)) +  (1 << (memLevel+9))"]
    assert "#### Options" in root.summary
    assert "* chunkSize (default: 16*1024)" in root.summary
    assert "(1 << (windowBits+2))" not in root.summary
    assert [member.fqn for member in root.members] == [
        "zlib.createGzip",
        "zlib.createGunzip",
        "zlib.Gunzip",
        "zlib.gzip",
        "zlib#gzip",
    ]

    gzip = root.members[-1]
    callback = gzip.parameters[1]
    assert callback.type_hint == "Function"
    assert callback.parameters is not None
    assert [(param.name, param.type_hint) for param in callback.parameters] == [
        ("error", "Error"),
        ("result", "Object"),
    ]
    assert gzip.summary == "Compress a string with Gzip."

    create_gzip = root.members[0]
    assert [reference.target for reference in create_gzip.references] == [
        "zlib.options",
        "zlib.Gzip",
    ]


def test_fenced_code_becomes_example() -> None:
    text = """
/**
 * class util
 *
 * Example:
 *
 * ```
 * util.inspect(obj);
 * ```
 **/
"""
    root = assemble_file("util.js", text).root
    assert root.examples == ["util.inspect(obj);"]
    assert root.summary == "Example:"


def test_duplicate_member_in_one_file_keeps_later_definition() -> None:
    text = """
/**
 * tty.isatty(fd) -> Boolean
 **/

/**
 * tty.isatty(fd, strict) -> Boolean
 **/
"""
    result = assemble_file("tty.js", text)

    assert [warning.kind for warning in result.warnings] == [WarningKind.DUPLICATE_ENTITY]
    (member,) = result.root.members
    assert [param.name for param in member.parameters] == ["fd", "strict"]


def test_multiple_classes_hang_off_file_module() -> None:
    text = """
/**
 * class Gzip
 **/

/**
 * Gzip#flush() -> Void
 **/

/**
 * class Gunzip
 **/

/**
 * reset() -> Void
 **/
"""
    root = assemble_file("lib/streams.js", text).root

    assert root.kind is EntityKind.MODULE
    assert root.fqn == "streams"
    assert [member.fqn for member in root.members] == ["Gzip", "Gunzip"]
    assert [member.fqn for member in root.members[0].members] == ["Gzip#flush"]
    assert [member.fqn for member in root.members[1].members] == ["Gunzip.reset"]
    assert root.members[1].members[0].parent == "Gunzip"


def test_assembly_is_idempotent(fixture_sources: Path) -> None:
    text = (fixture_sources / "nodejs" / "Modules" / "tty.js").read_text(encoding="utf-8")
    assert assemble_file("tty.js", text) == assemble_file("tty.js", text)


def test_prose_block_opening_with_a_call_is_kept_as_prose() -> None:
    text = "/**\n * class tty\n **/\n\n/**\n * require('tty')\n *\n * Loads the module.\n **/\n"
    result = assemble_file("tty.js", text)

    assert result.warnings == []
    assert result.root.fqn == "tty"
    assert result.root.members == []
    assert "require('tty')" in result.root.summary
    assert "Loads the module." in result.root.summary
