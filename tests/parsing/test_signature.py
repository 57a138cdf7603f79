"""Tests for signature parsing and formatting."""

from __future__ import annotations

import pytest

from doccorpus.models import EntityKind
from doccorpus.parsing.signature import (
    MalformedSignature,
    format_signature,
    parse_signature,
)


def test_constructor_with_optional_parameters() -> None:
    signature = parse_signature("new ReferenceError([message][, fileName][, lineNumber])")

    assert signature.kind is EntityKind.CONSTRUCTOR
    assert signature.name == "ReferenceError"
    assert signature.qualifier is None
    assert [param.name for param in signature.parameters] == ["message", "fileName", "lineNumber"]
    assert all(param.optional for param in signature.parameters)
    assert signature.returns is None


def test_qualified_method_with_return_type() -> None:
    signature = parse_signature("tty.getWindowSize(fd) -> Array")

    assert signature.kind is EntityKind.METHOD
    assert signature.name == "getWindowSize"
    assert signature.qualifier == "tty"
    assert signature.separator == "."
    assert signature.path == "tty.getWindowSize"
    assert len(signature.parameters) == 1
    assert signature.parameters[0].name == "fd"
    assert signature.parameters[0].optional is False
    assert signature.returns == "Array"


def test_instance_method_with_callback_arguments() -> None:
    signature = parse_signature("zlib#gzip(buf, callback(error, result))")

    assert signature.separator == "#"
    assert signature.path == "zlib#gzip"
    callback = signature.parameters[1]
    assert callback.name == "callback"
    assert callback.parameters is not None
    assert [param.name for param in callback.parameters] == ["error", "result"]


def test_nested_optional_brackets_and_defaults() -> None:
    signature = parse_signature("fs.open(path[, flags[, mode = 438]]) -> Number | null")

    names = [(param.name, param.optional, param.depth) for param in signature.parameters]
    assert names == [("path", False, 0), ("flags", True, 1), ("mode", True, 2)]
    assert signature.parameters[2].default == "438"
    assert signature.returns == "Number | null"


def test_empty_parameter_list() -> None:
    signature = parse_signature("zlib.Gunzip()")
    assert signature.parameters == []
    assert signature.returns is None


@pytest.mark.parametrize(
    "line",
    [
        "new ReferenceError([message][, fileName][, lineNumber])",
        "tty.getWindowSize(fd) -> Array",
        "tty.setWindowSize(fd, row, col) -> Void",
        "zlib#gzip(buf, callback(error, result))",
        "fs.open(path[, flags[, mode = 438]]) -> Number | null",
        "util.format([format, args])",
        "zlib.createGzip( [options] )",
    ],
)
def test_format_round_trips_modulo_whitespace(line: str) -> None:
    formatted = format_signature(parse_signature(line))
    assert "".join(formatted.split()) == "".join(line.split())


@pytest.mark.parametrize(
    "line, reason",
    [
        ("tty.isatty(fd)) -> Boolean", "unexpected text"),
        ("tty.isatty((fd) -> Boolean", "unbalanced parentheses"),
        ("tty.isatty(fd]) -> Boolean", "unbalanced brackets"),
        ("tty.isatty([fd) -> Boolean", "unbalanced brackets"),
        ("tty.isatty(fd,) -> Boolean", "empty parameter"),
        ("tty.isatty(some fd) -> Boolean", "unparsable parameter"),
        ("tty.isatty(fd) ->", "missing return type"),
        ("Returns something", "not a signature"),
    ],
)
def test_malformed_signatures(line: str, reason: str) -> None:
    with pytest.raises(MalformedSignature) as excinfo:
        parse_signature(line)
    assert reason in excinfo.value.reason
    assert excinfo.value.text == line


def test_callback_nesting_is_capped() -> None:
    line = "zlib.deflate(buf, " + "cb(" * 40 + "x" + ")" * 40 + ") -> Void"
    with pytest.raises(MalformedSignature) as excinfo:
        parse_signature(line)
    assert "nested too deeply" in excinfo.value.reason


def test_moderate_callback_nesting_parses() -> None:
    signature = parse_signature("fs.watch(path, listener(event, done(err)))")
    listener = signature.parameters[1]
    assert listener.parameters is not None
    done = listener.parameters[1]
    assert done.parameters is not None
    assert [param.name for param in done.parameters] == ["err"]
