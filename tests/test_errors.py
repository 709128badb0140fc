import pytest

from middlechain import (
    DEFAULT_STATUS,
    PipelineError,
    is_error,
    normalize_error,
    wrap_error,
)


def test_pipeline_error_attributes() -> None:
    error = PipelineError("bad", status=404)

    assert str(error) == "bad"
    assert error.message == "bad"
    assert error.status == 404
    assert repr(error) == "PipelineError('bad', status=404)"


def test_pipeline_error_default_status() -> None:
    assert PipelineError("bad").status == DEFAULT_STATUS == 500


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (ValueError("x"), True),
        (PipelineError("x"), True),
        (KeyboardInterrupt(), False),
        (42, False),
        ("error", False),
        (None, False),
    ],
)
def test_is_error(value: object, expected: bool) -> None:
    assert is_error(value) is expected


def test_wrap_error() -> None:
    original = ValueError("bad")
    wrapped = wrap_error(original, status=502)

    assert isinstance(wrapped, PipelineError)
    assert wrapped.message == "Error while handling middlewares: bad"
    assert wrapped.status == 502
    assert wrapped.__cause__ is original


def test_normalize_recognized_error() -> None:
    error = ValueError("bad")

    assert normalize_error(error) is error


def test_normalize_unrecognized_error() -> None:
    error = ValueError("bad")

    normalized = normalize_error(error, is_error=lambda e: False)

    assert isinstance(normalized, PipelineError)
    assert normalized.__cause__ is error


def test_normalize_plain_value() -> None:
    normalized = normalize_error(42)

    assert isinstance(normalized, PipelineError)
    assert str(normalized) == "Error while handling middlewares: 42"
    assert isinstance(normalized.__cause__, PipelineError)
    assert str(normalized.__cause__) == "42"


def test_normalize_predicate_accepting_plain_value() -> None:
    # Values which can not be raised are always wrapped.
    normalized = normalize_error("oops", is_error=lambda e: True)

    assert isinstance(normalized, PipelineError)
    assert str(normalized) == "Error while handling middlewares: oops"
