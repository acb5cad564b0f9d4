import pytest

from gridlearn.errors import (
    LearnError,
    describe_error,
    format_error,
    wrap_error,
    wrap_lines_with_tab_prefix,
)


def test_wrap_lines_with_tab_prefix():
    assert wrap_lines_with_tab_prefix("123\ntest\n") == "\t123\n\ttest\n\t"


def test_empty_error_renders(monkeypatch):
    monkeypatch.delenv("GRIDLEARN_FULL_DEBUG", raising=False)
    err = LearnError()
    assert str(err) == "LearnError( : None )"


def test_describe_error_with_none(monkeypatch):
    monkeypatch.delenv("GRIDLEARN_FULL_DEBUG", raising=False)
    err = describe_error("test", None)
    assert isinstance(err, LearnError)
    assert err.description == "test"
    assert str(err) == "LearnError( test: None )"


def test_wrap_error_keeps_cause(monkeypatch):
    monkeypatch.delenv("GRIDLEARN_FULL_DEBUG", raising=False)
    inner = ValueError("boom")
    err = wrap_error(inner)
    assert err.wrapped is inner
    assert err.__cause__ is inner
    assert str(err) == "LearnError( : boom )"


def test_format_error(monkeypatch):
    monkeypatch.delenv("GRIDLEARN_FULL_DEBUG", raising=False)
    err = format_error(KeyError("k"), "row {} of {}", 3, 10)
    assert err.description == "row 3 of 10"
    assert str(err).startswith("LearnError( row 3 of 10: ")


def test_full_debug_output(monkeypatch):
    monkeypatch.setenv("GRIDLEARN_FULL_DEBUG", "true")
    err = wrap_error(ValueError("line1\nline2"))
    text = str(err)
    assert text.startswith("LearnError( \tline1\n\tline2\n\tCaptured at: ")
    assert text.endswith("\n)")


def test_stack_outside_package_is_invalid():
    assert wrap_error(None).stack == "<invalid>"


def test_can_be_raised(monkeypatch):
    monkeypatch.delenv("GRIDLEARN_FULL_DEBUG", raising=False)
    err = describe_error("failed", RuntimeError("x"))
    assert err.description == "failed"
    assert str(err) == "LearnError( failed: x )"
    with pytest.raises(LearnError) as info:
        raise err
    assert info.value is err