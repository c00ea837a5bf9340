"""
Tests for ErrorContext and exception wrapping.
"""

import threading

import pytest

from sqlsession.core.common import BuildError, wrap_exception
from sqlsession.core.error_context import ErrorContext


@pytest.fixture(autouse=True)
def clean_context():
    ErrorContext.instance().reset()
    yield
    ErrorContext.instance().reset()


def test_instance_is_per_thread():
    main_context = ErrorContext.instance()
    seen = []

    thread = threading.Thread(target=lambda: seen.append(ErrorContext.instance()))
    thread.start()
    thread.join()

    assert ErrorContext.instance() is main_context
    assert seen[0] is not main_context


def test_rendering_skips_empty_lines():
    context = ErrorContext.instance().resource("sqlsession.xml").activity("parsing settings")

    assert str(context) == (
        "### The error may exist in sqlsession.xml\n"
        "### The error occurred while parsing settings"
    )


def test_reset_clears_everything():
    ErrorContext.instance().resource("a").activity("b").object("c").message("d")

    fresh = ErrorContext.instance().reset()

    assert fresh is ErrorContext.instance()
    assert str(fresh) == ""


def test_reset_on_other_thread_leaves_this_thread_alone():
    ErrorContext.instance().resource("mine")

    thread = threading.Thread(target=lambda: ErrorContext.instance().reset())
    thread.start()
    thread.join()

    assert "mine" in str(ErrorContext.instance())


def test_wrap_exception():
    ErrorContext.instance().resource("sqlsession.xml").object("environment 'dev'")
    failure = ValueError("bad value")

    error = wrap_exception("Error building session factory.", failure)

    assert isinstance(error, BuildError)
    assert error.cause is failure
    assert str(error) == (
        "Error building session factory.\n"
        "### The error may exist in sqlsession.xml\n"
        "### The error may involve environment 'dev'\n"
        "### Cause: ValueError: bad value"
    )
