"""Shared fixtures for writer tests."""

import io
from typing import Any, Callable

import pytest

from indenting_xml_writer.formatting import FormattingXMLStreamWriter
from indenting_xml_writer.stream import XMLStreamWriter

OMR_NS = "http://audiveris.org/omr-data"


@pytest.fixture
def output() -> io.BytesIO:
    """In-memory byte sink."""
    return io.BytesIO()


@pytest.fixture
def base_writer(output: io.BytesIO) -> XMLStreamWriter:
    return XMLStreamWriter(output)


@pytest.fixture
def make_writer(output: io.BytesIO) -> Callable[..., FormattingXMLStreamWriter]:
    """Factory building a formatting writer over the ``output`` sink."""
    def _make(**kwargs: Any) -> FormattingXMLStreamWriter:
        return FormattingXMLStreamWriter(XMLStreamWriter(output), **kwargs)
    return _make


@pytest.fixture
def rendered(output: io.BytesIO) -> Callable[[], str]:
    """Return a callable decoding everything written so far."""
    return lambda: output.getvalue().decode("utf-8")
