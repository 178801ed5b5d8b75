"""Tests for the expat and lxml event sources."""

import pytest

from xmlshape.shared.config import ParserConfig
from xmlshape.shared.errors import MalformedInputError
from xmlshape.tokenization.events import (
    XMLNS_URI,
    ExpatEventSource,
    LxmlEventSource,
    create_event_source,
)


class RecordingHandler:
    """Event handler that records every callback."""

    def __init__(self):
        self.events = []

    def on_open_tag(self, name, attributes, uri=None, local=None):
        self.events.append(("open", name, dict(attributes), uri, local))

    def on_close_tag(self):
        self.events.append(("close",))

    def on_text(self, text):
        self.events.append(("text", text))

    def on_cdata(self, text):
        self.events.append(("cdata", text))

    def on_end(self):
        self.events.append(("end",))

    def on_error(self, error):
        self.events.append(("error", error))


def feed(source_class, chunks, namespace_exposure=False):
    handler = RecordingHandler()
    source = source_class(handler, namespace_exposure=namespace_exposure)
    for chunk in chunks:
        source.write(chunk)
    source.close()
    return handler.events


def in_chunks(text, size):
    return [text[i:i + size] for i in range(0, len(text), size)]


class TestExpatEventSource:
    """Test the strict event source."""

    def test_basic_events(self):
        events = feed(ExpatEventSource, ['<root id="1">hi<child/></root>'])
        assert events == [
            ("open", "root", {"id": "1"}, None, None),
            ("text", "hi"),
            ("open", "child", {}, None, None),
            ("close",),
            ("close",),
            ("end",),
        ]

    def test_text_is_coalesced_across_writes(self):
        events = feed(ExpatEventSource, in_chunks("<a>Hello &amp; goodbye</a>", 1))
        assert ("text", "Hello & goodbye") in events
        assert len([e for e in events if e[0] == "text"]) == 1

    def test_comments_and_processing_instructions_split_text(self):
        events = feed(ExpatEventSource, ["<a>one<!-- c -->two<?pi x?>three</a>"])
        texts = [e[1] for e in events if e[0] == "text"]
        assert texts == ["one", "two", "three"]

    def test_cdata_sections(self):
        events = feed(ExpatEventSource, in_chunks("<a>x<![CDATA[]]><![CDATA[ <b> ]]></a>", 3))
        assert events[1:4] == [("text", "x"), ("cdata", ""), ("cdata", " <b> ")]

    def test_syntax_error_reported_once(self):
        handler = RecordingHandler()
        source = ExpatEventSource(handler)

        source.write("<a>\n<b></a>")
        source.write("<more/>")
        source.close()

        errors = [e for e in handler.events if e[0] == "error"]
        assert len(errors) == 1
        error = errors[0][1]
        assert isinstance(error, MalformedInputError)
        assert error.line == 2
        assert error.code is not None
        assert ("end",) not in handler.events
        assert source.stopped

    def test_input_ending_inside_element_reaches_end(self):
        events = feed(ExpatEventSource, ["<a><b>text"])
        assert events[-2:] == [("text", "text"), ("end",)]

    @pytest.mark.parametrize("xml", [
        '<?xml version="1.0"?>',
        "<!-- only a comment -->",
        '<?xml version="1.0"?>\n<?pi data?>\n',
    ])
    def test_prolog_only_input_reaches_end(self, xml):
        assert feed(ExpatEventSource, [xml]) == [("end",)]

    def test_garbage_is_an_error(self):
        events = feed(ExpatEventSource, ["this is not xml"])
        assert events[-1][0] == "error"

    def test_namespace_exposure(self):
        xml = '<pfx:top xmlns:pfx="http://foo.com" pfx:attr="baz" plain="1"><pfx:c/></pfx:top>'
        events = feed(ExpatEventSource, [xml], namespace_exposure=True)

        kind, name, attributes, uri, local = events[0]
        assert (kind, name, uri, local) == ("open", "pfx:top", "http://foo.com", "top")
        assert attributes == {
            "xmlns:pfx": {
                "name": "xmlns:pfx", "value": "http://foo.com", "prefix": "xmlns",
                "local": "pfx", "uri": XMLNS_URI,
            },
            "pfx:attr": {
                "name": "pfx:attr", "value": "baz", "prefix": "pfx",
                "local": "attr", "uri": "http://foo.com",
            },
            "plain": {
                "name": "plain", "value": "1", "prefix": "",
                "local": "plain", "uri": "",
            },
        }
        assert events[1] == ("open", "pfx:c", {}, "http://foo.com", "c")

    def test_default_namespace(self):
        events = feed(ExpatEventSource, ['<top xmlns="http://foo.com"/>'], namespace_exposure=True)
        _, name, attributes, uri, local = events[0]
        assert (name, uri, local) == ("top", "http://foo.com", "top")
        assert attributes["xmlns"]["local"] == ""
        assert attributes["xmlns"]["value"] == "http://foo.com"


class TestLxmlEventSource:
    """Test the lenient event source."""

    def test_basic_events(self):
        events = feed(LxmlEventSource, ['<root id="1">hi<child/></root>'])
        assert events == [
            ("open", "root", {"id": "1"}, None, None),
            ("text", "hi"),
            ("open", "child", {}, None, None),
            ("close",),
            ("close",),
            ("end",),
        ]

    def test_text_is_coalesced_across_writes(self):
        events = feed(LxmlEventSource, in_chunks("<a>Hello &amp; goodbye</a>", 2))
        assert [e for e in events if e[0] == "text"] == [("text", "Hello & goodbye")]

    def test_open_elements_closed_at_end(self):
        events = feed(LxmlEventSource, ["<a><b>x</b>"])
        assert events[-2:] == [("close",), ("end",)]
        assert len([e for e in events if e[0] == "open"]) == 2
        assert len([e for e in events if e[0] == "close"]) == 2

    def test_prefixed_names_rebuilt(self):
        xml = '<pfx:top xmlns:pfx="http://foo.com" pfx:attr="baz"><pfx:c/></pfx:top>'
        events = feed(LxmlEventSource, [xml], namespace_exposure=True)

        _, name, attributes, uri, local = events[0]
        assert (name, uri, local) == ("pfx:top", "http://foo.com", "top")
        assert attributes["pfx:attr"]["value"] == "baz"
        assert attributes["pfx:attr"]["local"] == "attr"
        assert attributes["xmlns:pfx"]["uri"] == XMLNS_URI
        assert events[1][1:] == ("pfx:c", {}, "http://foo.com", "c")

    def test_prefixed_names_without_exposure(self):
        xml = '<pfx:top xmlns:pfx="http://foo.com" pfx:attr="baz"/>'
        events = feed(LxmlEventSource, [xml])
        assert events[0] == (
            "open", "pfx:top", {"xmlns:pfx": "http://foo.com", "pfx:attr": "baz"}, None, None
        )


@pytest.mark.parametrize("strict,expected", [
    (True, ExpatEventSource),
    (False, LxmlEventSource),
])
def test_create_event_source(strict, expected):
    source = create_event_source(RecordingHandler(), ParserConfig(strict=strict))
    assert type(source) is expected
    assert source.namespace_exposure is False
