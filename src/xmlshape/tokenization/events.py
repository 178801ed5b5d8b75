"""Tokenizer event sources.

An event source owns a real XML tokenizer, accepts raw text with
:meth:`EventSource.write` / :meth:`EventSource.close`, and reports what it
finds to an :class:`EventHandler` in document order:

- ``on_open_tag(name, attributes, uri, local)`` and ``on_close_tag()``
- ``on_text(text)`` once per contiguous run of character data
- ``on_cdata(text)`` once per CDATA section
- ``on_end()`` after the input was closed cleanly
- ``on_error(error)`` at most once, after which the source stops

Character data is buffered inside the source and released at the next
structural boundary (tag, CDATA section, comment, processing instruction or
end of input), so the event stream does not depend on how the input was cut
into writes.

Two sources are provided: :class:`ExpatEventSource` (strict, standard
library ``pyexpat``) and :class:`LxmlEventSource` (lenient, libxml2 in
recovery mode through ``lxml``).
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple
from xml.parsers import expat

from lxml import etree

from xmlshape.shared.config import ParserConfig
from xmlshape.shared.errors import MalformedInputError, ParseError

XMLNS_URI = "http://www.w3.org/2000/xmlns/"
XML_URI = "http://www.w3.org/XML/1998/namespace"

_EXPAT_NAMESPACE_SEPARATOR = " "
_NO_ELEMENTS = expat.errors.codes[expat.errors.XML_ERROR_NO_ELEMENTS]


class EventHandler(Protocol):
    """Receiver of tokenizer events."""

    def on_open_tag(
        self,
        name: str,
        attributes: Mapping[str, Any],
        uri: Optional[str] = None,
        local: Optional[str] = None
    ) -> None: ...

    def on_close_tag(self) -> None: ...

    def on_text(self, text: str) -> None: ...

    def on_cdata(self, text: str) -> None: ...

    def on_end(self) -> None: ...

    def on_error(self, error: ParseError) -> None: ...


def namespace_attribute(
    name: str, value: str, prefix: str, local: str, uri: str
) -> Dict[str, str]:
    """Attribute record used when namespace exposure is on."""
    return {"name": name, "value": value, "prefix": prefix, "local": local, "uri": uri}


def declaration_attribute(prefix: Optional[str], uri: Optional[str]) -> Tuple[str, Dict[str, str]]:
    """Attribute record for an ``xmlns`` / ``xmlns:prefix`` declaration."""
    name = f"xmlns:{prefix}" if prefix else "xmlns"
    return name, namespace_attribute(name, uri or "", "xmlns", prefix or "", XMLNS_URI)


class EventSource(ABC):
    """Base class for tokenizer adapters.

    Subclasses feed text to their tokenizer and route its callbacks through
    the text-buffering helpers below.
    """

    #: Tokenizer exceptions translated into ``on_error``
    syntax_errors: Tuple[type, ...] = ()

    def __init__(self, handler: EventHandler, namespace_exposure: bool = False) -> None:
        self.handler = handler
        self.namespace_exposure = namespace_exposure
        self._text: List[str] = []
        self._stopped = False

    @property
    def stopped(self) -> bool:
        """Whether the source accepts no more input."""
        return self._stopped

    def write(self, chunk: str) -> None:
        """Feed a slice of the document."""
        if self._stopped:
            return
        try:
            self._feed(chunk)
        except self.syntax_errors as exc:
            self._report(exc)

    def close(self) -> None:
        """Signal end of input and report ``on_end`` unless an error stopped us."""
        if self._stopped:
            return
        try:
            self._finish()
        except self.syntax_errors as exc:
            self._report(exc)
            return
        self._flush_text()
        self._stopped = True
        self.handler.on_end()

    @abstractmethod
    def _feed(self, chunk: str) -> None:
        """Hand ``chunk`` to the tokenizer."""

    @abstractmethod
    def _finish(self) -> None:
        """Tell the tokenizer no more input follows."""

    @abstractmethod
    def _to_parse_error(self, exc: Exception) -> ParseError:
        """Translate a tokenizer exception."""

    def _report(self, exc: Exception) -> None:
        self._stopped = True
        self._text.clear()
        self.handler.on_error(self._to_parse_error(exc))

    def _buffer_text(self, data: str) -> None:
        self._text.append(data)

    def _flush_text(self) -> None:
        if self._text:
            text = "".join(self._text)
            self._text.clear()
            self.handler.on_text(text)


class ExpatEventSource(EventSource):
    """Strict event source backed by ``xml.parsers.expat``."""

    syntax_errors = (expat.ExpatError,)

    def __init__(self, handler: EventHandler, namespace_exposure: bool = False) -> None:
        super().__init__(handler, namespace_exposure)
        if namespace_exposure:
            parser = expat.ParserCreate(namespace_separator=_EXPAT_NAMESPACE_SEPARATOR)
            parser.namespace_prefixes = True
            parser.StartNamespaceDeclHandler = self._start_namespace_declaration
        else:
            parser = expat.ParserCreate()
        parser.buffer_text = True
        parser.ordered_attributes = False
        parser.StartElementHandler = self._start_element
        parser.EndElementHandler = self._end_element
        parser.CharacterDataHandler = self._character_data
        parser.StartCdataSectionHandler = self._start_cdata
        parser.EndCdataSectionHandler = self._end_cdata
        parser.CommentHandler = self._boundary
        parser.ProcessingInstructionHandler = self._boundary
        self._parser = parser

        self._declarations: List[Tuple[Optional[str], Optional[str]]] = []
        self._cdata: Optional[List[str]] = None

    def _feed(self, chunk: str) -> None:
        self._parser.Parse(chunk, False)

    def _finish(self) -> None:
        try:
            self._parser.Parse("", True)
        except expat.ExpatError as exc:
            # prolog-only input or input ending inside an element; the
            # handler decides between "no document" and "unclosed"
            if exc.code == _NO_ELEMENTS:
                return
            raise

    def _to_parse_error(self, exc: Exception) -> ParseError:
        code = getattr(exc, "code", None)
        message = expat.ErrorString(code) if code is not None else str(exc)
        return MalformedInputError(
            message,
            line=getattr(exc, "lineno", None),
            column=getattr(exc, "offset", None),
            code=code,
        )

    @staticmethod
    def _split_name(raw: str) -> Tuple[str, str, str, str]:
        """Split an expat namespace triplet into (qname, uri, local, prefix)."""
        parts = raw.split(_EXPAT_NAMESPACE_SEPARATOR)
        if len(parts) == 3:
            uri, local, prefix = parts
            return f"{prefix}:{local}", uri, local, prefix
        if len(parts) == 2:
            uri, local = parts
            return local, uri, local, ""
        return raw, "", raw, ""

    def _start_namespace_declaration(self, prefix: Optional[str], uri: Optional[str]) -> None:
        self._declarations.append((prefix, uri))

    def _start_element(self, name: str, attributes: Dict[str, str]) -> None:
        self._flush_text()
        if not self.namespace_exposure:
            self.handler.on_open_tag(name, attributes)
            return

        exposed: Dict[str, Any] = {}
        for prefix, uri in self._declarations:
            attr_name, record = declaration_attribute(prefix, uri)
            exposed[attr_name] = record
        self._declarations.clear()
        for raw, value in attributes.items():
            qname, uri, local, prefix = self._split_name(raw)
            exposed[qname] = namespace_attribute(qname, value, prefix, local, uri)

        qname, uri, local, _ = self._split_name(name)
        self.handler.on_open_tag(qname, exposed, uri, local)

    def _end_element(self, name: str) -> None:
        self._flush_text()
        self.handler.on_close_tag()

    def _character_data(self, data: str) -> None:
        if self._cdata is not None:
            self._cdata.append(data)
        else:
            self._buffer_text(data)

    def _start_cdata(self) -> None:
        self._flush_text()
        self._cdata = []

    def _end_cdata(self) -> None:
        text = "".join(self._cdata or ())
        self._cdata = None
        self.handler.on_cdata(text)

    def _boundary(self, *args: Any) -> None:
        self._flush_text()


class _LxmlTarget:
    """Parser target forwarding libxml2 SAX callbacks to the source."""

    def __init__(self, source: "LxmlEventSource") -> None:
        self._source = source

    def start(self, tag: str, attrib: Dict[str, str], nsmap: Optional[Dict[Optional[str], str]] = None) -> None:
        self._source._start_element(tag, attrib, nsmap or {})

    def end(self, tag: str) -> None:
        self._source._end_element()

    def data(self, data: str) -> None:
        self._source._buffer_text(data)

    def comment(self, text: str) -> None:
        self._source._flush_text()

    def pi(self, target: str, data: Optional[str] = None) -> None:
        self._source._flush_text()

    def close(self) -> None:
        return None


class LxmlEventSource(EventSource):
    """Lenient event source backed by ``lxml`` in recovery mode.

    Mismatched end tags close the innermost element and elements still open
    at end of input are closed before ``on_end``. libxml2 reports CDATA
    sections as plain character data, so ``on_cdata`` is never emitted.
    """

    syntax_errors = (etree.XMLSyntaxError, etree.ParserError)

    def __init__(self, handler: EventHandler, namespace_exposure: bool = False) -> None:
        super().__init__(handler, namespace_exposure)
        self._parser = etree.XMLParser(
            target=_LxmlTarget(self),
            recover=True,
            encoding="utf-8",
            no_network=True,
            resolve_entities=False,
        )
        # uri -> prefix bindings in scope, one mapping per open element
        self._scopes: List[Dict[str, Optional[str]]] = [{XML_URI: "xml"}]

    def _feed(self, chunk: str) -> None:
        self._parser.feed(chunk.encode("utf-8"))

    def _finish(self) -> None:
        self._parser.close()
        self._flush_text()
        while len(self._scopes) > 1:
            self._scopes.pop()
            self.handler.on_close_tag()

    def _to_parse_error(self, exc: Exception) -> ParseError:
        position = getattr(exc, "position", None) or (None, None)
        return MalformedInputError(
            getattr(exc, "msg", None) or str(exc),
            line=position[0],
            column=position[1],
            code=getattr(exc, "code", None),
        )

    def _qualify(self, clark_name: str, scope: Dict[str, Optional[str]]) -> Tuple[str, str, str, str]:
        """Turn ``{uri}local`` into (qname, uri, local, prefix)."""
        if not clark_name.startswith("{"):
            return clark_name, "", clark_name, ""
        uri, local = clark_name[1:].split("}", 1)
        prefix = scope.get(uri) or ""
        qname = f"{prefix}:{local}" if prefix else local
        return qname, uri, local, prefix

    def _start_element(
        self,
        tag: str,
        attrib: Dict[str, str],
        nsmap: Dict[Optional[str], str]
    ) -> None:
        self._flush_text()
        scope = dict(self._scopes[-1])
        for prefix, uri in nsmap.items():
            scope[uri] = prefix
        self._scopes.append(scope)

        attributes: Dict[str, Any] = {}
        for prefix, uri in nsmap.items():
            attr_name, record = declaration_attribute(prefix, uri)
            attributes[attr_name] = record if self.namespace_exposure else uri
        for raw, value in attrib.items():
            qname, uri, local, prefix = self._qualify(raw, scope)
            if self.namespace_exposure:
                attributes[qname] = namespace_attribute(qname, value, prefix, local, uri)
            else:
                attributes[qname] = value

        qname, uri, local, _ = self._qualify(tag, scope)
        if self.namespace_exposure:
            self.handler.on_open_tag(qname, attributes, uri, local)
        else:
            self.handler.on_open_tag(qname, attributes)

    def _end_element(self) -> None:
        self._flush_text()
        if len(self._scopes) > 1:
            self._scopes.pop()
            self.handler.on_close_tag()


def create_event_source(handler: EventHandler, config: ParserConfig) -> EventSource:
    """Build the event source matching ``config.strict``."""
    source_class = ExpatEventSource if config.strict else LxmlEventSource
    return source_class(handler, namespace_exposure=config.namespace_exposure)
