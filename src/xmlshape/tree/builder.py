"""Document driver: turns tokenizer events into a value tree.

A :class:`TreeBuilder` is the per-parse context. It owns the frame stack,
receives the events of one document in order, asks the
:class:`~xmlshape.tree.collapse.CollapsePolicy` what every closed element
becomes, and ends in exactly one terminal state: ``ENDED`` with a value or
``FAILED`` with a :class:`~xmlshape.shared.errors.ParseError`.

State machine::

    IDLE --open--> OPEN --close of root--> ENDED
      |              |
      +---- error ---+-------------------> FAILED

Events arriving after a terminal state are accepted and discarded.
"""

from enum import Enum, auto
from typing import Any, Dict, Mapping, Optional

from xmlshape.processors import ProcessorChain
from xmlshape.shared import get_logger
from xmlshape.shared.config import ParserConfig
from xmlshape.shared.errors import ParseError, UnclosedDocumentError

from .collapse import CollapsePolicy, normalize_text
from .frame import FrameStack
from .nodes import NAME_KEY, assign_or_push, text_node


class DriverState(Enum):
    """Lifecycle states of a tree builder."""

    IDLE = auto()     # no element opened yet
    OPEN = auto()     # at least one element open
    ENDED = auto()    # root closed, value available
    FAILED = auto()   # parse failed, error available


class TreeBuilder:
    """Event handler building the value tree of a single document."""

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None,
        policy: Optional[CollapsePolicy] = None
    ) -> None:
        """Initialize tree builder.

        Args:
            config: Shaping policies (defaults to ParserConfig())
            correlation_id: Optional correlation ID for log records
            policy: Prebuilt collapse policy for ``config``, shared across parses
        """
        self.config = config or ParserConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "tree_builder")

        self.state = DriverState.IDLE
        self.stack = FrameStack()
        self.value: Any = None
        self.error: Optional[ParseError] = None

        self.events_processed = 0
        self.elements_closed = 0

        self._policy = policy or CollapsePolicy(self.config)
        self._tag_names = ProcessorChain(
            self.config.effective_tag_name_processors, "tag name"
        )
        self._attribute_names = ProcessorChain(
            self.config.attribute_name_processors, "attribute name"
        )
        self._attribute_values = ProcessorChain(
            self.config.attribute_value_processors, "attribute value"
        )
        self._emits_text_nodes = (
            self.config.explicit_children
            and self.config.preserve_child_order
            and self.config.text_as_children
        )

    @property
    def terminated(self) -> bool:
        """Whether the parse has reached ENDED or FAILED."""
        return self.state in (DriverState.ENDED, DriverState.FAILED)

    # Tokenizer events

    def on_open_tag(
        self,
        name: str,
        attributes: Mapping[str, Any],
        uri: Optional[str] = None,
        local: Optional[str] = None
    ) -> None:
        """Open a new element."""
        if self.terminated:
            return
        self.events_processed += 1
        try:
            self._open(name, attributes, uri, local)
        except ParseError as exc:
            self._fail(exc)

    def on_text(self, text: str) -> None:
        """Append character data to the innermost open element."""
        if self.terminated or not self.stack:
            return
        self.events_processed += 1
        frame = self.stack.top()
        frame.append_text(text)
        if self._emits_text_nodes and (
            self.config.include_whitespace_text_nodes or text.strip()
        ):
            if self.config.normalize:
                text = normalize_text(text)
            frame.properties.setdefault(self.config.children_key, []).append(
                text_node(self.config.text_key, text)
            )

    def on_cdata(self, text: str) -> None:
        """Append a CDATA section to the innermost open element."""
        if self.terminated or not self.stack:
            return
        self.on_text(text)
        self.stack.top().is_cdata = True

    def on_close_tag(self) -> None:
        """Close the innermost element and fold it into its parent."""
        if self.terminated:
            return
        self.events_processed += 1
        frame = self.stack.pop()
        parent = self.stack.top() if self.stack else None
        try:
            value = self._policy.collapse(frame, parent, self.stack.names())
        except ParseError as exc:
            self._fail(exc)
            return
        self.elements_closed += 1

        if parent is not None:
            assign_or_push(
                parent.properties, frame.name, value, self.config.array_coercion
            )
            return
        if self.config.root_wrapping:
            value = {frame.name: value}
        self._succeed(value)

    def on_end(self) -> None:
        """Handle end of input."""
        if self.state is DriverState.OPEN:
            self._fail(UnclosedDocumentError(self.stack.names()))
        elif self.state is DriverState.IDLE:
            # the tokenizer saw no element at all
            self._succeed(None)

    def on_error(self, error: ParseError) -> None:
        """Handle a tokenizer error."""
        if self.state is DriverState.ENDED:
            self.logger.debug(
                "Ignoring tokenizer error after document end",
                extra={"error": str(error)}
            )
            return
        self._fail(error)

    # Internals

    def _open(
        self,
        name: str,
        attributes: Mapping[str, Any],
        uri: Optional[str],
        local: Optional[str]
    ) -> None:
        config = self.config
        properties: Dict[str, Any] = {}
        if not config.ignore_attributes:
            for key, value in attributes.items():
                if not config.merge_attributes and config.attributes_key not in properties:
                    properties[config.attributes_key] = {}
                new_value = self._process_attribute_value(value)
                processed_key = self._attribute_names(key)
                if config.merge_attributes:
                    assign_or_push(
                        properties, processed_key, new_value, config.array_coercion
                    )
                else:
                    properties[config.attributes_key][processed_key] = new_value

        tag = self._tag_names(name)
        namespace = None
        if config.namespace_exposure:
            namespace = {"uri": uri or "", "local": local if local is not None else name}
        frame = self.stack.push(tag, namespace)
        if config.keeps_node_names:
            properties[NAME_KEY] = tag
        if namespace is not None:
            properties[config.namespace_key] = namespace
        frame.properties.update(properties)
        self.state = DriverState.OPEN

    def _process_attribute_value(self, value: Any) -> Any:
        if not self._attribute_values:
            return value
        if isinstance(value, dict) and "value" in value:
            # namespace-aware attribute object
            processed = dict(value)
            processed["value"] = self._attribute_values(value["value"])
            return processed
        return self._attribute_values(value)

    def _succeed(self, value: Any) -> None:
        self.state = DriverState.ENDED
        self.value = value
        self.logger.debug(
            "Document ended",
            extra={"elements_closed": self.elements_closed}
        )

    def _fail(self, error: ParseError) -> None:
        if self.terminated:
            return
        self.state = DriverState.FAILED
        self.error = error
        self.stack.clear()
        self.logger.debug(
            "Document failed",
            extra={"error_kind": error.kind.value, "error": str(error)}
        )
