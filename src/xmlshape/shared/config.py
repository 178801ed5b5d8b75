"""Configuration for xmlshape parses.

A :class:`ParserConfig` is an immutable record of every shaping policy. It is
validated once at construction and shared freely between parses; nothing in a
parse ever writes back into it.
"""

import difflib
from dataclasses import dataclass, field, fields, replace
from typing import Any, Callable, Dict, List, Optional, Tuple

Processor = Callable[[Any], Any]
Validator = Callable[[str, Any, Any], Any]

DEFAULT_CHUNK_SIZE = 10000

# camelCase option names accepted alongside the field names, followed by the
# older short names (attrkey, explicitArray, ...).
OPTION_ALIASES: Dict[str, str] = {
    "normalizeTags": "normalize_tags",
    "attributesKey": "attributes_key",
    "textKey": "text_key",
    "explicitTextKey": "explicit_text_key",
    "arrayCoercion": "array_coercion",
    "ignoreAttributes": "ignore_attributes",
    "mergeAttributes": "merge_attributes",
    "rootWrapping": "root_wrapping",
    "namespaceExposure": "namespace_exposure",
    "explicitChildren": "explicit_children",
    "preserveChildOrder": "preserve_child_order",
    "childrenKey": "children_key",
    "textAsChildren": "text_as_children",
    "includeWhitespaceTextNodes": "include_whitespace_text_nodes",
    "cooperativeChunking": "cooperative_chunking",
    "chunkSize": "chunk_size",
    "strictWellFormedness": "strict",
    "attributeNameProcessors": "attribute_name_processors",
    "attributeValueProcessors": "attribute_value_processors",
    "tagNameProcessors": "tag_name_processors",
    "valueProcessors": "value_processors",
    "emptyTagPlaceholder": "empty_tag_placeholder",

    "attrkey": "attributes_key",
    "charkey": "text_key",
    "explicitCharkey": "explicit_text_key",
    "explicitArray": "array_coercion",
    "ignoreAttrs": "ignore_attributes",
    "mergeAttrs": "merge_attributes",
    "explicitRoot": "root_wrapping",
    "xmlns": "namespace_exposure",
    "preserveChildrenOrder": "preserve_child_order",
    "childkey": "children_key",
    "charsAsChildren": "text_as_children",
    "includeWhiteChars": "include_whitespace_text_nodes",
    "async": "cooperative_chunking",
    "attrNameProcessors": "attribute_name_processors",
    "attrValueProcessors": "attribute_value_processors",
    "emptyTag": "empty_tag_placeholder",
}

_PROCESSOR_FIELDS = (
    "attribute_name_processors",
    "attribute_value_processors",
    "tag_name_processors",
    "value_processors",
)
_KEY_FIELDS = ("attributes_key", "text_key", "children_key")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class ParserConfig:
    """Immutable set of shaping policies for turning XML into a value tree.

    Attributes:
        trim: Strip leading/trailing whitespace from kept text
        normalize: Collapse runs of whitespace in kept text to one space
        normalize_tags: Lowercase tag names before other tag processors
        attributes_key: Key holding an element's attribute map
        text_key: Key holding an element's text
        explicit_text_key: Keep the text key even when text is all there is
        array_coercion: Wrap every child value in a list
        ignore_attributes: Drop attributes entirely
        merge_attributes: Put attributes directly into the element mapping
        root_wrapping: Return ``{root_name: value}`` instead of ``value``
        validator: ``(path, current_value, new_value) -> value`` hook
        namespace_exposure: Attach ``{uri, local}`` info and attribute objects
        explicit_children: Put child elements under ``children_key``
        preserve_child_order: Keep children as one ordered list
        children_key: Key holding explicit children
        text_as_children: Treat text runs as ``__text__`` children
        include_whitespace_text_nodes: Keep whitespace-only ``__text__`` children
        cooperative_chunking: Feed the tokenizer in ``chunk_size`` slices
        chunk_size: Characters per slice in cooperative mode
        strict: Reject ill-formed input instead of repairing it
        attribute_name_processors: Processors applied to attribute names
        attribute_value_processors: Processors applied to attribute values
        tag_name_processors: Processors applied to tag names
        value_processors: Processors applied to kept text
        empty_tag_placeholder: Value for elements with no content at all
    """

    trim: bool = False
    normalize: bool = False
    normalize_tags: bool = False
    attributes_key: str = "$"
    text_key: str = "_"
    explicit_text_key: bool = False
    array_coercion: bool = True
    ignore_attributes: bool = False
    merge_attributes: bool = False
    root_wrapping: bool = True
    validator: Optional[Validator] = None
    namespace_exposure: bool = False
    explicit_children: bool = False
    preserve_child_order: bool = False
    children_key: str = "$$"
    text_as_children: bool = False
    include_whitespace_text_nodes: bool = False
    cooperative_chunking: bool = False
    chunk_size: int = DEFAULT_CHUNK_SIZE
    strict: bool = True
    attribute_name_processors: Tuple[Processor, ...] = ()
    attribute_value_processors: Tuple[Processor, ...] = ()
    tag_name_processors: Tuple[Processor, ...] = ()
    value_processors: Tuple[Processor, ...] = ()
    empty_tag_placeholder: Any = ""

    def __post_init__(self) -> None:
        """Validate option values and freeze processor sequences."""
        for name in _PROCESSOR_FIELDS:
            value = getattr(self, name)
            if value is None:
                value = ()
            elif callable(value):
                value = (value,)
            try:
                value = tuple(value)
            except TypeError:
                raise ConfigValidationError(
                    f"{name} must be a sequence of callables",
                    field_name=name,
                ) from None
            for processor in value:
                if not callable(processor):
                    raise ConfigValidationError(
                        f"{name} contains a non-callable entry: {processor!r}",
                        field_name=name,
                    )
            # frozen dataclass: normalize through object.__setattr__
            object.__setattr__(self, name, value)

        for name in _KEY_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise ConfigValidationError(
                    f"{name} must be a non-empty string", field_name=name
                )

        if self.validator is not None and not callable(self.validator):
            raise ConfigValidationError(
                "validator must be callable", field_name="validator"
            )
        if isinstance(self.chunk_size, bool) or not isinstance(self.chunk_size, int):
            raise ConfigValidationError(
                "chunk_size must be an integer", field_name="chunk_size"
            )
        if self.chunk_size <= 0:
            raise ConfigValidationError(
                "chunk_size must be > 0", field_name="chunk_size"
            )
        if self.attributes_key == self.text_key:
            raise ConfigValidationError(
                "attributes_key and text_key must differ",
                field_name="text_key",
                suggestions=["Use the defaults '$' and '_'"],
            )

    @property
    def namespace_key(self) -> str:
        """Key under which namespace info is stored."""
        return self.attributes_key + "ns"

    @property
    def keeps_node_names(self) -> bool:
        """Whether closed nodes keep their ``#name`` entry."""
        return self.explicit_children and self.preserve_child_order

    @property
    def effective_tag_name_processors(self) -> Tuple[Processor, ...]:
        """Tag-name processors including the lowercase step of normalize_tags."""
        if not self.normalize_tags:
            return self.tag_name_processors
        from xmlshape.processors import normalize

        return (normalize,) + self.tag_name_processors

    def override(self, **kwargs: Any) -> "ParserConfig":
        """Create a new configuration with specific overrides.

        Accepts field names and camelCase option names alike.

        Example:
            >>> config = ParserConfig()
            >>> flat = config.override(explicitArray=False, mergeAttrs=True)
        """
        return replace(self, **resolve_options(kwargs))

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a field-name keyed dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParserConfig":
        """Create configuration from a dictionary of options.

        Args:
            data: Options keyed by field name or camelCase option name

        Returns:
            ParserConfig instance
        """
        return cls(**resolve_options(data))


def resolve_options(options: Dict[str, Any]) -> Dict[str, Any]:
    """Translate option names to ParserConfig field names.

    Raises:
        ConfigValidationError: If an option name is not recognized
    """
    known = {f.name for f in fields(ParserConfig)}
    resolved: Dict[str, Any] = {}
    for key, value in options.items():
        name = OPTION_ALIASES.get(key, key)
        if name not in known:
            candidates = sorted(known) + sorted(OPTION_ALIASES)
            raise ConfigValidationError(
                f"Unknown parser option: {key!r}",
                field_name=key,
                suggestions=difflib.get_close_matches(key, candidates, n=3),
            )
        resolved[name] = value
    return resolved
