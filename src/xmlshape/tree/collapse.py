"""Collapsing a closed element into the value its parent receives.

When an element closes, its frame runs through a fixed sequence of stages:

1. consume the CDATA marker
2. keep or drop the accumulated text (trim, normalize, value processors)
3. collapse a text-only node to the bare string
4. substitute the empty-tag placeholder for a node with no content
5. run the validator hook
6. reshape into explicit children (keyed or order-preserving)

Each stage reads and writes a :class:`CollapseContext`. The stages that only
matter under certain options are left out of the pipeline when those options
are off, so a policy is built once per configuration and reused for every
element of every parse.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence

from xmlshape.processors import ProcessorChain
from xmlshape.shared.config import ParserConfig
from xmlshape.shared.errors import ValidationError

from .frame import Frame
from .nodes import NAME_KEY, NodeKind, kind_of

_BLANK = re.compile(r"\s*")
_WHITESPACE_RUN = re.compile(r"\s{2,}")


def is_blank(text: str) -> bool:
    """True for empty or whitespace-only text."""
    return _BLANK.fullmatch(text) is not None


def normalize_text(text: str) -> str:
    """Collapse runs of two or more whitespace characters and trim."""
    return _WHITESPACE_RUN.sub(" ", text).strip()


def element_path(ancestors: Sequence[str], name: str) -> str:
    """Absolute slash-separated path of an element."""
    return "/" + "/".join([*ancestors, name])


@dataclass
class CollapseContext:
    """Working state while one closed element is collapsed.

    Attributes:
        frame: The element that just closed
        parent: The enclosing open element, ``None`` for the root
        ancestors: Tag names from the root down to ``parent``
        value: The element's value as built so far
        text_kept: Whether the text survived the whitespace check
        empty_text: Dropped whitespace text, the fallback for an empty node
        is_cdata: Whether the text arrived through CDATA
    """

    frame: Frame
    parent: Optional[Frame]
    ancestors: Sequence[str]
    value: Any = None
    text_kept: bool = False
    empty_text: Optional[str] = None
    is_cdata: bool = False

    @property
    def name(self) -> str:
        return self.frame.name


Stage = Callable[[CollapseContext], None]


class CollapsePolicy:
    """Ordered stage pipeline turning closed frames into values."""

    def __init__(self, config: ParserConfig) -> None:
        self.config = config
        self._values = ProcessorChain(config.value_processors, "value")

        stages: List[Stage] = [
            self._consume_cdata,
            self._shape_text,
            self._collapse_scalar,
            self._substitute_empty,
        ]
        if config.validator is not None:
            stages.append(self._validate)
        if config.explicit_children and not config.merge_attributes:
            if config.preserve_child_order:
                stages.append(self._record_ordered_child)
            else:
                stages.append(self._separate_children)
        self._stages = tuple(stages)

    @property
    def stages(self) -> List[str]:
        """Names of the active stages, in execution order."""
        return [stage.__name__.lstrip("_") for stage in self._stages]

    def collapse(
        self, frame: Frame, parent: Optional[Frame], ancestors: Sequence[str]
    ) -> Any:
        """Run every stage over ``frame`` and return the resulting value.

        Raises:
            ValidationError: If the validator rejects the element
            ProcessorError: If a value processor raises
        """
        context = CollapseContext(frame=frame, parent=parent, ancestors=ancestors)
        for stage in self._stages:
            stage(context)
        return context.value

    def _consume_cdata(self, context: CollapseContext) -> None:
        context.is_cdata = context.frame.consume_cdata()

    def _shape_text(self, context: CollapseContext) -> None:
        text = context.frame.text
        if is_blank(text) and not context.is_cdata:
            context.empty_text = text
            context.value = dict(context.frame.properties)
            return

        if self.config.trim:
            text = text.strip()
        if self.config.normalize:
            text = normalize_text(text)
        text = self._values(text)

        # text leads, as it was the first thing the element received
        value = {self.config.text_key: text}
        value.update(context.frame.properties)
        context.value = value
        context.text_kept = True

    def _collapse_scalar(self, context: CollapseContext) -> None:
        if context.text_kept and self._is_text_only(context.value):
            context.value = context.value[self.config.text_key]

    def _substitute_empty(self, context: CollapseContext) -> None:
        if kind_of(context.value) is not NodeKind.MAPPING or context.value:
            return
        placeholder = self.config.empty_tag_placeholder
        if isinstance(placeholder, str) and placeholder == "":
            context.value = context.empty_text
        else:
            context.value = placeholder

    def _validate(self, context: CollapseContext) -> None:
        path = element_path(context.ancestors, context.name)
        current = None
        if context.parent is not None:
            current = context.parent.properties.get(context.name)
        try:
            context.value = self.config.validator(path, current, context.value)
        except ValidationError as exc:
            if exc.path is None:
                exc.path = path
            raise
        except Exception as exc:
            raise ValidationError(str(exc), path=path) from exc

    def _separate_children(self, context: CollapseContext) -> None:
        if kind_of(context.value) is not NodeKind.MAPPING:
            return
        config = self.config
        remaining = dict(context.value)
        node = {}
        if config.attributes_key in remaining:
            node[config.attributes_key] = remaining.pop(config.attributes_key)
        if not config.text_as_children and config.text_key in remaining:
            node[config.text_key] = remaining.pop(config.text_key)
        if remaining:
            node[config.children_key] = remaining
        context.value = node

    def _record_ordered_child(self, context: CollapseContext) -> None:
        if kind_of(context.value) is not NodeKind.MAPPING or context.parent is None:
            return
        ordered = context.parent.properties.setdefault(self.config.children_key, [])
        ordered.append(dict(context.value))

        value = {key: item for key, item in context.value.items() if key != NAME_KEY}
        if self._is_text_only(value):
            value = value[self.config.text_key]
        context.value = value

    def _is_text_only(self, value: Any) -> bool:
        return (
            kind_of(value) is NodeKind.MAPPING
            and len(value) == 1
            and self.config.text_key in value
            and not self.config.explicit_text_key
        )
