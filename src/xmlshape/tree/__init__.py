"""Value-tree construction from tokenizer events."""

from .builder import DriverState, TreeBuilder
from .collapse import CollapseContext, CollapsePolicy
from .frame import Frame, FrameStack
from .nodes import NAME_KEY, TEXT_NODE_NAME, NodeKind, assign_or_push, kind_of

__all__ = [
    "TreeBuilder",
    "DriverState",
    "CollapsePolicy",
    "CollapseContext",
    "Frame",
    "FrameStack",
    "NodeKind",
    "kind_of",
    "assign_or_push",
    "NAME_KEY",
    "TEXT_NODE_NAME",
]
