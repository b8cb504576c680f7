"""Data models for tags, directives and node metadata."""

from node_labeler.models.node import NodeMetadataSnapshot, NodeTaint, ReconciliationResult
from node_labeler.models.tag import (
    CloudTag,
    Directive,
    DirectiveKind,
    LabelDirective,
    TaintDirective,
    TaintEffect,
)

__all__ = [
    "CloudTag",
    "Directive",
    "DirectiveKind",
    "LabelDirective",
    "TaintDirective",
    "TaintEffect",
    "NodeTaint",
    "NodeMetadataSnapshot",
    "ReconciliationResult",
]
