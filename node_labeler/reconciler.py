"""Merge decoded tag directives into a node's labels and taints."""

from collections.abc import Iterable

from node_labeler.exceptions import TagParseError
from node_labeler.logging_config import get_logger
from node_labeler.models.node import NodeMetadataSnapshot, NodeTaint, ReconciliationResult
from node_labeler.models.tag import CloudTag, LabelDirective
from node_labeler.tags import parse_tag

logger = get_logger(__name__)


def reconcile(snapshot: NodeMetadataSnapshot, tags: Iterable[CloudTag]) -> ReconciliationResult:
    """Compute the node metadata a set of EC2 tags asks for.

    Tags are applied in the order given. Labels overwrite existing values and
    taints are appended without de-duplication; nothing is ever removed. A tag
    that cannot be decoded is logged and skipped.

    ``changed`` compares only the number of labels and taints with the
    snapshot, so updating the value of an existing label is not reported.

    Args:
        snapshot: Node metadata at the start of the pass (not modified)
        tags: Tags of the node's EC2 instance

    Returns:
        ReconciliationResult with the merged labels and taints
    """
    labels = dict(snapshot.labels)
    taints = list(snapshot.taints)

    for tag in tags:
        try:
            directive = parse_tag(tag)
        except TagParseError as e:
            logger.warning(f"Skipping tag {tag.key}={tag.value}: {e.message}")
            continue

        if directive is None:
            continue

        if isinstance(directive, LabelDirective):
            labels[directive.key] = directive.value
            logger.debug(f"Label {directive.key}={directive.value} from tag {tag.key}")
        else:
            taints.append(NodeTaint.from_directive(directive))
            logger.debug(f"Taint {directive} from tag {tag.key}")

    changed = len(labels) != len(snapshot.labels) or len(taints) != len(snapshot.taints)
    return ReconciliationResult(labels=labels, taints=taints, changed=changed)
