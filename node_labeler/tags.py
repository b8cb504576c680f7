"""Decoding of managed EC2 tags into label and taint directives.

A managed tag key has four ``/``-separated segments::

    kubernetes/aws-labeler/<kind>/<name>

``<kind>`` selects a label or a taint and ``<name>`` becomes the suffix of the
Kubernetes key under ``awslabeler.com/``. A label tag's value is used as is;
a taint tag's value must look like ``<value>:<Effect>``.
"""

from node_labeler.exceptions import MalformedKeyError, MalformedValueError
from node_labeler.logging_config import get_logger
from node_labeler.models.tag import (
    CloudTag,
    Directive,
    DirectiveKind,
    LabelDirective,
    TaintDirective,
    TaintEffect,
)

logger = get_logger(__name__)

# Prefix an EC2 tag key must contain to be managed by the labeler
AWS_TAG_PREFIX = "kubernetes/aws-labeler"

# Prefix of every label and taint key written to Kubernetes
K8S_KEY_PREFIX = "awslabeler.com"

TAG_KEY_SEGMENTS = 4

# Matched against the kind segment by containment, label first.
# "tail" is a long-standing spelling of "taint" in existing tags.
LABEL_KIND_TOKENS = ("label",)
TAINT_KIND_TOKENS = ("taint", "tail")

_EFFECTS = {
    "PreferNoSchedule": TaintEffect.PREFER_NO_SCHEDULE,
    "NoExecute": TaintEffect.NO_EXECUTE,
}


def is_managed(tag_key: str) -> bool:
    """Check if the EC2 tag should be managed by the labeler."""
    return AWS_TAG_PREFIX in tag_key


def parse_tag_key(tag_key: str) -> list[str]:
    """Split a tag key into its segments.

    Raises:
        MalformedKeyError: If the key does not have exactly four segments.
    """
    segments = tag_key.split("/")
    if len(segments) != TAG_KEY_SEGMENTS:
        raise MalformedKeyError(
            f"Wrong format for tag '{tag_key}': expected {TAG_KEY_SEGMENTS} segments, "
            f"got {len(segments)}",
            f"Managed tags look like {AWS_TAG_PREFIX}/label/<name> or "
            f"{AWS_TAG_PREFIX}/taint/<name>",
        )
    return segments


def directive_kind(segments: list[str]) -> DirectiveKind | None:
    """Return the directive kind named by the key, or None if it names neither."""
    kind = segments[2]
    if any(token in kind for token in LABEL_KIND_TOKENS):
        return DirectiveKind.LABEL
    if any(token in kind for token in TAINT_KIND_TOKENS):
        return DirectiveKind.TAINT
    return None


def target_key(segments: list[str]) -> str:
    return f"{K8S_KEY_PREFIX}/{segments[3]}"


def parse_taint_value(segments: list[str], raw_value: str) -> TaintDirective:
    """Build a taint directive from a tag value of the form ``value:Effect``.

    Unknown effects fall back to NoSchedule.

    Raises:
        MalformedValueError: If the value does not contain exactly one ':'.
    """
    parts = raw_value.split(":")
    if len(parts) != 2:
        raise MalformedValueError(
            f"Wrong format for taint value '{raw_value}'",
            "It should be like: labelValue:Effect",
        )
    value, effect_token = parts
    return TaintDirective(
        key=target_key(segments),
        value=value,
        effect=_EFFECTS.get(effect_token, TaintEffect.NO_SCHEDULE),
    )


def parse_tag(tag: CloudTag) -> Directive | None:
    """Decode one EC2 tag.

    Returns:
        The directive, or None for tags the labeler does not manage.

    Raises:
        MalformedKeyError: If a managed key has the wrong shape.
        MalformedValueError: If a taint value has the wrong shape.
    """
    if not is_managed(tag.key):
        return None

    segments = parse_tag_key(tag.key)
    kind = directive_kind(segments)

    if kind is DirectiveKind.LABEL:
        return LabelDirective(key=target_key(segments), value=tag.value)
    if kind is DirectiveKind.TAINT:
        return parse_taint_value(segments, tag.value)

    logger.debug(f"Tag {tag.key} names neither a label nor a taint, ignoring")
    return None
