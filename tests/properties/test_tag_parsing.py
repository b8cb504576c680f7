"""Property-based tests for EC2 tag decoding.

Feature: aws-node-labeler, Property 1: Tag key shape
Feature: aws-node-labeler, Property 2: Taint value decoding
"""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from node_labeler.exceptions import MalformedKeyError, MalformedValueError
from node_labeler.models.tag import TaintEffect
from node_labeler.tags import AWS_TAG_PREFIX, is_managed, parse_tag_key, parse_taint_value

segment = st.text(alphabet=st.characters(exclude_characters="/"), max_size=12)
taint_part = st.text(alphabet=st.characters(exclude_characters=":"), max_size=12)


@given(prefix=st.text(max_size=10), suffix=st.text(max_size=10))
def test_property_keys_containing_prefix_are_managed(prefix, suffix):
    """Any key containing the management prefix is managed."""
    assert is_managed(prefix + AWS_TAG_PREFIX + suffix)


@given(key=st.text().filter(lambda k: AWS_TAG_PREFIX not in k))
def test_property_keys_without_prefix_are_not_managed(key):
    """Keys lacking the prefix are never managed."""
    assert not is_managed(key)


@given(segments=st.lists(segment, min_size=1, max_size=8))
def test_property_1_tag_key_shape(segments):
    """
    Feature: aws-node-labeler, Property 1: Tag key shape

    A key splits successfully iff it has exactly four segments, and the
    segments come back unchanged.
    """
    key = "/".join(segments)

    if len(segments) == 4:
        assert parse_tag_key(key) == segments
    else:
        with pytest.raises(MalformedKeyError):
            parse_tag_key(key)


@given(name=segment, value=taint_part, effect=taint_part)
def test_property_2_taint_value_decoding(name, value, effect):
    """
    Feature: aws-node-labeler, Property 2: Taint value decoding

    A value with one separator always decodes; the effect is the token when
    it names a known effect other than the default and NoSchedule otherwise.
    """
    directive = parse_taint_value(["kubernetes", "aws-labeler", "taint", name], f"{value}:{effect}")

    assert directive.key == f"awslabeler.com/{name}"
    assert directive.value == value
    if effect in ("PreferNoSchedule", "NoExecute"):
        assert directive.effect.value == effect
    else:
        assert directive.effect is TaintEffect.NO_SCHEDULE


@given(parts=st.lists(taint_part, min_size=1, max_size=5).filter(lambda p: len(p) != 2))
def test_property_taint_value_needs_one_separator(parts):
    """Values with zero or several separators are rejected."""
    with pytest.raises(MalformedValueError):
        parse_taint_value(["kubernetes", "aws-labeler", "taint", "x"], ":".join(parts))
