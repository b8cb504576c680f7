"""Data models for node metadata and reconciliation results."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from node_labeler.models.tag import TaintDirective, TaintEffect


class NodeTaint(BaseModel):
    """Kubernetes node taint."""

    model_config = ConfigDict(frozen=True)

    key: str
    value: str | None = None
    effect: TaintEffect
    time_added: datetime | None = None

    @classmethod
    def from_directive(cls, directive: TaintDirective) -> "NodeTaint":
        return cls(key=directive.key, value=directive.value, effect=directive.effect)

    @classmethod
    def from_kubernetes(cls, taint) -> "NodeTaint":
        """Build from a kubernetes.client.V1Taint."""
        return cls(
            key=taint.key,
            value=taint.value,
            effect=taint.effect,
            time_added=taint.time_added,
        )

    def to_kubernetes(self):
        """Convert to a kubernetes.client.V1Taint."""
        from kubernetes.client import V1Taint

        return V1Taint(
            key=self.key, value=self.value, effect=self.effect.value, time_added=self.time_added
        )

    def __str__(self) -> str:
        if self.value is None:
            return f"{self.key}:{self.effect.value}"
        return f"{self.key}={self.value}:{self.effect.value}"


class NodeMetadataSnapshot(BaseModel):
    """Labels and taints of a node at the start of a reconciliation pass."""

    model_config = ConfigDict(frozen=True)

    labels: dict[str, str] = Field(default_factory=dict)
    taints: list[NodeTaint] = Field(default_factory=list)

    @classmethod
    def from_kubernetes_node(cls, node) -> "NodeMetadataSnapshot":
        """Build from a kubernetes.client.V1Node."""
        labels = dict(node.metadata.labels or {})
        taints = []
        if node.spec is not None:
            taints = [NodeTaint.from_kubernetes(t) for t in node.spec.taints or []]
        return cls(labels=labels, taints=taints)


class ReconciliationResult(BaseModel):
    """Merged node metadata and whether it needs to be written back."""

    model_config = ConfigDict(frozen=True)

    labels: dict[str, str] = Field(default_factory=dict)
    taints: list[NodeTaint] = Field(default_factory=list)
    changed: bool = False

    def to_snapshot(self) -> NodeMetadataSnapshot:
        """Use the merged metadata as the starting point of another pass."""
        return NodeMetadataSnapshot(labels=dict(self.labels), taints=list(self.taints))
