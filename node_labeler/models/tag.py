"""Data models for EC2 tags and the directives decoded from them."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class TaintEffect(str, Enum):
    """Kubernetes taint effects."""

    NO_SCHEDULE = "NoSchedule"
    PREFER_NO_SCHEDULE = "PreferNoSchedule"
    NO_EXECUTE = "NoExecute"


class DirectiveKind(str, Enum):
    """What a managed tag asks to be set on the node."""

    LABEL = "label"
    TAINT = "taint"


class CloudTag(BaseModel):
    """A key/value tag attached to an EC2 instance."""

    model_config = ConfigDict(frozen=True)

    key: str
    value: str

    @classmethod
    def from_ec2(cls, data: dict) -> "CloudTag":
        """Parse from the EC2 API tag shape ({"Key": ..., "Value": ...})."""
        return cls(key=data["Key"], value=data.get("Value", ""))


class LabelDirective(BaseModel):
    """Set a node label."""

    model_config = ConfigDict(frozen=True)

    key: str
    value: str

    @property
    def kind(self) -> DirectiveKind:
        return DirectiveKind.LABEL


class TaintDirective(BaseModel):
    """Add a node taint."""

    model_config = ConfigDict(frozen=True)

    key: str
    value: str
    effect: TaintEffect

    @property
    def kind(self) -> DirectiveKind:
        return DirectiveKind.TAINT

    def __str__(self) -> str:
        return f"{self.key}={self.value}:{self.effect.value}"


Directive = LabelDirective | TaintDirective
