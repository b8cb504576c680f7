"""Custom exceptions for the node labeler."""


class NodeLabelerError(Exception):
    """Base exception for all node labeler errors."""

    def __init__(self, message: str, details: str = None):
        """Initialize the exception.

        Args:
            message: Main error message
            details: Additional details or suggestions
        """
        self.message = message
        self.details = details
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format the complete error message.

        Returns:
            Formatted error message with details
        """
        if self.details:
            return f"{self.message}\n\nDetails: {self.details}"
        return self.message


class TagParseError(NodeLabelerError):
    """Exception raised when a managed EC2 tag cannot be decoded."""

    pass


class MalformedKeyError(TagParseError):
    """Exception raised when a tag key does not have four segments."""

    pass


class MalformedValueError(TagParseError):
    """Exception raised when a taint tag value is not 'value:Effect'."""

    pass


class IdentifierMalformedError(NodeLabelerError):
    """Exception raised when a node providerID cannot be parsed."""

    pass


class MissingRegionError(NodeLabelerError):
    """Exception raised when a node carries no region label."""

    pass


class LookupAmbiguousError(NodeLabelerError):
    """Exception raised when an instance lookup does not match exactly one instance."""

    pass


class CloudProviderError(NodeLabelerError):
    """Exception raised for EC2 API errors."""

    pass


class KubernetesError(NodeLabelerError):
    """Exception raised for Kubernetes API errors."""

    pass


class ConfigurationError(NodeLabelerError):
    """Exception raised for configuration errors."""

    pass
