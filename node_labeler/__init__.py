"""Propagate EC2 instance tags onto Kubernetes node labels and taints."""

__version__ = "0.1.0"
