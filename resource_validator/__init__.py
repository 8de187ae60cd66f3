"""Kubernetes resource validator — batch policy checks over a cluster snapshot."""

__version__ = "0.1.0"
