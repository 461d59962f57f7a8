"""Helpers for managing vclusters through GitOps: naming, Velero settings, kubeconfigs, handler state, HTMX responses, deletions and Helm chart updates."""

__version__ = "0.1.0"