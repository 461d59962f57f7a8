"""Naming rules and derived names for vclusters."""

from __future__ import annotations

import re
from typing import List

__all__ = [
    "split_groups",
    "is_valid_name",
    "api_host",
    "argocd_url",
    "vault_auth_path",
]

_NAME = re.compile(r"[a-z][a-z0-9-]*")
_FALLBACK_GROUP = "admin"


def split_groups(s: str, default_group: str = "") -> List[str]:
    """Split a comma-separated group list, dropping blanks.

    With no groups left, returns the default group, or "admin" if there is none.
    """
    groups = [g.strip() for g in s.split(",") if g.strip()]
    if groups:
        return groups
    return [default_group or _FALLBACK_GROUP]


def is_valid_name(name: str) -> bool:
    """A vcluster name starts with a lowercase letter and uses only [a-z0-9-]."""
    return _NAME.fullmatch(name) is not None


def _domain(env: str, domain_preprod: str, domain_prod: str) -> str:
    return domain_preprod if env == "preprod" else domain_prod


def api_host(name: str, env: str, domain_preprod: str, domain_prod: str) -> str:
    """Host name of the vcluster API server for the environment."""
    return f"{name}.api.{_domain(env, domain_preprod, domain_prod)}"


def argocd_url(name: str, env: str, domain_preprod: str, domain_prod: str) -> str:
    """URL of the vcluster's ArgoCD instance for the environment."""
    return f"https://argocd.{name}.{_domain(env, domain_preprod, domain_prod)}"


def vault_auth_path(name: str, env: str) -> str:
    """Mount path of the Vault Kubernetes auth backend for the vcluster."""
    return f"kubernetes-vcluster-{name}-{env}"