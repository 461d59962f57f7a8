"""Which environments a vcluster deletion touches, and the GitOps paths involved."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

__all__ = [
    "ENVIRONMENTS",
    "DeletionTargets",
    "deletion_targets",
    "deletion_message",
    "vcluster_files_path",
    "kustomization_path",
    "counterpart_path",
]

ENVIRONMENTS: Tuple[str, ...] = ("preprod", "prod")
_DEFAULT_ENV = "preprod"


@dataclass(frozen=True)
class DeletionTargets:
    """The environments from which a vcluster is to be removed."""

    preprod: bool
    prod: bool

    def includes(self, env: str) -> bool:
        """Whether the deletion covers the given environment."""
        if env == "preprod":
            return self.preprod
        if env == "prod":
            return self.prod
        return False

    @property
    def envs(self) -> Tuple[str, ...]:
        """The covered environments, preprod first."""
        return tuple(env for env in ENVIRONMENTS if self.includes(env))

    @property
    def both(self) -> bool:
        return self.preprod and self.prod


def deletion_targets(env: str, delete_counterpart: bool = False) -> DeletionTargets:
    """Work out the environments to delete from.

    The requested environment is always covered; the other one only when the
    counterpart is to be deleted as well. An empty environment means preprod.
    """
    env = env or _DEFAULT_ENV
    return DeletionTargets(
        preprod=env == "preprod" or (env == "prod" and delete_counterpart),
        prod=env == "prod" or (env == "preprod" and delete_counterpart),
    )


def deletion_message(name: str, delete_preprod: bool, delete_prod: bool) -> str:
    """The confirmation shown once a deletion has been launched."""
    if delete_preprod and delete_prod:
        return f"vcluster {name} supprimé"
    if delete_prod:
        return f"vcluster {name} (prod) supprimé"
    return f"vcluster {name} (preprod) supprimé"


def vcluster_files_path(clusters_path: str, env: str, name: str) -> str:
    """Directory holding a vcluster's manifests for one environment."""
    return f"{clusters_path}/{env}/vclusters/{name}"


def kustomization_path(clusters_path: str, env: str) -> str:
    """The cluster kustomization.yaml listing an environment's vclusters."""
    return f"{clusters_path}/{env}/kustomization.yaml"


def counterpart_path(clusters_path: str, env: str, name: str) -> str:
    """Directory of the same vcluster in the other environment."""
    other = "preprod" if env == "prod" else "prod"
    return vcluster_files_path(clusters_path, other, name)