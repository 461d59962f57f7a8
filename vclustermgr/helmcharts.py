"""Chart and Kubernetes version updates of the vcluster Helm chart through GitLab."""

from __future__ import annotations

import io
from collections.abc import Mapping, MutableMapping, Sequence
from dataclasses import dataclass
from typing import Any, List, Optional, Protocol

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

__all__ = [
    "DEFAULT_CHART_PATH",
    "K8S_TAG_PATH",
    "CommitAction",
    "PendingMR",
    "UpdaterError",
    "GitLab",
    "Updater",
    "set_yaml_node_value",
    "set_dependency_version",
    "trim_v",
]

DEFAULT_CHART_PATH = "charts/vcluster"
K8S_TAG_PATH = ("vcluster", "controlPlane", "distro", "k8s", "image", "tag")

_SOURCE_BRANCH = "preprod"
_TARGET_BRANCH = "master"
_CHART_MR_MARKER = "update vcluster chart"
_K8S_MR_MARKER = "update default K8s version"


class UpdaterError(Exception):
    """Raised when a chart file cannot be read, changed or committed."""


@dataclass(frozen=True)
class CommitAction:
    """One file change of a GitLab commit: "create", "update" or "delete"."""

    action: str
    path: str
    content: str = ""


@dataclass(frozen=True)
class PendingMR:
    """An open merge request."""

    title: str
    web_url: str


class _MergeRequest(Protocol):
    title: str
    web_url: str


class GitLab(Protocol):
    """The GitLab operations the updater relies on."""

    def get_file(self, branch: str, path: str) -> str: ...

    def commit(self, branch: str, message: str, actions: List[CommitAction]) -> None: ...

    def list_open_merge_requests(
        self, target_branch: str, source_branch: str
    ) -> Sequence[_MergeRequest]: ...

    def create_merge_request(
        self, source_branch: str, target_branch: str, title: str, description: str
    ) -> str: ...


def _key_text(key: Any) -> str:
    if key is None:
        return ""
    if isinstance(key, bool):
        return "true" if key else "false"
    return str(key)


def set_yaml_node_value(node: Any, path: Sequence[str], value: str) -> bool:
    """Set the string value found under the key path of a loaded YAML mapping.

    Only the first matching key at each level is followed. Returns whether the
    value was set.
    """
    if not isinstance(node, MutableMapping) or not path:
        return False
    key = path[0]
    for existing in list(node.keys()):
        if _key_text(existing) == key:
            if len(path) == 1:
                node[existing] = str(value)
                return True
            return set_yaml_node_value(node[existing], path[1:], value)
    return False


def set_dependency_version(node: Any, dep_name: str, version: str) -> bool:
    """Set the version of the named entry in the "dependencies" list.

    Returns whether an entry with that name and a version key was found.
    """
    if not isinstance(node, Mapping):
        return False
    for key, deps in node.items():
        if _key_text(key) != "dependencies" or not isinstance(deps, list):
            continue
        for item in deps:
            if not isinstance(item, MutableMapping):
                continue
            name_match = any(
                _key_text(k) == "name" and _key_text(v) == dep_name for k, v in item.items()
            )
            if not name_match:
                continue
            for k in list(item.keys()):
                if _key_text(k) == "version":
                    item[k] = str(version)
                    return True
    return False


def trim_v(tag: str) -> str:
    """Drop one leading "v" from a release tag."""
    return tag[1:] if tag.startswith("v") else tag


def _lookup(document: Any, path: Sequence[str], file_name: str) -> str:
    """Read a string at a key path of a document loaded with all scalars as strings."""
    current = document
    for key in path:
        if current is None:
            return ""
        if not isinstance(current, Mapping):
            raise UpdaterError(f"parsing {file_name}: {key!r} is not under a mapping")
        current = current.get(key)
    if current is None:
        return ""
    if not isinstance(current, str):
        raise UpdaterError(f"parsing {file_name}: value at {'.'.join(path)} is not a scalar")
    return current


def _round_trip() -> YAML:
    yaml = YAML()
    yaml.preserve_quotes = True
    return yaml


class Updater:
    """Updates the vcluster chart in the Helm charts repository.

    Changes are committed on preprod; a merge request preprod → master carries
    them to production unless one is already open.
    """

    def __init__(self, gitlab: GitLab, chart_path: str = DEFAULT_CHART_PATH) -> None:
        self._gitlab = gitlab
        self.chart_path = chart_path or DEFAULT_CHART_PATH

    @property
    def _chart_file(self) -> str:
        return f"{self.chart_path}/Chart.yaml"

    @property
    def _values_file(self) -> str:
        return f"{self.chart_path}/values.yaml"

    def _read(self, branch: str, path: str, what: str) -> str:
        try:
            return self._gitlab.get_file(branch, path)
        except Exception as exc:
            raise UpdaterError(f"{what}: {exc}") from exc

    def _read_plain(self, branch: str, path: str, file_name: str) -> Any:
        content = self._read(branch, path, f"reading {file_name}")
        try:
            return YAML(typ="base").load(content)
        except YAMLError as exc:
            raise UpdaterError(f"parsing {file_name}: {exc}") from exc

    def get_current_chart_version(self, branch: str) -> str:
        """The chart version in Chart.yaml on the branch."""
        document = self._read_plain(branch, self._chart_file, "Chart.yaml")
        return _lookup(document, ("version",), "Chart.yaml")

    def get_default_k8s_version(self, branch: str) -> str:
        """The default Kubernetes image tag in values.yaml on the branch."""
        document = self._read_plain(branch, self._values_file, "values.yaml")
        return _lookup(document, K8S_TAG_PATH, "values.yaml")

    def _pending_mr(self, marker: str) -> Optional[PendingMR]:
        try:
            mrs = self._gitlab.list_open_merge_requests(_TARGET_BRANCH, _SOURCE_BRANCH)
        except Exception:
            return None
        for mr in mrs:
            if marker in mr.title:
                return PendingMR(title=mr.title, web_url=mr.web_url)
        return None

    def get_pending_chart_mr(self) -> Optional[PendingMR]:
        """An open preprod → master merge request updating the chart, if any."""
        return self._pending_mr(_CHART_MR_MARKER)

    def get_pending_k8s_mr(self) -> Optional[PendingMR]:
        """An open preprod → master merge request updating the K8s version, if any."""
        return self._pending_mr(_K8S_MR_MARKER)

    def update_chart(self, tag: str) -> str:
        """Bump the chart to ``tag`` on preprod and return the production MR URL."""
        try:
            actions = self._chart_version_actions(_SOURCE_BRANCH, trim_v(tag))
        except UpdaterError as exc:
            raise UpdaterError(f"building actions: {exc}") from exc

        message = f"feat: update vcluster chart to {tag}"
        return self._commit_and_promote(
            message,
            actions,
            self.get_pending_chart_mr,
            f"Mise a jour du chart vcluster vers {tag} en production.",
        )

    def update_k8s_version(self, version: str) -> str:
        """Set the default K8s version on preprod and return the production MR URL."""
        try:
            actions = self._k8s_version_actions(_SOURCE_BRANCH, version)
        except UpdaterError as exc:
            raise UpdaterError(f"building actions: {exc}") from exc

        message = f"feat: update default K8s version to {version}"
        return self._commit_and_promote(
            message,
            actions,
            self.get_pending_k8s_mr,
            f"Mise a jour de la version K8s par defaut vers {version} en production.",
        )

    def _commit_and_promote(self, message, actions, pending, description) -> str:
        try:
            self._gitlab.commit(_SOURCE_BRANCH, message, actions)
        except Exception as exc:
            raise UpdaterError(f"committing to preprod: {exc}") from exc

        existing = pending()
        if existing is not None:
            return existing.web_url

        try:
            return self._gitlab.create_merge_request(
                _SOURCE_BRANCH, _TARGET_BRANCH, message, description
            )
        except Exception as exc:
            raise UpdaterError(f"creating merge request: {exc}") from exc

    def _load_round_trip(self, branch: str, path: str, file_name: str) -> tuple:
        content = self._read(branch, path, f"reading {file_name} on {branch}")
        yaml = _round_trip()
        try:
            return yaml, yaml.load(content)
        except YAMLError as exc:
            raise UpdaterError(f"parsing {file_name}: {exc}") from exc

    @staticmethod
    def _dump(yaml: YAML, document: Any, file_name: str) -> str:
        out = io.StringIO()
        try:
            yaml.dump(document, out)
        except YAMLError as exc:
            raise UpdaterError(f"marshaling {file_name}: {exc}") from exc
        return out.getvalue()

    def _chart_version_actions(self, branch: str, semver: str) -> List[CommitAction]:
        yaml, document = self._load_round_trip(branch, self._chart_file, "Chart.yaml")
        set_yaml_node_value(document, ["version"], semver)
        set_yaml_node_value(document, ["appVersion"], semver)
        set_dependency_version(document, "vcluster", semver)
        content = self._dump(yaml, document, "Chart.yaml")
        return [CommitAction(action="update", path=self._chart_file, content=content)]

    def _k8s_version_actions(self, branch: str, version: str) -> List[CommitAction]:
        yaml, document = self._load_round_trip(branch, self._values_file, "values.yaml")
        if not set_yaml_node_value(document, list(K8S_TAG_PATH), version):
            raise UpdaterError(
                "could not find vcluster.controlPlane.distro.k8s.image.tag in values.yaml"
            )
        content = self._dump(yaml, document, "values.yaml")
        return [CommitAction(action="update", path=self._values_file, content=content)]