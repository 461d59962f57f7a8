"""Renaming of the clusters, users and contexts of a vcluster kubeconfig."""

from __future__ import annotations

import io
import logging

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

__all__ = ["rename_kubeconfig"]

log = logging.getLogger(__name__)


def _yaml() -> YAML:
    yaml = YAML()
    yaml.default_flow_style = False
    return yaml


def rename_kubeconfig(data: bytes | str, name: str, env: str) -> bytes:
    """Give every cluster, user and context the name "vcluster-<name>-<env>".

    The current context is set to that name too. If the document cannot be
    read or written, the original bytes are returned unchanged.
    """
    raw = data.encode() if isinstance(data, str) else bytes(data)
    yaml = _yaml()
    try:
        kc = yaml.load(raw)
    except YAMLError as exc:
        log.warning("could not parse kubeconfig for renaming: %s", exc)
        return raw
    if not isinstance(kc, dict):
        log.warning("could not parse kubeconfig for renaming: not a mapping")
        return raw

    context_name = f"vcluster-{name}-{env}"

    for section in ("clusters", "users"):
        entries = kc.get(section)
        if isinstance(entries, list):
            for entry in entries:
                if isinstance(entry, dict):
                    entry["name"] = context_name

    contexts = kc.get("contexts")
    if isinstance(contexts, list):
        for entry in contexts:
            if isinstance(entry, dict):
                entry["name"] = context_name
                ctx = entry.get("context")
                if isinstance(ctx, dict):
                    ctx["cluster"] = context_name
                    ctx["user"] = context_name

    kc["current-context"] = context_name

    out = io.BytesIO()
    try:
        yaml.dump(kc, out)
    except YAMLError as exc:
        log.warning("could not marshal kubeconfig after renaming: %s", exc)
        return raw
    return out.getvalue()