# vclustermgr

Building blocks for running a fleet of vclusters through GitOps across a
`preprod` and a `prod` environment.

## Installation

```
pip install vclustermgr
pip install "vclustermgr[test]"   # to run the test suite
```

## What is inside

- `vclustermgr.naming`: checks names (`is_valid_name`), splits comma-separated
  RBAC group lists (`split_groups`, which falls back to the default group or
  `admin`), and builds API hosts, ArgoCD URLs and Vault auth paths
  (`api_host`, `argocd_url`, `vault_auth_path`).
- `vclustermgr.velero_config`: turns short TTLs such as `30j`, `12h` or `90m`
  into Velero durations and back (`parse_ttl_text`, `ttl_to_text`), writes the
  Velero `values.yaml` for a backup storage location
  (`generate_velero_values_yaml`), and shows RFC 3339 timestamps in Paris time
  (`format_date`).
- `vclustermgr.kubeconfig`: `rename_kubeconfig` gives the clusters, users and
  contexts of a kubeconfig the name `vcluster-<name>-<env>` and makes it the
  current context. Input it cannot read is returned unchanged.
- `vclustermgr.state`: in-memory state that is safe to use from several threads.
  `MigrationTracker` holds app migrations, which expire after 15 minutes.
  `VaultStateStore` holds `VaultSetupState` records. `ClientRegistry` holds
  per-environment clients and falls back to any registered one.
- `vclustermgr.web`: helpers for HTMX responses. `Response` and `Cookie` build
  a response. `redirect_with_flash` sets `HX-Redirect` and a `flash` cookie,
  which `decode_flash` reads back. `render_toast` writes a toast fragment.
  `require_admin` answers 403 with an error toast for non-admins.
- `vclustermgr.deletion`: works out which environments a deletion touches
  (`deletion_targets`, `DeletionTargets`) and the message to show
  (`deletion_message`). It also builds the repository paths involved
  (`vcluster_files_path`, `kustomization_path`, `counterpart_path`).
- `vclustermgr.helmcharts`: `Updater` bumps the vcluster chart version
  (`update_chart`) or the default Kubernetes version (`update_k8s_version`) in a
  Helm charts repository. It commits on `preprod` and reuses or opens a merge
  request to `master`. Failures raise `UpdaterError`. The GitLab access is an
  object you supply, matching the `GitLab` protocol: `get_file`, `commit`,
  `list_open_merge_requests` and `create_merge_request`.

## Example

```python
from vclustermgr.naming import is_valid_name, api_host
from vclustermgr.velero_config import parse_ttl_text, ttl_to_text

assert is_valid_name("team-a")
print(api_host("team-a", "preprod", "preprod.example.com", "example.com"))
# team-a.api.preprod.example.com

print(parse_ttl_text("30j"))    # 720h0m0s
print(ttl_to_text("720h0m0s"))  # 30j
```

## What it does not do

This package is a library, not an application. It has no web server, routes or
page templates, and no command to run. It does not talk to Kubernetes, GitLab,
Vault, Rancher or Keycloak by itself. The `Updater` works only through the
GitLab object you give it, and all state is kept in memory, not on disk.

## Tests

```
pytest
```