[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "vclustermgr"
version = "0.1.0"
description = "Helpers for managing vclusters through GitOps: naming, Velero settings, kubeconfig renaming, handler state, HTMX responses and Helm chart updates"
requires-python = ">=3.10"
keywords = ["vcluster", "kubernetes", "gitops", "helm", "velero", "htmx"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
    "Typing :: Typed",
]
dependencies = [
    "ruamel-yaml",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[tool.hatch.build.targets.wheel]
packages = ["vclustermgr"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
