"""Fixtures for a cluster populated with sample namespaces and config maps."""

from typing import Any

import pytest

from policy_nucleus.store import InMemoryCluster

DEFAULT_NAMESPACES = ["default", "kube-node-lease", "kube-public", "kube-system"]
SAMPLE_NAMESPACES = ["foo", "goo", "fake", "faze", "kube-one"]
ALL_NAMESPACES = DEFAULT_NAMESPACES + SAMPLE_NAMESPACES

DEFAULT_CONFIG_MAPS = [
    "kube-system/extension-apiserver-authentication",
    "kube-system/kube-apiserver-legacy-service-account-token-tracking",
]
SAMPLE_CONFIG_MAPS = [
    "default/foo",
    "default/goo",
    "default/fake",
    "default/faze",
    "default/kube-one",
    "default/extension-apiserver-authentication",
    "kube-public/kube-testing",
]
ALL_CONFIG_MAPS = DEFAULT_CONFIG_MAPS + SAMPLE_CONFIG_MAPS


def namespace_doc(name: str, labels: dict[str, str] | None = None) -> dict[str, Any]:
    """Return a raw Namespace document."""
    return {
        "apiVersion": "v1",
        "kind": "Namespace",
        "metadata": {
            "name": name,
            "labels": {"kubernetes.io/metadata.name": name, **(labels or {})},
        },
    }


def config_map_doc(
    namespace: str, name: str, labels: dict[str, str] | None = None
) -> dict[str, Any]:
    """Return a raw ConfigMap document."""
    metadata: dict[str, Any] = {"name": name, "namespace": namespace}
    if labels:
        metadata["labels"] = labels
    return {
        "apiVersion": "v1",
        "kind": "ConfigMap",
        "metadata": metadata,
        "data": {"foo": "bar"},
    }


@pytest.fixture(name="cluster")
def cluster_fixture() -> InMemoryCluster:
    """Fixture for a cluster with the default and sample objects."""
    cluster = InMemoryCluster()
    for name in DEFAULT_NAMESPACES:
        cluster.add_doc(namespace_doc(name))
    for name in SAMPLE_NAMESPACES:
        cluster.add_doc(namespace_doc(name, {"sample": name}))
    for cm in DEFAULT_CONFIG_MAPS:
        namespace, name = cm.split("/")
        cluster.add_doc(config_map_doc(namespace, name))
    for cm in SAMPLE_CONFIG_MAPS:
        namespace, name = cm.split("/")
        cluster.add_doc(config_map_doc(namespace, name, {"sample": name}))
    return cluster
