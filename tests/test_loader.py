"""Tests for loading cluster objects from local files."""

from pathlib import Path

import pytest

from policy_nucleus.exceptions import InputException
from policy_nucleus.loader import load_cluster, read_docs
from policy_nucleus.resources import NamedResource

CONFIG_MAPS = """\
---
apiVersion: v1
kind: ConfigMap
metadata:
  name: foo
  namespace: default
---
---
apiVersion: v1
kind: ConfigMapList
items:
- apiVersion: v1
  kind: ConfigMap
  metadata:
    name: goo
    namespace: default
"""

NAMESPACES = """\
apiVersion: v1
kind: List
items:
- apiVersion: v1
  kind: Namespace
  metadata:
    name: default
- apiVersion: v1
  kind: Namespace
  metadata:
    name: kube-system
"""


async def test_read_docs(tmp_path: Path) -> None:
    """Test reading multiple documents and expanding lists."""
    path = tmp_path / "configmaps.yaml"
    path.write_text(CONFIG_MAPS)
    docs = await read_docs(path)
    assert [doc["metadata"]["name"] for doc in docs] == ["foo", "goo"]


async def test_load_cluster(tmp_path: Path) -> None:
    """Test loading a directory of files into a cluster."""
    (tmp_path / "cms").mkdir()
    (tmp_path / "cms" / "configmaps.yml").write_text(CONFIG_MAPS)
    (tmp_path / "namespaces.yaml").write_text(NAMESPACES)
    (tmp_path / "notes.txt").write_text("kind: [")

    cluster = await load_cluster([tmp_path])
    assert cluster.get_doc(NamedResource("ConfigMap", "default", "goo")) is not None
    assert cluster.get_doc(NamedResource("Namespace", None, "kube-system")) is not None
    namespaces = await cluster.resource("Namespace").list()
    assert [ns.name for ns in namespaces.items] == ["default", "kube-system"]


async def test_load_multiple_paths(tmp_path: Path) -> None:
    """Test loading files from more than one path."""
    (tmp_path / "configmaps.yaml").write_text(CONFIG_MAPS)
    (tmp_path / "namespaces.yaml").write_text(NAMESPACES)
    cluster = await load_cluster(
        [tmp_path / "configmaps.yaml", tmp_path / "namespaces.yaml"]
    )
    cms = await cluster.resource("ConfigMap").list()
    assert [cm.name for cm in cms.items] == ["foo", "goo"]


async def test_missing_path(tmp_path: Path) -> None:
    """Test a path that does not exist."""
    with pytest.raises(InputException, match="Unable to find input path"):
        await load_cluster([tmp_path / "missing.yaml"])


async def test_invalid_yaml(tmp_path: Path) -> None:
    """Test a file that is not valid yaml."""
    path = tmp_path / "bad.yaml"
    path.write_text("kind: [")
    with pytest.raises(InputException, match="Unable to parse"):
        await read_docs(path)


async def test_not_an_object(tmp_path: Path) -> None:
    """Test a document that is not a kubernetes object."""
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n")
    with pytest.raises(InputException, match="expected an object"):
        await read_docs(path)
