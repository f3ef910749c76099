"""Tests for the explicit ignore list."""

import os

import pytest

from bet.errors import ConfigurationError
from bet.ignores import IgnoreList
from bet.indexer.models import AppConfig, RootConfig


@pytest.fixture
def ignores(store, code_root):
    store.write_config(AppConfig(roots=[RootConfig(path=code_root, name="code")]))
    return IgnoreList(store)


def test_add_and_list(ignores, code_root):
    """Test an ignored path is stored normalized."""
    target = os.path.join(code_root, "old")
    assert ignores.add(target + "/") is True
    assert ignores.list() == [target]


def test_add_twice(ignores, code_root):
    """Test adding an already ignored path reports no change."""
    target = os.path.join(code_root, "old")
    ignores.add(target)
    assert ignores.add(target) is False
    assert ignores.list() == [target]


def test_add_relative_path(ignores, code_root, monkeypatch):
    """Test relative paths resolve against the working directory."""
    monkeypatch.chdir(code_root)
    ignores.add("legacy")
    assert ignores.list() == [os.path.join(code_root, "legacy")]


def test_add_root_itself(ignores, code_root):
    """Test a root may be ignored as a whole."""
    assert ignores.add(code_root) is True


def test_add_requires_roots(store, code_root):
    """Test adding fails before any roots are configured."""
    with pytest.raises(ConfigurationError, match="No roots configured"):
        IgnoreList(store).add(os.path.join(code_root, "x"))
    assert not os.path.exists(store.paths.config_path)


def test_add_outside_roots(ignores, tmp_path):
    """Test adding a path outside every root fails."""
    with pytest.raises(ConfigurationError, match="Path must be under a configured root"):
        ignores.add(str(tmp_path / "elsewhere"))
    assert ignores.list() == []


def test_add_keeps_other_settings(ignores, store, code_root):
    """Test only the ignore list changes in the config document."""
    config = store.read_config()
    config.ignores = ["**/tmp/**"]
    store.write_config(config)

    ignores.add(os.path.join(code_root, "old"))

    saved = store.read_config()
    assert saved.ignores == ["**/tmp/**"]
    assert saved.roots == [RootConfig(path=code_root, name="code")]


def test_remove(ignores, store, code_root):
    """Test removing the last path clears the list from the document."""
    target = os.path.join(code_root, "old")
    ignores.add(target)
    assert ignores.remove(target) is True
    assert ignores.list() == []
    assert store.read_config().ignored_paths is None


def test_remove_missing(ignores, code_root):
    """Test removing a path that is not ignored reports no change."""
    assert ignores.remove(os.path.join(code_root, "nope")) is False
