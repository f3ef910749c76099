"""Tests for ignore resolution."""

import warnings

import pytest
from pathspec import GitIgnoreSpec

from bet.indexer.ignore import (
    DEFAULT_GLOB_IGNORES,
    build_ignore_spec,
    effective_glob_ignores,
    effective_path_ignores,
    is_dir_ignored,
    is_path_ignored,
    without_vcs_internals,
)
from bet.indexer.models import AppConfig


class TestEffectiveGlobIgnores:
    def test_defaults_without_override(self):
        assert effective_glob_ignores(AppConfig()) == list(DEFAULT_GLOB_IGNORES)

    def test_override_replaces_defaults(self):
        assert effective_glob_ignores(AppConfig(ignores=["x"])) == ["x"]

    def test_empty_override_disables_defaults(self):
        assert effective_glob_ignores(AppConfig(ignores=[])) == []

    def test_defaults_cover_common_ecosystems(self):
        spec = build_ignore_spec(DEFAULT_GLOB_IGNORES)
        for name in ("node_modules", "dist", "build", ".git", "target", ".venv", "venv", "__pycache__"):
            assert is_dir_ignored(spec, f"project/{name}"), name


class TestEffectivePathIgnores:
    def test_empty_without_list(self):
        assert effective_path_ignores(AppConfig()) == []

    def test_normalizes_entries(self):
        config = AppConfig(ignored_paths=["/r/a/", "/r/b/../c"])
        assert effective_path_ignores(config) == ["/r/a", "/r/c"]


class TestIsPathIgnored:
    IGNORES = ["/r/a"]

    def test_reflexive(self):
        assert is_path_ignored("/r/a", self.IGNORES)

    @pytest.mark.parametrize("path", ["/r/a/b", "/r/a/b/c", "/r/a/.hidden"])
    def test_descendants_are_ignored(self, path):
        assert is_path_ignored(path, self.IGNORES)

    @pytest.mark.parametrize("path", ["/r/b", "/r/ab", "/r", "/other/a"])
    def test_siblings_and_ancestors_are_not(self, path):
        assert not is_path_ignored(path, self.IGNORES)

    def test_no_ignores(self):
        assert not is_path_ignored("/r/a", [])


class TestIgnoreSpec:
    def test_bare_name_matches_directory_anywhere(self):
        spec = build_ignore_spec(["x"])
        assert is_dir_ignored(spec, "x")
        assert is_dir_ignored(spec, "a/b/x")
        assert not is_dir_ignored(spec, "a/xy")

    def test_double_star_pattern(self):
        spec = build_ignore_spec(["**/node_modules/**"])
        assert is_dir_ignored(spec, "node_modules")
        assert is_dir_ignored(spec, "web/node_modules")
        assert not is_dir_ignored(spec, "web/src")

    def test_comments_and_blank_lines_are_skipped(self):
        spec = build_ignore_spec(["# comment", "", "dist"])
        assert is_dir_ignored(spec, "dist")
        assert not is_dir_ignored(spec, "comment")

    def test_without_vcs_internals(self):
        patterns = ["**/.git/**", ".git", "**/dist/**"]
        assert without_vcs_internals(patterns) == ["**/dist/**"]

    def test_compiles_without_deprecation_warnings(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            spec = build_ignore_spec(DEFAULT_GLOB_IGNORES)
            assert is_dir_ignored(spec, "web/node_modules")
        assert isinstance(spec, GitIgnoreSpec)
