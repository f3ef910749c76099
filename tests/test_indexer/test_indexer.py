"""Tests for the update run."""

import json
import os
from datetime import datetime, timezone

import pytest

from bet.errors import ConfigurationError
from bet.indexer.indexer import Indexer, will_override_roots
from bet.indexer.models import AppConfig, RootConfig, UserMetadata


@pytest.fixture
def indexer(store, fake_vcs):
    return Indexer(store, fake_vcs, workers=2)


def _strip_indexed_at(document):
    for record in document["projects"].values():
        record["auto"].pop("lastIndexedAt")
    return document


class TestIndexerInit:
    def test_defaults(self, store, fake_vcs):
        indexer = Indexer(store, fake_vcs)
        assert indexer.workers == 8

    def test_rejects_zero_workers(self, store, fake_vcs):
        with pytest.raises(ValueError, match="Worker count"):
            Indexer(store, fake_vcs, workers=0)


class TestWillOverrideRoots:
    def test_no_provided_roots(self):
        assert will_override_roots(None, [RootConfig(path="/a", name="a")]) is False

    def test_nothing_configured(self):
        assert will_override_roots([RootConfig(path="/a", name="a")], []) is False

    def test_override(self):
        configured = [RootConfig(path="/a", name="a")]
        assert will_override_roots([RootConfig(path="/b", name="b")], configured) is True


class TestUpdate:
    def test_no_roots_writes_nothing(self, indexer, store):
        with pytest.raises(ConfigurationError, match="No roots specified"):
            indexer.update()
        assert not os.path.exists(store.paths.config_path)
        assert not os.path.exists(store.paths.projects_path)

    def test_first_run_saves_roots_and_index(
        self, indexer, store, code_root, make_project, fake_vcs
    ):
        api = make_project(code_root, "api", git=True, readme="# API\n\nServes things.\n")
        docs = make_project(code_root, "docs", readme="# Docs\n")
        fake_vcs.repos.add(api)

        report = indexer.update([code_root])

        assert report.project_count == 2
        assert report.root_count == 1
        assert store.read_config().roots == [RootConfig(path=code_root, name="code")]

        projects = store.read_projects()
        assert set(projects) == {api, docs}
        assert projects[api].slug == "api"
        assert projects[api].root == code_root
        assert projects[api].root_name == "code"
        assert projects[api].has_git is True
        assert projects[api].has_readme is True
        assert projects[api].auto.description == "Serves things."
        assert projects[api].auto.dirty is False
        assert projects[docs].has_git is False
        assert projects[docs].auto.dirty is None
        assert projects[docs].auto.description == "Docs"

    def test_configured_roots_are_used_and_config_kept(
        self, indexer, store, code_root, make_project
    ):
        proj = make_project(code_root, "proj", git=True)
        config = AppConfig(
            roots=[RootConfig(path=code_root, name="Mine")],
            slug_parent_folders=["src"],
        )
        store.write_config(config)
        before = os.stat(store.paths.config_path).st_mtime_ns

        report = indexer.update()

        assert list(report.projects) == [proj]
        assert report.projects[proj].root_name == "Mine"
        assert os.stat(store.paths.config_path).st_mtime_ns == before
        assert store.read_config() == config

    def test_provided_roots_replace_configured(self, indexer, store, tmp_path, make_project):
        old_root = str(tmp_path / "old")
        new_root = str(tmp_path / "new")
        make_project(old_root, "legacy", git=True)
        fresh = make_project(new_root, "fresh", git=True)
        store.write_config(
            AppConfig(roots=[RootConfig(path=old_root, name="old")], ignored_paths=["/x"])
        )

        report = indexer.update([new_root])

        assert list(report.projects) == [fresh]
        config = store.read_config()
        assert [r.path for r in config.roots] == [new_root]
        assert config.ignored_paths == ["/x"]

    def test_user_block_survives_rescan(self, indexer, store, code_root, make_project):
        proj = make_project(code_root, "proj", git=True)
        indexer.update([code_root])

        with open(store.paths.projects_path) as f:
            document = json.load(f)
        document["projects"][proj]["user"] = {"tags": ["work"], "onEnter": "nvm use"}
        with open(store.paths.projects_path, "w") as f:
            json.dump(document, f)

        report = indexer.update()

        assert report.projects[proj].user == UserMetadata(tags=["work"], on_enter="nvm use")
        assert store.read_projects()[proj].user.tags == ["work"]

    def test_vanished_project_is_dropped(self, indexer, store, code_root, make_project):
        keep = make_project(code_root, "keep", git=True)
        gone = make_project(code_root, "gone", git=True)
        indexer.update([code_root])
        os.rmdir(os.path.join(gone, ".git"))

        report = indexer.update()

        assert report.dropped == [gone]
        assert list(store.read_projects()) == [keep]

    def test_rerun_is_stable(self, indexer, store, code_root, make_project):
        make_project(code_root, "a", git=True, readme="# A\n")
        make_project(code_root, "b/src", readme="# B\n")
        indexer.update([code_root])
        with open(store.paths.projects_path) as f:
            first = _strip_indexed_at(json.load(f))

        indexer.update()
        with open(store.paths.projects_path) as f:
            second = _strip_indexed_at(json.load(f))

        assert first == second

    def test_explicit_ignores(self, indexer, store, code_root, make_project):
        make_project(code_root, "secret", git=True)
        make_project(code_root, "secret/inner", readme="# Inner\n")
        visible = make_project(code_root, "visible", git=True)
        store.write_config(
            AppConfig(
                roots=[RootConfig(path=code_root, name="code")],
                ignored_paths=[os.path.join(code_root, "secret")],
            )
        )

        report = indexer.update()

        assert list(report.projects) == [visible]

    def test_glob_override(self, indexer, store, code_root, make_project):
        dep = make_project(code_root, "node_modules/dep", readme="# Dep\n")
        make_project(code_root, "scratch/tmp", readme="# Tmp\n")
        store.write_config(
            AppConfig(roots=[RootConfig(path=code_root, name="code")], ignores=["**/scratch/**"])
        )

        report = indexer.update()

        assert list(report.projects) == [dep]

    def test_slug_parent_folders(self, indexer, store, code_root, make_project):
        nested = make_project(code_root, "my-api/src", readme="# API\n")
        indexer.update([code_root])
        assert store.read_projects()[nested].slug == "my-api"

    def test_custom_slug_parent_folders(self, indexer, store, code_root, make_project):
        nested = make_project(code_root, "my-api/src", readme="# API\n")
        store.write_config(
            AppConfig(roots=[RootConfig(path=code_root, name="code")], slug_parent_folders=[])
        )
        indexer.update()
        assert store.read_projects()[nested].slug == "src"

    def test_git_metadata(self, indexer, store, code_root, make_project, fake_vcs):
        proj = make_project(code_root, "proj", git=True)
        fake_vcs.repos.add(proj)
        fake_vcs.first_commits[proj] = datetime(2021, 3, 4, 5, 6, 7, tzinfo=timezone.utc)
        fake_vcs.dirty[proj] = True

        report = indexer.update([code_root])

        auto = report.projects[proj].auto
        assert auto.started_at == "2021-03-04T05:06:07.000Z"
        assert auto.dirty is True

    def test_readme_only_project_inside_repo(
        self, indexer, code_root, make_project, fake_vcs
    ):
        proj = make_project(code_root, "proj", readme="# Proj\n")
        fake_vcs.repos.add(code_root)

        report = indexer.update([code_root])

        assert report.projects[proj].has_git is True
        assert report.projects[proj].auto.dirty is False

    def test_missing_root_reports_warning(self, indexer, tmp_path, make_project):
        good = str(tmp_path / "good")
        proj = make_project(good, "proj", git=True)

        report = indexer.update([good, str(tmp_path / "missing")])

        assert list(report.projects) == [proj]
        assert report.root_count == 2
        assert report.warnings

    def test_repo_probe_runs_once_per_candidate(self, indexer, code_root, make_project, fake_vcs):
        proj = make_project(code_root, "proj", readme="# Proj\n")

        indexer.update([code_root])

        assert fake_vcs.calls.count(("is_repo", proj)) == 1

    def test_unparsed_user_values_survive_rescan(self, indexer, store, code_root, make_project):
        proj = make_project(code_root, "proj", git=True)
        indexer.update([code_root])
        user = {"description": None, "tags": ["work", 3], "onEnter": "ls", "pinned": True}

        with open(store.paths.projects_path) as f:
            document = json.load(f)
        document["projects"][proj]["user"] = user
        with open(store.paths.projects_path, "w") as f:
            json.dump(document, f)

        indexer.update()

        with open(store.paths.projects_path) as f:
            assert json.load(f)["projects"][proj]["user"] == user
