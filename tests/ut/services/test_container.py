"""ServiceContainer 单元测试"""

from __future__ import annotations

from pathlib import Path

import pytest

import ppm.core.config as cfgmod
from ppm.core.config import Config
from ppm.services.container import ServiceContainer, get_container, reset_container
from ppm.services.forge import GitHubForge
from ppm.services.git import GitRepoClient


@pytest.fixture(autouse=True)
def _setup_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """确保测试有独立的配置和安装目录"""
    monkeypatch.setattr(cfgmod, "_current", Config(root_dir=str(tmp_path / "root")))
    reset_container()
    yield
    reset_container()


class TestServiceContainer:
    def test_lazy_loading(self) -> None:
        c = ServiceContainer()
        assert len(c._instances) == 0
        _ = c.store
        assert "store" in c._instances
        assert "repo" in c._instances

    def test_shared_instances(self) -> None:
        c = ServiceContainer()
        assert c.resolver.store is c.store
        assert c.resolver.synchronizer.store is c.store
        assert c.store.repo is c.repo
        assert c.resolver.repo is c.repo

    def test_defaults_from_config(self, tmp_path: Path) -> None:
        cfg = Config(
            root_dir=str(tmp_path / "r"), api_url="https://ghe.example.com/api/v3",
            github_token="abc", manifest_name="pack.json", arch="arm64-darwin",
        )
        c = ServiceContainer(config=cfg)
        assert isinstance(c.forge, GitHubForge)
        assert c.forge.api_url == "https://ghe.example.com/api/v3"
        assert c.forge.token == "abc"
        assert isinstance(c.repo, GitRepoClient)
        assert c.store.root == tmp_path / "r"
        assert c.store.manifest_name == "pack.json"
        assert c.synchronizer.arch == "arm64-darwin"
        assert c.synchronizer.export_path == tmp_path / "r" / "search_path.pl"

    def test_injected_collaborators(self, world) -> None:
        c = ServiceContainer(forge=world.forge, repo=world.repo, registry=world.registry)
        assert c.forge is world.forge
        assert c.store.repo is world.repo
        assert c.synchronizer.registry is world.registry


class TestGetContainer:
    def test_singleton(self) -> None:
        assert get_container() is get_container()

    def test_reset(self) -> None:
        c1 = get_container()
        reset_container()
        assert get_container() is not c1
