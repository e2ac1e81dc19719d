"""GitHubForge — 标签分页与错误映射（patch urlopen，无真实网络）"""

from __future__ import annotations

import io
import json
import urllib.error
import urllib.request

import pytest

from ppm.core.exceptions import ForgeUnavailableError
from ppm.core.models import PackageRef
from ppm.services import forge as forgemod
from ppm.services.forge import GitHubForge


class _Resp(io.BytesIO):
    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


def _pages(monkeypatch: pytest.MonkeyPatch, pages: list[object]) -> list[urllib.request.Request]:
    seen: list[urllib.request.Request] = []

    def fake_urlopen(req, timeout=None):
        seen.append(req)
        body = pages[len(seen) - 1]
        raw = body if isinstance(body, bytes) else json.dumps(body).encode()
        return _Resp(raw)

    monkeypatch.setattr(forgemod.urllib.request, "urlopen", fake_urlopen)
    return seen


REF = PackageRef("alice", "foo")


class TestListTags:
    def test_single_page(self, monkeypatch: pytest.MonkeyPatch) -> None:
        seen = _pages(monkeypatch, [[{"name": "V1.0.0"}, {"name": "nightly"}, {"sha": "x"}]])
        tags = GitHubForge(token="secret").list_tags(REF)
        assert tags == ["V1.0.0", "nightly"]
        req = seen[0]
        assert req.full_url == "https://api.github.com/repos/alice/foo/tags?per_page=100&page=1"
        assert req.get_header("Accept") == "application/vnd.github.v3+json"
        assert req.get_header("Authorization") == "token secret"

    def test_follows_pages(self, monkeypatch: pytest.MonkeyPatch) -> None:
        full = [{"name": f"V0.0.{i}"} for i in range(forgemod.PER_PAGE)]
        seen = _pages(monkeypatch, [full, [{"name": "V1.0.0"}]])
        tags = GitHubForge().list_tags(REF)
        assert len(tags) == forgemod.PER_PAGE + 1
        assert seen[1].full_url.endswith("page=2")

    def test_no_auth_header_without_token(self, monkeypatch: pytest.MonkeyPatch) -> None:
        seen = _pages(monkeypatch, [[]])
        assert GitHubForge().list_tags(REF) == []
        assert seen[0].get_header("Authorization") is None

    def test_not_a_list(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _pages(monkeypatch, [{"message": "rate limited"}])
        with pytest.raises(ForgeUnavailableError, match="格式异常"):
            GitHubForge().list_tags(REF)

    def test_invalid_json(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _pages(monkeypatch, [b"<html>"])
        with pytest.raises(ForgeUnavailableError, match="不是合法 JSON"):
            GitHubForge().list_tags(REF)

    @pytest.mark.parametrize("code, msg", [(404, "不存在或无权访问"), (403, "HTTP 403")])
    def test_http_errors(self, monkeypatch: pytest.MonkeyPatch, code: int, msg: str) -> None:
        def fail(req, timeout=None):
            raise urllib.error.HTTPError(req.full_url, code, "nope", {}, None)

        monkeypatch.setattr(forgemod.urllib.request, "urlopen", fail)
        with pytest.raises(ForgeUnavailableError, match=msg):
            GitHubForge().list_tags(REF)

    def test_network_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def fail(req, timeout=None):
            raise urllib.error.URLError("name resolution failed")

        monkeypatch.setattr(forgemod.urllib.request, "urlopen", fail)
        with pytest.raises(ForgeUnavailableError, match="name resolution failed"):
            GitHubForge().list_tags(REF)

    def test_rejects_non_http_api_url(self) -> None:
        with pytest.raises(ForgeUnavailableError, match="不允许的 URL 协议"):
            GitHubForge(api_url="file:///etc").list_tags(REF)


class TestCloneUri:
    def test_default(self) -> None:
        assert GitHubForge().clone_uri(REF) == "https://github.com/alice/foo.git"

    def test_custom_base(self) -> None:
        forge = GitHubForge(clone_base_url="https://git.example.com/")
        assert forge.clone_uri(REF) == "https://git.example.com/alice/foo.git"
