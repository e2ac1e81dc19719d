"""GitHub 标签查询

GET {api_url}/repos/{owner}/{repo}/tags，按页拉取直到返回不足一页。
只读请求；网络、认证、响应格式错误统一转换为 ForgeUnavailableError。
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from urllib.parse import quote

from ppm.core.exceptions import ForgeUnavailableError, ValidationError
from ppm.core.models import PackageRef
from ppm.utils.net import validate_url_scheme

logger = logging.getLogger(__name__)

PER_PAGE = 100
MAX_PAGES = 50


class GitHubForge:
    """GitHub REST API 客户端（仅标签列表）"""

    def __init__(
        self,
        api_url: str = "https://api.github.com",
        clone_base_url: str = "https://github.com",
        token: str = "",
        timeout: int = 30,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.clone_base_url = clone_base_url.rstrip("/")
        self.token = token
        self.timeout = timeout

    def clone_uri(self, ref: PackageRef) -> str:
        return f"{self.clone_base_url}/{quote(ref.owner)}/{quote(ref.name)}.git"

    def tags_url(self, ref: PackageRef, page: int = 1) -> str:
        return (
            f"{self.api_url}/repos/{quote(ref.owner)}/{quote(ref.name)}/tags"
            f"?per_page={PER_PAGE}&page={page}"
        )

    def list_tags(self, ref: PackageRef) -> list[str]:
        tags: list[str] = []
        for page in range(1, MAX_PAGES + 1):
            batch = self._get_json(self.tags_url(ref, page), ref)
            if not isinstance(batch, list):
                raise ForgeUnavailableError(f"{ref} 的标签响应格式异常: {type(batch).__name__}")
            for item in batch:
                if isinstance(item, dict) and isinstance(item.get("name"), str):
                    tags.append(item["name"])
            if len(batch) < PER_PAGE:
                break
        logger.debug("%s: %d 个远端标签", ref, len(tags))
        return tags

    def _get_json(self, url: str, ref: PackageRef) -> object:
        try:
            validate_url_scheme(url, context=f"forge {ref}")
        except ValidationError as e:
            raise ForgeUnavailableError(str(e)) from e

        req = urllib.request.Request(url)
        req.add_header("Accept", "application/vnd.github.v3+json")
        req.add_header("User-Agent", "ppm")
        if self.token:
            req.add_header("Authorization", f"token {self.token}")

        logger.debug("GET %s", url)
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:  # nosec B310
                body = resp.read()
        except urllib.error.HTTPError as e:
            if e.code == 404:
                raise ForgeUnavailableError(f"仓库不存在或无权访问: {ref}") from e
            raise ForgeUnavailableError(f"请求 {ref} 标签失败 (HTTP {e.code}): {e.reason}") from e
        except (urllib.error.URLError, OSError) as e:
            raise ForgeUnavailableError(f"请求 {ref} 标签失败: {e}") from e

        try:
            return json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ForgeUnavailableError(f"{ref} 的标签响应不是合法 JSON: {e}") from e
