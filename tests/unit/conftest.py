"""
测试用的 aiohttp 替身

FakeSession 按 URL 结尾匹配路由，支持返回响应或抛出异常。
"""

import json

import pytest


class FakeResponse:
    def __init__(self, status: int = 200, body=b""):
        self.status = status
        if isinstance(body, (list, dict)):
            body = json.dumps(body)
        if isinstance(body, str):
            body = body.encode("utf-8")
        self._body = body

    async def read(self) -> bytes:
        return self._body

    async def text(self) -> str:
        return self._body.decode("utf-8", errors="replace")

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        return False


class FakeSession:
    def __init__(self, routes=None):
        # path suffix -> FakeResponse | Exception
        self.routes = dict(routes or {})
        self.calls = []

    def _lookup(self, url: str):
        for suffix, result in self.routes.items():
            if url.endswith(suffix):
                if isinstance(result, BaseException):
                    raise result
                return result
        return FakeResponse(404, "not found")

    def get(self, url, **kwargs):
        self.calls.append(("GET", url, kwargs))
        return self._lookup(url)

    def post(self, url, **kwargs):
        self.calls.append(("POST", url, kwargs))
        return self._lookup(url)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        return False


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def fake_session():
    return FakeSession
