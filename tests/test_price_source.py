# tests/test_price_source.py

"""Tests for the proxy transports and transport selection."""

import unittest
from unittest.mock import AsyncMock, MagicMock

from dye_budget.clients.price_source import (
    HttpPriceSource,
    ProxyRequest,
    ProxyResponse,
    ServiceBindingSource,
    select_source,
)


async def _ok_binding(request: ProxyRequest) -> ProxyResponse:
    return ProxyResponse(200, "[]")


class TestProxyResponse(unittest.TestCase):
    """ProxyResponse helpers."""

    def test_ok_for_2xx(self) -> None:
        """Only 2xx statuses are ok."""
        self.assertTrue(ProxyResponse(200).ok)
        self.assertTrue(ProxyResponse(204).ok)
        self.assertFalse(ProxyResponse(301).ok)
        self.assertFalse(ProxyResponse(500).ok)

    def test_json_decodes_body(self) -> None:
        """json() parses the text body."""
        self.assertEqual(ProxyResponse(200, '{"a": 1}').json(), {"a": 1})


class TestSelectSource(unittest.TestCase):
    """Transport selection order."""

    def test_binding_preferred_over_url(self) -> None:
        """A binding wins when both are configured."""
        source = select_source(binding=_ok_binding, base_url="http://x")
        self.assertIsInstance(source, ServiceBindingSource)

    def test_url_fallback(self) -> None:
        """Without a binding the URL is used."""
        source = select_source(base_url="http://proxy.local/")
        self.assertIsInstance(source, HttpPriceSource)
        assert isinstance(source, HttpPriceSource)
        self.assertEqual(source.base_url, "http://proxy.local")

    def test_nothing_configured(self) -> None:
        """Neither transport → None."""
        self.assertIsNone(select_source())
        self.assertIsNone(select_source(base_url=""))


class TestServiceBindingSource(unittest.IsolatedAsyncioTestCase):
    """ServiceBindingSource request shaping."""

    async def test_builds_internal_get_request(self) -> None:
        """Requests use an internal origin, GET and JSON headers."""
        seen: list[ProxyRequest] = []

        async def binding(request: ProxyRequest) -> ProxyResponse:
            seen.append(request)
            return ProxyResponse(200, "[]")

        resp = await ServiceBindingSource(binding).send("/api/v2/worlds")

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(seen[0].url, "https://internal/api/v2/worlds")
        self.assertEqual(seen[0].method, "GET")
        self.assertEqual(seen[0].headers["Content-Type"], "application/json")


class TestHttpPriceSource(unittest.IsolatedAsyncioTestCase):
    """HttpPriceSource with a stubbed curl_cffi session."""

    def _session(self, status: int, text: str) -> MagicMock:
        session = MagicMock()
        session.get = AsyncMock(
            return_value=MagicMock(status_code=status, text=text)
        )
        session.close = AsyncMock()
        return session

    async def test_get_joins_base_url_and_path(self) -> None:
        """The full URL is base + path."""
        session = self._session(200, "[]")
        source = HttpPriceSource("https://proxy.example/", session=session)

        resp = await source.send("/api/v2/worlds")

        session.get.assert_awaited_once()
        self.assertEqual(
            session.get.call_args.args[0],
            "https://proxy.example/api/v2/worlds",
        )
        self.assertEqual(resp, ProxyResponse(200, "[]"))

    async def test_status_and_body_carried_over(self) -> None:
        """Error statuses are returned, not raised."""
        session = self._session(503, '{"error": "down"}')
        source = HttpPriceSource("https://proxy.example", session=session)
        resp = await source.send("/api/v2/worlds")
        self.assertFalse(resp.ok)
        self.assertEqual(resp.json(), {"error": "down"})

    async def test_close_releases_session(self) -> None:
        """close() closes the session once."""
        session = self._session(200, "[]")
        source = HttpPriceSource("https://proxy.example", session=session)
        await source.close()
        await source.close()
        session.close.assert_awaited_once()


if __name__ == "__main__":
    unittest.main()
