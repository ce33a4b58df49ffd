# dye_budget/clients/price_source.py

"""Transports that carry requests to the Universalis proxy.

A :class:`PriceSource` takes a path such as ``/api/v2/worlds`` and returns
an HTTP-shaped :class:`ProxyResponse`.  Two implementations exist: an
in-process service binding and a plain HTTP base URL.  Timeouts are
applied by the caller, which cancels the in-flight ``send``.
"""

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from curl_cffi.requests import AsyncSession

from dye_budget.config.settings import Settings

logger = logging.getLogger("dye_budget.source")

# Host used for binding requests; the binding ignores it.
_INTERNAL_ORIGIN = "https://internal"


@dataclass
class ProxyRequest:
    """HTTP-shaped request handed to a service binding."""

    url: str
    method: str = "GET"
    headers: dict[str, str] = field(
        default_factory=lambda: dict(Settings.DEFAULT_HEADERS)
    )


@dataclass
class ProxyResponse:
    """HTTP-shaped response returned by either transport."""

    status_code: int
    text: str = ""

    @property
    def ok(self) -> bool:
        """True for 2xx statuses."""
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        """Decode the body as JSON."""
        return json.loads(self.text)


ServiceBinding = Callable[[ProxyRequest], Awaitable[ProxyResponse]]


class PriceSource(ABC):
    """Abstract transport to the price proxy."""

    name: str = "source"

    @abstractmethod
    async def send(self, path: str) -> ProxyResponse:
        """Issue a GET for *path* and return the raw response."""
        ...

    async def close(self) -> None:
        """Release transport resources."""
        return None


class ServiceBindingSource(PriceSource):
    """Dispatches requests to an in-process handler."""

    name = "service_binding"

    def __init__(self, binding: ServiceBinding) -> None:
        self._binding = binding

    async def send(self, path: str) -> ProxyResponse:
        request = ProxyRequest(url=f"{_INTERNAL_ORIGIN}{path}")
        logger.debug("Binding GET %s", request.url)
        return await self._binding(request)


class HttpPriceSource(PriceSource):
    """Fetches from the proxy's public base URL with curl_cffi."""

    name = "http"

    def __init__(
        self,
        base_url: str,
        session: AsyncSession | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._session = session

    def _get_session(self) -> AsyncSession:
        if self._session is None:
            self._session = AsyncSession()
        return self._session

    async def send(self, path: str) -> ProxyResponse:
        url = f"{self.base_url}{path}"
        logger.debug("HTTP GET %s", url)
        resp = await self._get_session().get(
            url, headers=dict(Settings.DEFAULT_HEADERS),
        )
        return ProxyResponse(status_code=resp.status_code, text=resp.text)

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None


def select_source(
    binding: ServiceBinding | None = None,
    base_url: str | None = None,
) -> PriceSource | None:
    """Pick the transport: a binding wins over a URL; neither gives ``None``."""
    if binding is not None:
        return ServiceBindingSource(binding)
    if base_url:
        return HttpPriceSource(base_url)
    return None
