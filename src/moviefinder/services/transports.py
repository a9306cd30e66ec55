"""Transport strategies for reaching the movie catalog.

A transport strategy knows how to turn a catalog path plus query parameters
into a concrete URL and header set. Callers hold an ordered list of
strategies and try them in sequence until one gets a response:

- ``ProxyTransport``: relative calls to our own catalog proxy, which injects
  the credential server side (primary path for list fetches)
- ``DirectTransport``: straight to TMDB with a client-held bearer credential
- ``RelayTransport``: the direct URL wrapped in a public CORS-relaxing relay
"""

from dataclasses import dataclass

import httpx
from pydantic import SecretStr

from moviefinder.config import DiscoveryConfig
from moviefinder.core.exceptions import CatalogAuthError


@dataclass(frozen=True)
class CatalogTransport:
    """Base strategy: ``base_url`` + path, JSON accept header."""

    base_url: str
    name: str = "base"

    def url_for(self, path: str, params: dict[str, str | int] | None = None) -> str:
        """Build the absolute request URL, query string included."""
        url = httpx.URL(f"{self.base_url.rstrip('/')}/{path.lstrip('/')}")
        if params:
            url = url.copy_merge_params(params)
        return str(url)

    def headers(self) -> dict[str, str]:
        return {"Accept": "application/json"}


@dataclass(frozen=True)
class ProxyTransport(CatalogTransport):
    """Calls through the catalog proxy; the proxy owns the credential."""

    name: str = "proxy"


@dataclass(frozen=True)
class DirectTransport(CatalogTransport):
    """Calls TMDB directly with a bearer credential held by the client."""

    credential: SecretStr | None = None
    name: str = "direct"

    def headers(self) -> dict[str, str]:
        if self.credential is None or not self.credential.get_secret_value():
            raise CatalogAuthError()
        return {
            **super().headers(),
            "Authorization": f"Bearer {self.credential.get_secret_value()}",
        }


@dataclass(frozen=True)
class RelayTransport(DirectTransport):
    """Direct call routed through a CORS relay (``relay_prefix + url``)."""

    relay_prefix: str = ""
    name: str = "relay"

    def url_for(self, path: str, params: dict[str, str | int] | None = None) -> str:
        return f"{self.relay_prefix}{super().url_for(path, params)}"


def list_transports(config: DiscoveryConfig) -> list[CatalogTransport]:
    """Strategies used for list fetches (search / discover)."""
    return [ProxyTransport(base_url=config.catalog_base_url)]


def detail_transports(config: DiscoveryConfig) -> list[CatalogTransport]:
    """Strategies used for the detail fetch: direct first, then the relay."""
    return [
        DirectTransport(
            base_url=config.upstream_base_url,
            credential=config.credential,
        ),
        RelayTransport(
            base_url=config.upstream_base_url,
            credential=config.credential,
            relay_prefix=config.cors_relay_url,
        ),
    ]
