"""Public registry existence probes for npm, RubyGems and PyPI."""

import asyncio
import logging
from typing import Optional, Tuple
from urllib.parse import quote

import aiohttp

from gitconfusion.config import Config
from gitconfusion.ecosystems import get_ecosystem
from gitconfusion.models import Availability, Ecosystem
from gitconfusion.rate_limit import RateLimiter, parse_retry_after
from gitconfusion.utils import RateLimitError, RegistryProbeError

logger = logging.getLogger(__name__)


def classify_status(status: int) -> Availability:
    """Map a registry HTTP status to an availability verdict.

    2xx means the name is claimed. 429 and 5xx say nothing about the
    name and are retried. Everything else, 404 included, is not found.
    """
    if 200 <= status < 300:
        return Availability.AVAILABLE
    if status == 429 or status >= 500:
        return Availability.INDETERMINATE
    return Availability.NOT_FOUND


class RegistryProber:
    """Checks whether package names exist on their public registry."""

    def __init__(self, config: Config, rate_limiter: Optional[RateLimiter] = None):
        """Initialize registry prober.

        Args:
            config: Configuration object.
            rate_limiter: Backoff policy for indeterminate probes.
        """
        self.config = config
        self.rate_limiter = rate_limiter or RateLimiter.from_config(config.rate_limit)
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        """Async context manager entry."""
        timeout = aiohttp.ClientTimeout(
            total=self.config.scanner.timeout,
            sock_connect=self.config.scanner.connect_timeout
        )
        self.session = aiohttp.ClientSession(
            timeout=timeout,
            headers={"User-Agent": self.config.github.user_agent}
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self.session:
            await self.session.close()

    def build_url(self, ecosystem: Ecosystem, name: str) -> str:
        """Build the metadata lookup URL for ``name``."""
        handler = get_ecosystem(ecosystem)
        template = self.config.registry.endpoints.get(ecosystem.value, handler.registry_url)
        return template.format(name=quote(name, safe=handler.quote_safe))

    async def _probe_once(self, url: str) -> Tuple[Availability, str, Optional[float]]:
        """Issue one GET and classify it.

        Returns:
            Verdict, human readable reason and server requested delay.
        """
        try:
            async with self.session.get(url) as response:
                # Drain so the connection goes back to the pool
                await response.read()
                verdict = classify_status(response.status)
                retry_after = parse_retry_after(response.headers.get("Retry-After"))
                return verdict, f"HTTP {response.status}", retry_after
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            return Availability.INDETERMINATE, f"{type(e).__name__}: {e}", None

    async def probe(self, ecosystem: Ecosystem, name: str) -> Availability:
        """Probe the registry for ``name``.

        Returns:
            AVAILABLE or NOT_FOUND.

        Raises:
            RegistryProbeError: If no definite verdict was obtained.
        """
        if not self.session:
            raise RuntimeError("Prober not initialized. Use async context manager.")

        url = self.build_url(ecosystem, name)
        attempt = 0

        while True:
            verdict, reason, retry_after = await self._probe_once(url)
            logger.debug(f"{ecosystem.value} probe {name}: {reason} -> {verdict.value}")

            if verdict is not Availability.INDETERMINATE:
                return verdict

            try:
                await self.rate_limiter.handle_retry(
                    f"{ecosystem.value} package '{name}'", attempt, reason, retry_after
                )
            except RateLimitError as e:
                raise RegistryProbeError(str(e)) from e
            attempt += 1

    async def is_available(self, ecosystem: Ecosystem, name: str) -> bool:
        """Return True if ``name`` is claimed on the public registry."""
        return await self.probe(ecosystem, name) is Availability.AVAILABLE
