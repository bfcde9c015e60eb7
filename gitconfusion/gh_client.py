"""GitHub access: organization listing, raw manifest fetch and code search."""

import asyncio
import logging
from typing import Dict, List, Optional

import aiohttp
from pydantic import ValidationError

from gitconfusion.config import Config
from gitconfusion.models import RepoInfo
from gitconfusion.utils import GitHubAPIError, ManifestDecodeError, TransportError

logger = logging.getLogger(__name__)


class GitHubClient:
    """Thin async client for the GitHub calls the scan needs."""

    def __init__(self, config: Config):
        """Initialize GitHub client.

        Args:
            config: Configuration object.
        """
        self.config = config
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        """Async context manager entry."""
        timeout = aiohttp.ClientTimeout(
            total=self.config.scanner.timeout,
            sock_connect=self.config.scanner.connect_timeout
        )
        self.session = aiohttp.ClientSession(timeout=timeout)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self.session:
            await self.session.close()

    def _headers(self, api: bool = True) -> Dict[str, str]:
        headers = {"User-Agent": self.config.github.user_agent}
        if api:
            headers["Accept"] = "application/vnd.github+json"
        if self.config.github.token:
            headers["Authorization"] = f"Bearer {self.config.github.token}"
        return headers

    def _ensure_session(self):
        if not self.session:
            raise RuntimeError("Client not initialized. Use async context manager.")

    async def list_repositories(self, org: str) -> List[RepoInfo]:
        """List every repository of an organization.

        Args:
            org: Organization login.

        Returns:
            Repositories in the order GitHub returns them.

        Raises:
            GitHubAPIError: On a non-200 response or an unreadable body.
            TransportError: If the request could not be completed.
        """
        self._ensure_session()

        url = f"{self.config.github.api_url}/orgs/{org}/repos"
        per_page = self.config.github.per_page
        repos: List[RepoInfo] = []
        page = 1

        while True:
            params = {"per_page": per_page, "page": page}
            try:
                async with self.session.get(url, params=params, headers=self._headers()) as response:
                    if response.status != 200:
                        error_text = await response.text()
                        raise GitHubAPIError(
                            f"error fetching repos, status code: {response.status}: {error_text[:200]}",
                            response.status
                        )
                    try:
                        data = await response.json()
                    except (aiohttp.ContentTypeError, ValueError) as e:
                        raise GitHubAPIError(f"invalid repository listing: {e}", response.status) from e
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                raise TransportError(f"error fetching repos for {org}: {e}") from e

            if not isinstance(data, list):
                raise GitHubAPIError("invalid repository listing: expected a list", 200)

            for item in data:
                try:
                    repos.append(RepoInfo.model_validate(item))
                except ValidationError as e:
                    raise GitHubAPIError(f"invalid repository entry: {e}", 200) from e

            logger.debug(f"Listed page {page} of {org}: {len(data)} repositories")

            if len(data) < per_page:
                break
            page += 1

        logger.info(f"Found {len(repos)} repositories in {org}")
        return repos

    async def fetch_file(self, org: str, repo: str, branch: str, filename: str) -> Optional[str]:
        """Fetch raw file content from a branch.

        Returns:
            File content, or None when the file could not be retrieved.

        Raises:
            ManifestDecodeError: If the content is not valid text.
            TransportError: If the request could not be completed.
        """
        self._ensure_session()

        url = f"{self.config.github.raw_url}/{org}/{repo}/{branch}/{filename}"
        try:
            async with self.session.get(url, headers=self._headers(api=False)) as response:
                if response.status != 200:
                    await response.read()
                    logger.debug(f"{url} returned {response.status}")
                    return None
                try:
                    return await response.text()
                except UnicodeDecodeError as e:
                    raise ManifestDecodeError(f"{filename} is not valid text: {e}") from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"error fetching {filename}: {e}") from e

    async def search_code(self, org: str, terms: List[str]) -> List[Dict[str, str]]:
        """Search organization code for credential-looking terms.

        Args:
            org: Organization login.
            terms: Search terms, one query per term.

        Returns:
            Hits as ``{"html_url": ..., "repository": ...}`` dicts.
            Only the first results page of each term is read.

        Raises:
            GitHubAPIError: On a non-200 response, an unreadable body or missing token.
            TransportError: If a request could not be completed.
        """
        self._ensure_session()

        if not self.config.github.token:
            raise GitHubAPIError("code search requires a GitHub token", 401)

        url = f"{self.config.github.api_url}/search/code"
        hits: List[Dict[str, str]] = []

        for term in terms:
            params = {
                "q": f"{term} in:file org:{org}",
                "sort": "indexed",
                "per_page": self.config.github.per_page,
            }
            try:
                async with self.session.get(url, params=params, headers=self._headers()) as response:
                    if response.status != 200:
                        error_text = await response.text()
                        raise GitHubAPIError(
                            f"code search for '{term}' failed: {response.status}: {error_text[:200]}",
                            response.status
                        )
                    try:
                        data = await response.json()
                    except (aiohttp.ContentTypeError, ValueError) as e:
                        raise GitHubAPIError(f"code search for '{term}' returned invalid JSON: {e}", 200) from e
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                raise TransportError(f"code search for '{term}' failed: {e}") from e

            if not isinstance(data, dict):
                raise GitHubAPIError(f"code search for '{term}' returned an unexpected body", 200)

            for item in data.get("items") or []:
                if not isinstance(item, dict):
                    continue
                html_url = item.get("html_url")
                if not html_url:
                    continue
                repository = item.get("repository")
                hits.append({
                    "html_url": html_url,
                    "repository": repository.get("name", "") if isinstance(repository, dict) else "",
                })

        return hits
