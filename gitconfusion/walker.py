"""
Organization walker - drives the repository scanner over a whole org
"""
import asyncio
import logging
from collections import defaultdict
from typing import Dict, List, Optional

from gitconfusion.config import Config
from gitconfusion.gh_client import GitHubClient
from gitconfusion.models import RepoInfo, RepoReport, ScanResult
from gitconfusion.registry import RegistryProber
from gitconfusion.scanner import RepositoryScanner
from gitconfusion.utils import GitHubAPIError, TransportError

logger = logging.getLogger(__name__)


class OrgWalker:
    """Lists an organization's repositories and scans each of them."""

    def __init__(self, config: Config):
        self.config = config

    def _select(self, repos: List[RepoInfo]) -> List[RepoInfo]:
        selected = []
        for repo in repos:
            if repo.fork and not self.config.scanner.include_forks:
                logger.debug(f"Skipping fork {repo.name}")
                continue
            if repo.archived and not self.config.scanner.include_archived:
                logger.debug(f"Skipping archived {repo.name}")
                continue
            selected.append(repo)
        return selected

    async def _search_leaks(self, client: GitHubClient, org: str) -> Optional[Dict[str, List[str]]]:
        """Run the org-wide code search once and group hits by repository.

        Returns:
            Mapping of repository name to hit URLs, or None when disabled.
        """
        if not self.config.search.enable:
            return None

        logger.info("Searching for leaks...")
        try:
            hits = await client.search_code(org, self.config.search.terms)
        except (GitHubAPIError, TransportError) as e:
            logger.warning(f"Code search failed, leaked credentials section will be empty: {e}")
            return {}

        by_repo: Dict[str, List[str]] = defaultdict(list)
        for hit in hits:
            urls = by_repo[hit["repository"]]
            if hit["html_url"] not in urls:
                urls.append(hit["html_url"])

        logger.info(f"Code search returned {len(hits)} hits")
        return dict(by_repo)

    async def walk(self, org: str) -> ScanResult:
        """Scan every repository of ``org``.

        Raises:
            GitHubAPIError: If the repository listing is rejected.
            TransportError: If the repository listing cannot be fetched.
        """
        async with GitHubClient(self.config) as client, RegistryProber(self.config) as prober:
            repos = self._select(await client.list_repositories(org))
            leaks = await self._search_leaks(client, org)
            scanner = RepositoryScanner(client, prober, self.config)

            semaphore = asyncio.Semaphore(self.config.scanner.max_concurrency)

            async def scan_repo(repo: RepoInfo) -> RepoReport:
                async with semaphore:
                    logger.info(f"Checking repository: {org}/{repo.name}")
                    leaked_urls = None if leaks is None else leaks.get(repo.name, [])
                    return await scanner.scan(org, repo, leaked_urls=leaked_urls)

            # gather keeps listing order regardless of completion order
            reports = await asyncio.gather(*(scan_repo(repo) for repo in repos))

        all_leaks = None
        if leaks is not None:
            all_leaks = [url for urls in leaks.values() for url in urls]

        return ScanResult(org=org, repositories=list(reports), leaked_urls=all_leaks)


async def scan_organization(org: str, config: Config) -> ScanResult:
    """Single-shot organization scan (CLI interface)."""
    return await OrgWalker(config).walk(org)
