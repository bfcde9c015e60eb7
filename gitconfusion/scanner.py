"""Per-repository manifest scanning."""

import logging
from typing import Dict, List, Optional

from gitconfusion.config import Config
from gitconfusion.ecosystems import ECOSYSTEMS, EcosystemHandler
from gitconfusion.gh_client import GitHubClient
from gitconfusion.models import Ecosystem, ManifestReport, PackageStatus, RepoInfo, RepoReport
from gitconfusion.registry import RegistryProber
from gitconfusion.utils import ManifestDecodeError, RegistryProbeError, TransportError

logger = logging.getLogger(__name__)

FALLBACK_BRANCH = "master"


class RepositoryScanner:
    """Fetches each known manifest of a repository and probes its packages."""

    def __init__(self, client: GitHubClient, prober: RegistryProber, config: Config):
        self.client = client
        self.prober = prober
        self.config = config

    def branch_for(self, repo: RepoInfo) -> str:
        """Configured branch, else the repository default, else master."""
        return self.config.github.branch or repo.default_branch or FALLBACK_BRANCH

    async def scan(
        self,
        org: str,
        repo: RepoInfo,
        leaked_urls: Optional[List[str]] = None
    ) -> RepoReport:
        """Scan every ecosystem manifest of ``repo``.

        Args:
            org: Organization login.
            repo: Repository from the listing.
            leaked_urls: Code search hits belonging to this repository.

        Returns:
            The finished, immutable report.
        """
        branch = self.branch_for(repo)
        manifests: Dict[Ecosystem, ManifestReport] = {}

        for handler in ECOSYSTEMS.values():
            manifests[handler.ecosystem] = await self._scan_manifest(org, repo.name, branch, handler)

        return RepoReport(name=repo.name, manifests=manifests, leaked_urls=leaked_urls)

    async def _scan_manifest(
        self,
        org: str,
        repo_name: str,
        branch: str,
        handler: EcosystemHandler
    ) -> ManifestReport:
        absent = ManifestReport(ecosystem=handler.ecosystem, filename=handler.manifest, exists=False)

        logger.info(f"Checking {org}/{repo_name} for {handler.manifest}...")
        try:
            content = await self.client.fetch_file(org, repo_name, branch, handler.manifest)
        except TransportError as e:
            logger.warning(f"Error fetching {handler.manifest} from {org}/{repo_name}: {e}")
            return absent
        except ManifestDecodeError as e:
            logger.warning(f"Treating {handler.manifest} of {org}/{repo_name} as absent: {e}")
            return absent

        if content is None:
            logger.info(f"{handler.manifest} not found")
            return absent

        try:
            dependencies = handler.parse(content)
        except ManifestDecodeError as e:
            logger.warning(f"Treating {handler.manifest} of {org}/{repo_name} as absent: {e}")
            return absent

        logger.info(f"{handler.manifest} found with {len(dependencies)} dependencies")

        packages: Dict[str, PackageStatus] = {}
        for dependency in dependencies:
            try:
                available = await self.prober.is_available(handler.ecosystem, dependency.name)
            except RegistryProbeError as e:
                logger.warning(
                    f"Error checking {handler.ecosystem.value} package '{dependency.name}', "
                    f"leaving it out of the report: {e}"
                )
                continue

            if not available:
                logger.warning(
                    f"{handler.ecosystem.value} package '{dependency.name}' used by "
                    f"{org}/{repo_name} is not on the public registry"
                )

            packages[dependency.name] = PackageStatus(
                name=dependency.name,
                version=dependency.version,
                available=available
            )

        return ManifestReport(
            ecosystem=handler.ecosystem,
            filename=handler.manifest,
            exists=True,
            packages=packages
        )
