"""Data models shared across the scanning pipeline."""

from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict


class Ecosystem(str, Enum):
    """Package ecosystems with a public registry we can probe."""

    NPM = "npm"
    RUBYGEMS = "rubygems"
    PYPI = "pypi"


class Availability(str, Enum):
    """Outcome of a single registry probe."""

    AVAILABLE = "available"
    NOT_FOUND = "not_found"
    INDETERMINATE = "indeterminate"


class Dependency(BaseModel):
    """Package identifier extracted from a manifest."""

    name: str
    version: Optional[str] = None  # npm only


class PackageStatus(BaseModel):
    """Registry verdict for one declared package."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: Optional[str] = None
    available: bool

    @property
    def status_label(self) -> str:
        return "Available" if self.available else "Not Available"


class ManifestReport(BaseModel):
    """Findings for one manifest file in one repository."""

    model_config = ConfigDict(frozen=True)

    ecosystem: Ecosystem
    filename: str
    exists: bool = False
    packages: Dict[str, PackageStatus] = {}

    @property
    def unclaimed(self) -> List[PackageStatus]:
        """Packages the public registry does not know about."""
        return [pkg for pkg in self.packages.values() if not pkg.available]


class RepoReport(BaseModel):
    """Per-repository scan result, never modified after the scan."""

    model_config = ConfigDict(frozen=True)

    name: str
    manifests: Dict[Ecosystem, ManifestReport] = {}
    leaked_urls: Optional[List[str]] = None  # None when code search is disabled

    def manifest(self, ecosystem: Ecosystem) -> Optional[ManifestReport]:
        return self.manifests.get(ecosystem)


class RepoInfo(BaseModel):
    """Repository entry from the organization listing."""

    name: str
    full_name: Optional[str] = None
    html_url: Optional[str] = None
    default_branch: Optional[str] = None
    fork: bool = False
    archived: bool = False
    private: bool = False


class ScanResult(BaseModel):
    """Everything collected for one organization."""

    org: str
    repositories: List[RepoReport] = []
    leaked_urls: Optional[List[str]] = None

    @property
    def unclaimed(self) -> List[Tuple[str, Ecosystem, PackageStatus]]:
        """(repository, ecosystem, package) for every unclaimed package."""
        rows = []
        for repo in self.repositories:
            for ecosystem, manifest in repo.manifests.items():
                for pkg in manifest.unclaimed:
                    rows.append((repo.name, ecosystem, pkg))
        return rows
