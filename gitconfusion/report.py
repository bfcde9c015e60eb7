"""Plain-text rendering of scan results."""

from typing import Iterable, List, Optional, Tuple, Union

from gitconfusion.ecosystems import ECOSYSTEMS
from gitconfusion.models import RepoReport, ScanResult

BANNER = "=" * 39


def _flag(value: bool) -> str:
    return str(value).lower()


def render_repo(report: RepoReport) -> List[str]:
    """Render one repository block as lines."""
    lines = [BANNER, f"Repo: {report.name}", BANNER]

    for index, handler in enumerate(ECOSYSTEMS.values()):
        manifest = report.manifest(handler.ecosystem)
        exists = bool(manifest and manifest.exists)

        if index:
            lines.append("")
        lines.append(f"{handler.manifest} exists: {_flag(exists)}")
        if not exists:
            continue

        lines.append(f"{handler.label}:")
        for pkg in manifest.packages.values():
            if handler.shows_version:
                lines.append(f"- {pkg.name} (Version: {pkg.version or ''}): {pkg.status_label}")
            else:
                lines.append(f"- {pkg.name}: {pkg.status_label}")

    if report.leaked_urls is not None:
        lines.append("")
        lines.append(f"Leaked API keys: {_flag(bool(report.leaked_urls))}")
        if report.leaked_urls:
            lines.append("Leaked keys:")
            lines.extend(f"- {url}" for url in report.leaked_urls)

    return lines


def render_report(result: Union[ScanResult, Iterable[RepoReport]]) -> str:
    """Render every repository report, in order, as one text block."""
    reports = result.repositories if isinstance(result, ScanResult) else list(result)

    blocks = ["\n".join(render_repo(report)) for report in reports]
    return "\n\n".join(blocks) + ("\n" if blocks else "")


def summary_rows(result: ScanResult) -> List[Tuple[str, str, str, Optional[str]]]:
    """(repository, manifest, package, version) for every unclaimed package."""
    return [
        (repo, ECOSYSTEMS[ecosystem].manifest, pkg.name, pkg.version)
        for repo, ecosystem, pkg in result.unclaimed
    ]
