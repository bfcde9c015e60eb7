"""Tests for report rendering."""

from gitconfusion.models import Ecosystem, ManifestReport, PackageStatus, RepoReport, ScanResult
from gitconfusion.report import render_report, summary_rows


def make_report(name="widgets", leaked_urls=None):
    return RepoReport(
        name=name,
        manifests={
            Ecosystem.NPM: ManifestReport(
                ecosystem=Ecosystem.NPM,
                filename="package.json",
                exists=True,
                packages={
                    "left-pad": PackageStatus(name="left-pad", version="1.0.0", available=True),
                    "@acme/internal": PackageStatus(name="@acme/internal", version="^3.0.0", available=False),
                },
            ),
            Ecosystem.RUBYGEMS: ManifestReport(ecosystem=Ecosystem.RUBYGEMS, filename="Gemfile"),
            Ecosystem.PYPI: ManifestReport(
                ecosystem=Ecosystem.PYPI,
                filename="requirements.txt",
                exists=True,
                packages={"requests": PackageStatus(name="requests", available=True)},
            ),
        },
        leaked_urls=leaked_urls,
    )


class TestRenderReport:
    """Test text rendering."""

    def test_full_block(self):
        text = render_report(ScanResult(org="acme", repositories=[make_report(leaked_urls=[])]))

        assert text.splitlines() == [
            "=======================================",
            "Repo: widgets",
            "=======================================",
            "package.json exists: true",
            "NPM packages:",
            "- left-pad (Version: 1.0.0): Available",
            "- @acme/internal (Version: ^3.0.0): Not Available",
            "",
            "Gemfile exists: false",
            "",
            "requirements.txt exists: true",
            "Python packages:",
            "- requests: Available",
            "",
            "Leaked API keys: false",
        ]

    def test_leaked_urls_listed(self):
        url = "https://github.com/acme/widgets/blob/main/.env"
        text = render_report([make_report(leaked_urls=[url])])

        assert "Leaked API keys: true" in text
        assert f"- {url}" in text

    def test_repository_order_kept(self):
        text = render_report([make_report("b"), make_report("a")])

        assert text.index("Repo: b") < text.index("Repo: a")

    def test_empty(self):
        assert render_report([]) == ""

    def test_pure(self):
        result = ScanResult(org="acme", repositories=[make_report()])

        assert render_report(result) == render_report(result)


class TestSummaryRows:
    """Test unclaimed package summary."""

    def test_only_unclaimed(self):
        result = ScanResult(org="acme", repositories=[make_report()])

        assert summary_rows(result) == [("widgets", "package.json", "@acme/internal", "^3.0.0")]
