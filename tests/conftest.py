"""Test configuration and fixtures."""

import re
import tempfile
from pathlib import Path

import pytest

from gitconfusion.config import Config

API = "https://api.github.com"
RAW = "https://raw.githubusercontent.com"
NPM = "https://registry.npmjs.org"
RUBYGEMS = "https://rubygems.org/api/v1/gems"
PYPI = "https://pypi.org/pypi"

TEST_ORG = "acme"
TEST_TOKEN = "ghp_test_token"

LISTING_URL = re.compile(r"^https://api\.github\.com/orgs/acme/repos\b.*")
SEARCH_URL = re.compile(r"^https://api\.github\.com/search/code\b.*")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep real tokens and log levels out of tests."""
    for key in ("GH_TOKEN", "GITHUB_TOKEN", "LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def config_data():
    """Sample configuration data for tests."""
    return {
        "github": {
            "token": TEST_TOKEN,
            "branch": "main",
        },
        "scanner": {
            "timeout": 5.0,
            "max_concurrency": 1,
        },
        "search": {
            "enable": False,
        },
        "rate_limit": {
            "base_delay": 0.0,
            "max_delay": 0.0,
            "max_retries": 2,
        },
    }


@pytest.fixture
def test_config(config_data):
    """Create a test configuration."""
    return Config(**config_data)


@pytest.fixture
def sample_repo_data():
    """Sample repository listing entry."""
    return {
        "id": 123456,
        "name": "widgets",
        "full_name": "acme/widgets",
        "html_url": "https://github.com/acme/widgets",
        "default_branch": "main",
        "fork": False,
        "archived": False,
        "private": True,
        "owner": {"login": "acme", "type": "Organization"},
    }


def raw_url(repo: str, filename: str, branch: str = "main") -> str:
    return f"{RAW}/{TEST_ORG}/{repo}/{branch}/{filename}"
