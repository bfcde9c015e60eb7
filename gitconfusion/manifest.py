"""Manifest parsers turning raw file text into package identifiers."""

import json
import logging
from typing import List

from gitconfusion.models import Dependency, Ecosystem
from gitconfusion.utils import ManifestDecodeError

logger = logging.getLogger(__name__)

GEM_PREFIX = "gem "
GEM_QUOTES = "'\"`"


def parse_package_json(text: str) -> List[Dependency]:
    """Extract the ``dependencies`` map of a package.json document.

    Args:
        text: Raw package.json content.

    Returns:
        One dependency per key, paired with its declared version range.

    Raises:
        ManifestDecodeError: If the document is not valid JSON.
    """
    try:
        document = json.loads(text)
    except ValueError as e:
        raise ManifestDecodeError(f"invalid package.json: {e}") from e

    if not isinstance(document, dict):
        return []

    dependencies = document.get("dependencies")
    if not isinstance(dependencies, dict):
        return []

    return [
        Dependency(name=name, version=version if isinstance(version, str) else None)
        for name, version in dependencies.items()
    ]


def parse_gemfile(text: str) -> List[Dependency]:
    """Extract gem names from ``gem 'name'`` declarations.

    Only single-line declarations are recognised; anything else,
    comments included, is ignored.
    """
    gems = []

    for line in text.splitlines():
        line = line.strip()
        if not line.startswith(GEM_PREFIX):
            continue

        parts = line.split(" ")
        if len(parts) < 2:
            continue

        # gem 'rails', '~> 7.0' -> 'rails',
        name = parts[1].rstrip(",").strip(GEM_QUOTES)
        if name:
            gems.append(Dependency(name=name))

    return gems


def parse_requirements(text: str) -> List[Dependency]:
    """Extract package names from a pip requirements file.

    The name is whatever precedes ``==``; unpinned lines are taken whole.
    """
    packages = []

    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        name = line.split("==", 1)[0].strip()
        if name:
            packages.append(Dependency(name=name))

    return packages


PARSERS = {
    Ecosystem.NPM: parse_package_json,
    Ecosystem.RUBYGEMS: parse_gemfile,
    Ecosystem.PYPI: parse_requirements,
}


def parse_manifest(ecosystem: Ecosystem, text: str) -> List[Dependency]:
    """Parse ``text`` with the grammar of ``ecosystem``."""
    dependencies = PARSERS[ecosystem](text)
    logger.debug(f"Parsed {len(dependencies)} {ecosystem.value} dependencies")
    return dependencies
