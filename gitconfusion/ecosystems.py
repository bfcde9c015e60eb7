"""Per-ecosystem strategy table.

Each supported ecosystem supplies the manifest it is declared in, the
parser for that manifest, and the registry endpoint answering existence
lookups. Adding an ecosystem means adding a row here.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List

from gitconfusion.manifest import PARSERS
from gitconfusion.models import Dependency, Ecosystem


@dataclass(frozen=True)
class EcosystemHandler:
    """How one ecosystem is scanned and probed."""

    ecosystem: Ecosystem
    manifest: str
    label: str
    parse: Callable[[str], List[Dependency]]
    registry_url: str
    quote_safe: str = ""  # characters left unescaped in the package name
    shows_version: bool = False


ECOSYSTEMS: Dict[Ecosystem, EcosystemHandler] = {
    Ecosystem.NPM: EcosystemHandler(
        ecosystem=Ecosystem.NPM,
        manifest="package.json",
        label="NPM packages",
        parse=PARSERS[Ecosystem.NPM],
        registry_url="https://registry.npmjs.org/{name}",
        # @scope/pkg is looked up as @scope%2Fpkg
        quote_safe="@",
        shows_version=True,
    ),
    Ecosystem.RUBYGEMS: EcosystemHandler(
        ecosystem=Ecosystem.RUBYGEMS,
        manifest="Gemfile",
        label="Ruby gems",
        parse=PARSERS[Ecosystem.RUBYGEMS],
        registry_url="https://rubygems.org/api/v1/gems/{name}.json",
    ),
    Ecosystem.PYPI: EcosystemHandler(
        ecosystem=Ecosystem.PYPI,
        manifest="requirements.txt",
        label="Python packages",
        parse=PARSERS[Ecosystem.PYPI],
        registry_url="https://pypi.org/pypi/{name}/json",
    ),
}


def get_ecosystem(ecosystem: Ecosystem) -> EcosystemHandler:
    return ECOSYSTEMS[ecosystem]
