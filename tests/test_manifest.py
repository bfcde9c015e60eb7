"""Tests for manifest parsers."""

import pytest

from gitconfusion.manifest import (
    parse_gemfile,
    parse_manifest,
    parse_package_json,
    parse_requirements,
)
from gitconfusion.models import Ecosystem
from gitconfusion.utils import ManifestDecodeError


class TestPackageJson:
    """Test package.json parsing."""

    def test_dependencies_with_versions(self):
        text = '{"name": "app", "dependencies": {"left-pad": "1.0.0", "@acme/ui": "^2.1.0"}}'

        deps = parse_package_json(text)

        assert {(d.name, d.version) for d in deps} == {
            ("left-pad", "1.0.0"),
            ("@acme/ui", "^2.1.0"),
        }

    def test_dev_dependencies_ignored(self):
        text = '{"dependencies": {"a": "1"}, "devDependencies": {"b": "2"}}'

        assert [d.name for d in parse_package_json(text)] == ["a"]

    def test_missing_dependencies_key(self):
        assert parse_package_json('{"name": "app"}') == []

    def test_non_object_document(self):
        assert parse_package_json('["left-pad"]') == []
        assert parse_package_json('{"dependencies": ["left-pad"]}') == []

    def test_non_string_version(self):
        deps = parse_package_json('{"dependencies": {"odd": {"version": "1"}}}')

        assert deps[0].name == "odd"
        assert deps[0].version is None

    def test_malformed_json_raises(self):
        with pytest.raises(ManifestDecodeError):
            parse_package_json('{"dependencies": {"left-pad": ')

    def test_size_matches_dependency_map(self):
        names = {f"pkg-{i}": f"{i}.0.0" for i in range(25)}
        text = '{"dependencies": {%s}}' % ", ".join(f'"{k}": "{v}"' for k, v in names.items())

        deps = parse_package_json(text)

        assert len(deps) == 25
        assert {d.name: d.version for d in deps} == names


class TestGemfile:
    """Test Gemfile parsing."""

    def test_quoted_gems(self):
        text = "source 'https://rubygems.org'\n\ngem 'rails'\ngem \"pg\"\n  gem `puma`  \n"

        assert [d.name for d in parse_gemfile(text)] == ["rails", "pg", "puma"]

    def test_gem_with_version_argument(self):
        text = "gem 'rails', '~> 7.0'\ngem \"internal-auth\", path: 'vendor'\n"

        assert [d.name for d in parse_gemfile(text)] == ["rails", "internal-auth"]

    def test_non_gem_lines_ignored(self):
        text = (
            "# gem 'commented'\n"
            "group :test do\n"
            "  gem 'rspec'\n"
            "end\n"
            "gemspec\n"
            "gem(\n"
            "  'multiline'\n"
            ")\n"
        )

        assert [d.name for d in parse_gemfile(text)] == ["rspec"]

    def test_no_version(self):
        assert all(d.version is None for d in parse_gemfile("gem 'rails', '7.0'"))


class TestRequirements:
    """Test requirements.txt parsing."""

    def test_pinned_and_unpinned(self):
        text = "# comment\n\nrequests==2.0.0\ninternal-only-pkg\n"

        assert [d.name for d in parse_requirements(text)] == ["requests", "internal-only-pkg"]

    def test_comment_and_blank_lines(self):
        assert parse_requirements("# foo\n\n   \n  # bar\n") == []

    def test_whitespace_trimmed(self):
        assert [d.name for d in parse_requirements("  flask == 2.0 \r\n")] == ["flask"]

    def test_only_exact_pins_split(self):
        deps = parse_requirements("django>=4.0\nfoo==1.0==2\n")

        assert [d.name for d in deps] == ["django>=4.0", "foo"]


class TestParseManifest:
    """Test ecosystem dispatch."""

    @pytest.mark.parametrize("ecosystem, text, expected", [
        (Ecosystem.NPM, '{"dependencies": {"left-pad": "1.0.0"}}', ["left-pad"]),
        (Ecosystem.RUBYGEMS, "gem 'rails'", ["rails"]),
        (Ecosystem.PYPI, "requests==2.0.0", ["requests"]),
    ])
    def test_dispatch(self, ecosystem, text, expected):
        assert [d.name for d in parse_manifest(ecosystem, text)] == expected

    def test_idempotent(self):
        text = "gem 'rails'\ngem 'pg'\n"

        first = parse_manifest(Ecosystem.RUBYGEMS, text)
        second = parse_manifest(Ecosystem.RUBYGEMS, text)

        assert first == second
