"""
Tests for version parsing, comparison and capability version lookup.

Run: python3 -m pytest tests/test_versions.py -v
"""

import pytest

from reqcheck.core.models import RuntimeSnapshot
from reqcheck.core.versions import (
    VersionLookup,
    compare_versions,
    distribution,
    extract_version,
    module_attribute,
    normalize_version,
    parse_version,
    version_at_least,
)


class TestParseVersion:
    """Tests for parse_version."""

    def test_dotted_numeric(self):
        assert parse_version('3.11.4') == (3, 11, 4)

    def test_drops_prerelease_suffix(self):
        assert parse_version('3.12.1rc1') == (3, 12, 1)

    def test_strips_v_prefix(self):
        assert parse_version('v2.0') == (2, 0)

    def test_stops_at_non_numeric_segment(self):
        assert parse_version('1.2.x.4') == (1, 2)

    def test_empty_and_none(self):
        assert parse_version('') == ()
        assert parse_version(None) == ()

    def test_non_numeric(self):
        assert parse_version('stable') == ()


class TestCompareVersions:
    """Tests for compare_versions and version_at_least."""

    def test_zero_padding_is_equal(self):
        assert compare_versions('5.2', '5.2.0') == 0
        assert compare_versions('5.2.0', '5.2') == 0

    def test_numeric_not_lexical(self):
        assert compare_versions('3.10.0', '3.9') == 1
        assert compare_versions('3.9', '3.10') == -1

    def test_at_least_with_padding(self):
        """Runtime 5.2.0 satisfies minimum 5.2."""
        assert version_at_least('5.2.0', '5.2') is True
        assert version_at_least('5.2', '5.2.0') is True

    def test_reflexive(self):
        for v in ['1', '1.0', '2.3.1', '10.0.0.1']:
            assert version_at_least(v, v) is True

    def test_transitive(self):
        chain = ['3.8', '3.8.10', '3.9', '3.10.0', '3.12.1']
        for i, low in enumerate(chain):
            for high in chain[i:]:
                assert version_at_least(high, low) is True

    def test_below_minimum(self):
        assert version_at_least('3.8.10', '3.9') is False

    def test_absent_current_fails(self):
        """A missing version must never compare as passing."""
        assert version_at_least(None, '0') is False
        assert version_at_least('', '1.0') is False
        assert version_at_least('unknown', '1.0') is False


class TestNormalizeVersion:
    """Tests for pulling a version token out of free text."""

    def test_version_in_sentence(self):
        assert normalize_version('OpenSSL 3.0.2 15 Mar 2022') == '3.0.2'

    def test_version_after_underscore(self):
        assert normalize_version('expat_2.4.7') == '2.4.7'

    def test_numeric_only_returned_as_is(self):
        assert normalize_version('20090626') == '20090626'

    def test_non_numeric_is_absent(self):
        assert normalize_version('enabled') is None

    def test_pair_uses_local_value(self):
        assert normalize_version(('2.1', '2.0')) == '2.1'

    def test_none(self):
        assert normalize_version(None) is None


class TestExtractVersion:
    """Tests for the snapshot section heuristic."""

    def test_label_with_trailing_text(self):
        assert extract_version({'lib Version': '2.3.1 stable'}) == '2.3.1'

    def test_first_matching_key_wins(self):
        section = {
            'Support': 'enabled',
            'API Version': '20090626',
            'Library Version': '1.2.3',
        }
        assert extract_version(section) == '20090626'

    def test_key_match_is_case_insensitive(self):
        assert extract_version({'GD VERSION': 'bundled (2.0.34 compatible)'}) == '2.0.34'

    def test_first_key_without_token_is_absent(self):
        """Later keys are not consulted once a version key is found."""
        section = {'Version': 'bundled', 'Other version': '1.0'}
        assert extract_version(section) is None

    def test_no_version_key(self):
        assert extract_version({'Support': 'enabled'}) is None

    def test_empty_section(self):
        assert extract_version({}) is None


class TestVersionSources:
    """Tests for module and distribution version sources."""

    def test_missing_module(self):
        assert module_attribute('no_such_module_reqcheck', '__version__')() is None

    def test_missing_attribute(self):
        assert module_attribute('json', 'no_such_attribute')() is None

    def test_module_attribute(self):
        assert module_attribute('zlib', 'ZLIB_VERSION')()

    def test_missing_distribution(self):
        assert distribution('no-such-distribution-reqcheck')() is None

    def test_installed_distribution(self):
        assert parse_version(distribution('pytest')())


class TestVersionLookup:
    """Tests for table-driven lookup with snapshot fallback."""

    def test_table_source_wins(self):
        lookup = VersionLookup(
            RuntimeSnapshot({'foo': {'Version': '9.9'}}),
            sources={'foo': [lambda: 'foo library 1.2.3']},
            use_defaults=False,
        )
        assert lookup.lookup('foo') == '1.2.3'

    def test_falls_back_to_snapshot(self):
        lookup = VersionLookup(
            RuntimeSnapshot({'foo': {'Version': '9.9'}}),
            sources={'foo': [lambda: None]},
            use_defaults=False,
        )
        assert lookup.lookup('foo') == '9.9'

    def test_unknown_capability_is_absent(self):
        lookup = VersionLookup(RuntimeSnapshot(), sources={}, use_defaults=False)
        assert lookup.lookup('foo') is None

    def test_default_sources_use_metadata(self):
        lookup = VersionLookup(RuntimeSnapshot(), sources={})
        assert version_at_least(lookup.lookup('pytest'), '1.0')

    @pytest.mark.parametrize('name', ['sqlite3', 'zlib'])
    def test_builtin_table(self, name):
        """Known stdlib capabilities report a version from the live runtime."""
        assert parse_version(VersionLookup().lookup(name))
