"""
Tests for memory limit conversion.

Run: python3 -m pytest tests/test_units.py -v
"""

import pytest

from reqcheck.core.units import bytes_to_limit_string, memory_limit_bytes


class TestMemoryLimitBytes:
    """Tests for memory_limit_bytes."""

    @pytest.mark.parametrize('value,expected', [
        ('64M', 67108864),
        ('1G', 1073741824),
        ('512K', 524288),
        ('1048576', 1048576),
    ])
    def test_known_values(self, value, expected):
        assert memory_limit_bytes(value) == expected

    def test_suffix_case_insensitive(self):
        assert memory_limit_bytes('64m') == memory_limit_bytes('64M')
        assert memory_limit_bytes('2g') == 2 * 1024 ** 3

    def test_fraction_rounds(self):
        assert memory_limit_bytes('1.5M') == 1572864
        assert memory_limit_bytes('0.3K') == 307

    def test_unlimited(self):
        assert memory_limit_bytes('-1') == -1

    def test_integer_passthrough(self):
        assert memory_limit_bytes(4096) == 4096

    def test_whitespace(self):
        assert memory_limit_bytes(' 8M ') == 8 * 1024 * 1024

    def test_garbage_raises(self):
        with pytest.raises(ValueError):
            memory_limit_bytes('lots')

    def test_empty_raises(self):
        with pytest.raises(ValueError):
            memory_limit_bytes('')


class TestBytesToLimitString:
    """Tests for bytes_to_limit_string."""

    def test_whole_megabytes(self):
        assert bytes_to_limit_string(134217728) == '128M'

    def test_round_trip(self):
        assert memory_limit_bytes(bytes_to_limit_string(192 * 1024 * 1024)) == 192 * 1024 * 1024

    def test_not_whole_megabytes(self):
        assert bytes_to_limit_string(1000) == '1000'

    def test_unlimited(self):
        assert bytes_to_limit_string(-1) == '-1'
