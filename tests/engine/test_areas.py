"""Tests for the postcode-area reference table."""

import json

import pytest

from propcast.engine.areas import AreaTable
from propcast.models.area import DEFAULT_AREA_CODE, AreaProfile


def _profile(code: str, region: str = "Somewhere") -> AreaProfile:
    return AreaProfile(code, region, 200_000, 4.0, 5.0, 1.0)


class TestShippedTable:
    def test_contains_default(self, area_table):
        assert DEFAULT_AREA_CODE in area_table
        assert area_table.default.region == "UK Average"
        assert area_table.default.coverage == "estimated"

    def test_version_recorded(self, area_table):
        assert area_table.version

    def test_london_southwest(self, area_table):
        profile = area_table.profile_for("SW1A 1AA")
        assert profile.area_code == "SW"
        assert profile.region == "London Southwest"
        assert profile.base_price == 750_000
        assert profile.growth_rate == 3.7
        assert profile.coverage == "detailed"

    def test_every_entry_well_formed(self, area_table):
        for code in ("E", "M", "G", "CF", "BT", "NE"):
            profile = area_table.get(code)
            assert profile.base_price > 0
            assert profile.risk_factor > 0


class TestResolution:
    def test_two_letter_prefix_preferred(self, area_table):
        assert area_table.resolve_area_code("SE1 7PB") == "SE"
        assert area_table.resolve_area_code("LS1 4AP") == "LS"

    def test_one_letter_when_second_char_is_digit(self, area_table):
        assert area_table.resolve_area_code("M1 1AE") == "M"
        assert area_table.resolve_area_code("E1 6AN") == "E"

    def test_one_letter_when_two_letter_unknown(self, area_table):
        # "SK" (Stockport) is not tabulated, "S" (Sheffield) is
        assert area_table.resolve_area_code("SK1 1AA") == "S"

    def test_unknown_area_falls_back_to_default(self, area_table):
        assert area_table.resolve_area_code("ZZ9 9ZZ") == DEFAULT_AREA_CODE
        assert area_table.profile_for("ZZ9 9ZZ").region == "UK Average"

    def test_case_and_whitespace_insensitive(self, area_table):
        assert area_table.resolve_area_code("  sw1a 1aa") == "SW"

    def test_get_unknown_code_returns_default(self, area_table):
        assert area_table.get("QQ").is_default


class TestConstruction:
    def test_requires_default(self):
        with pytest.raises(ValueError, match="DEFAULT"):
            AreaTable({"M": _profile("M")})

    def test_rejects_bad_codes(self):
        with pytest.raises(ValueError, match="Invalid area code"):
            AreaTable({DEFAULT_AREA_CODE: _profile(DEFAULT_AREA_CODE), "M1": _profile("M1")})

    def test_from_file(self, tmp_path):
        path = tmp_path / "areas.json"
        path.write_text(json.dumps({
            "version": "test",
            "areas": {
                "DEFAULT": {"region": "UK Average", "base_price": 1, "growth_rate": 1,
                            "yield_percent": 1, "risk_factor": 1},
                "X": {"region": "Xville", "base_price": 2, "growth_rate": 2,
                      "yield_percent": 2, "risk_factor": 2},
            },
        }))
        table = AreaTable.from_file(path)
        assert len(table) == 2
        assert table.version == "test"
        assert table.profile_for("X1 1AA").region == "Xville"
