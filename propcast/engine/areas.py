"""Postcode-area reference table and area-code resolution."""

import json
import logging
import re
from functools import lru_cache
from pathlib import Path

from propcast.engine.postcode import normalize_postcode
from propcast.models.area import DEFAULT_AREA_CODE, AreaProfile

logger = logging.getLogger(__name__)

AREA_PROFILES_PATH = Path(__file__).resolve().parent.parent / "data" / "area_profiles.json"

AREA_CODE_RE = re.compile(r"^[A-Z]{1,2}$")

# Regional groupings used by the local-factor and recommendation rules
LONDON = frozenset({"E", "EC", "N", "NW", "SE", "SW", "W", "WC"})
NORTHERN_POWERHOUSE = frozenset({"M", "L", "LS", "S", "NE"})
SCOTTISH_CITIES = frozenset({"G", "EH", "AB", "DD"})
WELSH_CITIES = frozenset({"CF", "SA", "NP"})


class AreaTable:
    """Immutable mapping of area code -> AreaProfile, always containing DEFAULT."""

    def __init__(self, profiles: dict[str, AreaProfile], version: str = ""):
        if DEFAULT_AREA_CODE not in profiles:
            raise ValueError("Area table has no DEFAULT entry")
        for code in profiles:
            if code != DEFAULT_AREA_CODE and not AREA_CODE_RE.match(code):
                raise ValueError(f"Invalid area code in table: {code!r}")
        self._profiles = dict(profiles)
        self.version = version

    @classmethod
    def from_file(cls, path: Path = AREA_PROFILES_PATH) -> "AreaTable":
        raw = json.loads(path.read_text(encoding="utf-8"))
        profiles = {
            code: AreaProfile(
                area_code=code,
                region=entry["region"],
                base_price=int(entry["base_price"]),
                growth_rate=float(entry["growth_rate"]),
                yield_percent=float(entry["yield_percent"]),
                risk_factor=float(entry["risk_factor"]),
            )
            for code, entry in raw["areas"].items()
        }
        logger.info("Loaded %d area profiles (version %s)", len(profiles), raw.get("version", "?"))
        return cls(profiles, version=raw.get("version", ""))

    def __len__(self) -> int:
        return len(self._profiles)

    def __contains__(self, area_code: str) -> bool:
        return area_code in self._profiles

    @property
    def default(self) -> AreaProfile:
        return self._profiles[DEFAULT_AREA_CODE]

    def get(self, area_code: str) -> AreaProfile:
        return self._profiles.get(area_code, self.default)

    def resolve_area_code(self, postcode: str) -> str:
        """Longest matching letter prefix: two letters, then one, else DEFAULT."""
        cleaned = normalize_postcode(postcode or "")
        two = cleaned[:2]
        if len(two) == 2 and two.isalpha() and two in self._profiles:
            return two
        one = cleaned[:1]
        if one.isalpha() and one in self._profiles:
            return one
        return DEFAULT_AREA_CODE

    def profile_for(self, postcode: str) -> AreaProfile:
        return self.get(self.resolve_area_code(postcode))


@lru_cache(maxsize=1)
def load_area_table() -> AreaTable:
    """Process-wide read-only table, loaded on first use."""
    return AreaTable.from_file()
