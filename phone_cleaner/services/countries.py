"""
Country table — lookups by ISO2 and by dial-code prefix.

The table is plain reference data (data/countries.json) threaded through
every call; nothing here holds module-level state.  Overrides never touch
the table they are applied to, they produce derived copies.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from phone_cleaner.models.phone import Country

DATA_DIR = Path(__file__).resolve().parent.parent / "data"
COUNTRIES_FILE = DATA_DIR / "countries.json"

DEFAULT_COUNTRY_ISO2 = "SA"

# Generic E.164 bounds on the total digit count (country code + national number)
GENERIC_MIN_LENGTH = 7
GENERIC_MAX_LENGTH = 15


def load_countries(path: Optional[Union[str, Path]] = None) -> List[Country]:
    """Read the country table from JSON, keeping file order."""
    source = Path(path) if path else COUNTRIES_FILE
    with source.open("r", encoding="utf-8") as f:
        data = json.load(f)
    return [Country.from_dict(item) for item in data]


def lookup_by_iso2(
    countries: Iterable[Country],
    iso2: Optional[str],
    override: Optional[Dict[str, Any]] = None,
) -> Optional[Country]:
    if not iso2:
        return None
    wanted = iso2.strip().upper()
    for country in countries:
        if country.iso2.upper() == wanted:
            return country.merged(override)
    return None


def sort_by_dial_code(countries: Iterable[Country]) -> List[Country]:
    """Longest dial code first, so a prefix scan resolves to the most specific country."""
    return sorted(countries, key=lambda c: len(c.dial_code), reverse=True)


def lookup_by_dial_code(
    countries: Sequence[Country],
    digits: str,
    override: Optional[Dict[str, Any]] = None,
) -> Optional[Country]:
    """
    Return the first country whose dial code prefixes `digits`.

    `countries` must already be ordered by sort_by_dial_code; the scan
    itself does not sort.
    """
    if not digits:
        return None
    for country in countries:
        if country.dial_code and digits.startswith(country.dial_code):
            if override and override.get("iso2", "").upper() == country.iso2.upper():
                return country.merged(override)
            return country
    return None


def apply_override(
    countries: Iterable[Country],
    iso2: Optional[str],
    override: Optional[Dict[str, Any]],
) -> List[Country]:
    """Return a new table where the named country carries the override fields."""
    table = list(countries)
    if not iso2 or not override:
        return table
    wanted = iso2.upper()
    return [c.merged(override) if c.iso2.upper() == wanted else c for c in table]
