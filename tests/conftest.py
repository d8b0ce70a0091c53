from __future__ import annotations

from typing import List

import pytest

from phone_cleaner.models.phone import CleaningSettings, Country, InjectionRule, LengthMode, TrunkHandling
from phone_cleaner.services.countries import load_countries
from phone_cleaner.services.report import build_processing_context


@pytest.fixture(scope="session")
def countries() -> List[Country]:
    return load_countries()


@pytest.fixture()
def synthetic_countries() -> List[Country]:
    """Two countries whose dial codes prefix each other (96 vs 966)."""
    return [
        Country(iso2="XX", name_en="Shortland", name_ar="", dial_code="96"),
        Country(
            iso2="SA",
            name_en="Saudi Arabia",
            name_ar="السعودية",
            dial_code="966",
            trunk_prefix="0",
            national_number_length_min=9,
            national_number_length_max=9,
        ),
    ]


@pytest.fixture()
def saudi_rule() -> InjectionRule:
    return InjectionRule(
        id="saudi",
        name="Saudi",
        dial_code="+966",
        length_mode=LengthMode.EQUALS,
        length_equals=10,
        prefixes=("05",),
        trunk_handling=TrunkHandling.REMOVE_LEADING_0,
    )


@pytest.fixture()
def yemen_rule() -> InjectionRule:
    return InjectionRule(
        id="yemen",
        name="Yemen",
        dial_code="+967",
        length_mode=LengthMode.EQUALS,
        length_equals=9,
        prefixes=("77", "73", "71"),
        trunk_handling=TrunkHandling.KEEP,
    )


@pytest.fixture()
def make_context(countries):
    """Build a normalization context from CleaningSettings keyword arguments."""
    def _make(**kwargs):
        return build_processing_context(countries, CleaningSettings(**kwargs))
    return _make
