"""Built-in country presets: a default country plus field overrides for it."""

from typing import Dict, List, Optional

from phone_cleaner.models.phone import Preset

PRESETS: List[Preset] = [
    Preset(
        id="saudi",
        label_en="Saudi preset",
        label_ar="الإعداد السعودي",
        description_ar="يفرض طول 9 أرقام مع بادئة محلية 0.",
        default_country_iso2="SA",
        country_overrides={
            "trunk_prefix": "0",
            "national_number_length_min": 9,
            "national_number_length_max": 9,
        },
    ),
    Preset(
        id="yemen",
        label_en="Yemen preset",
        label_ar="الإعداد اليمني",
        description_ar="يفرض طول 9 أرقام مع بادئة محلية 0.",
        default_country_iso2="YE",
        country_overrides={
            "trunk_prefix": "0",
            "national_number_length_min": 9,
            "national_number_length_max": 9,
        },
    ),
    Preset(
        id="uae",
        label_en="UAE preset",
        label_ar="الإعداد الإماراتي",
        description_ar="يفرض طول 9 أرقام مع بادئة محلية 0.",
        default_country_iso2="AE",
        country_overrides={
            "trunk_prefix": "0",
            "national_number_length_min": 9,
            "national_number_length_max": 9,
        },
    ),
    Preset(
        id="egypt",
        label_en="Egypt preset",
        label_ar="الإعداد المصري",
        description_ar="يفرض طول 10 أرقام مع بادئة محلية 0.",
        default_country_iso2="EG",
        country_overrides={
            "trunk_prefix": "0",
            "national_number_length_min": 10,
            "national_number_length_max": 10,
        },
    ),
]

_PRESETS_BY_ID: Dict[str, Preset] = {p.id: p for p in PRESETS}


def get_preset(preset_id: Optional[str]) -> Optional[Preset]:
    if not preset_id:
        return None
    return _PRESETS_BY_ID.get(preset_id)
