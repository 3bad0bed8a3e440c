"""Best-effort prefecture and city/ward extraction from Japanese addresses."""

import re
from typing import Any, NamedTuple

import jaconv

# JIS X 0401 prefecture codes
PREFECTURE_CODES = {
    "北海道": "01",
    "青森県": "02",
    "岩手県": "03",
    "宮城県": "04",
    "秋田県": "05",
    "山形県": "06",
    "福島県": "07",
    "茨城県": "08",
    "栃木県": "09",
    "群馬県": "10",
    "埼玉県": "11",
    "千葉県": "12",
    "東京都": "13",
    "神奈川県": "14",
    "新潟県": "15",
    "富山県": "16",
    "石川県": "17",
    "福井県": "18",
    "山梨県": "19",
    "長野県": "20",
    "岐阜県": "21",
    "静岡県": "22",
    "愛知県": "23",
    "三重県": "24",
    "滋賀県": "25",
    "京都府": "26",
    "大阪府": "27",
    "兵庫県": "28",
    "奈良県": "29",
    "和歌山県": "30",
    "鳥取県": "31",
    "島根県": "32",
    "岡山県": "33",
    "広島県": "34",
    "山口県": "35",
    "徳島県": "36",
    "香川県": "37",
    "愛媛県": "38",
    "高知県": "39",
    "福岡県": "40",
    "佐賀県": "41",
    "長崎県": "42",
    "熊本県": "43",
    "大分県": "44",
    "宮崎県": "45",
    "鹿児島県": "46",
    "沖縄県": "47",
}

_PREFECTURE_PATTERN = re.compile(r"^(東京都|北海道|(?:京都|大阪)府|.{2,3}県)(.+)$")
# Shortest leading run ending in a municipal suffix, e.g. 中野区 / 浦安市 / 川崎市
_CITY_WARD_PATTERN = re.compile(r"^(.+?(?:市|区|町|村))")


class AddressParts(NamedTuple):
    """Prefecture and city/ward substrings; None when not found."""

    pref: str | None = None
    city_ward: str | None = None


def normalize_address(address: Any) -> str:
    """Fold full-width/half-width variants and drop whitespace."""
    if not isinstance(address, str):
        return ""
    return re.sub(r"\s+", "", jaconv.normalize(address))


def parse_address(address: Any) -> AddressParts:
    """Extract prefecture and city/ward from a free-text address.

    Examples:
        "東京都中野区中野1-1-1" -> ("東京都", "中野区")
        "神奈川県川崎市川崎区駅前本町" -> ("神奈川県", "川崎市")
        "Unknown Place" -> (None, None)

    This is a heuristic for filtering, not a geocoder. It never raises.
    """
    text = normalize_address(address)
    match = _PREFECTURE_PATTERN.match(text)
    if not match:
        return AddressParts()

    pref, rest = match.group(1), match.group(2)
    city_match = _CITY_WARD_PATTERN.match(rest)
    return AddressParts(pref=pref, city_ward=city_match.group(1) if city_match else None)


def prefecture_code(pref: str | None) -> str | None:
    """Look up the JIS X 0401 code for a prefecture name."""
    if not pref:
        return None
    return PREFECTURE_CODES.get(pref)
