from __future__ import annotations

from typing import List

import pytest

from htsresolver.config import DATA_DIR
from htsresolver.static_tables import StaticRateTable, build_schedule_table, build_verified_table

# Plain-text rendering of a few schedule lines, in the column order the
# USITC PDF produces when converted to text.
SCHEDULE_TEXT = """\
Heading/ Stat.
Subheading Suf- Article Description Unit Rates of Duty
fix of General Special 2
Quantity
6208 Women's or girls' singlets and other undershirts, slips, petticoats:
6208.19 Of other textile materials:
6208.19.90 00 Of cotton doz. kg
Free (AU, BH, CL,
CO, D, E, IL, JO,
KR, MA, OM, P,
PA, PE, S, SG)
8.7 %
90%
6208.21.00 Nightdresses and pajamas: Of cotton doz. kg
Free (AU, BH, CL,
CO, D, E, IL, JO,
KR, MA, OM, P,
PA, PE, S, SG)
8.9 %
90%
8518.30.20 00 Headphones and earphones No.
Free (A, AU, BH,
CL, CO, D, E, IL)
Free
35%
6104.63.20 00 Of synthetic fibers doz. kg
6104.69.80 00 Other doz. kg
Free (AU, BH, CL,
CO, E, IL, JO)
14.9 %
0402.21.25 00 In containers over 2 kg kg
Free (BH, CL, CO,
D, IL, JO, MA)
3.3¢/kg + 5%
0105.94.00 00 Chickens weighing more than 185 g No.
Free (A+, AU, BH,
CL, CO, D, E, IL)
2¢/kg
3926.90.99 90 Other articles of plastics kg
5.3% (AU, BH, CL)
$1.00
9999.10.00 00 Unlisted article
12 %
"""


@pytest.fixture
def schedule_text() -> str:
    return SCHEDULE_TEXT


@pytest.fixture
def verified_table() -> StaticRateTable:
    return build_verified_table(DATA_DIR / "verified_rates.json")


@pytest.fixture
def schedule_table() -> StaticRateTable:
    return build_schedule_table(DATA_DIR / "schedule_rates.json")


@pytest.fixture
def bundled_tables(verified_table: StaticRateTable, schedule_table: StaticRateTable) -> List[StaticRateTable]:
    return [verified_table, schedule_table]


@pytest.fixture
def empty_tables() -> List[StaticRateTable]:
    return [
        StaticRateTable.from_entries("verified", "verified_table", []),
        StaticRateTable.from_entries("schedule", "schedule_table", []),
    ]


@pytest.fixture(autouse=True)
def _clear_hts_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "HTS_REFERENCE_DOCUMENT",
        "HTS_VERIFIED_SEED",
        "HTS_SCHEDULE_SEED",
        "HTS_SCAN_WINDOW",
        "HTS_VERIFY_RADIUS",
        "HTS_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
