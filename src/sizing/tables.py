"""Static sizing tables.

Cooling bands are inclusive sq ft ranges per tonnage step, listed in
ascending tonnage order. Warmer zones tolerate more sq ft per ton.
"""
from typing import Dict, List, Tuple

from schemas.enums import ClimateZone, FloorType

SqftBand = Tuple[int, int]

COOLING_TABLES: Dict[ClimateZone, Dict[float, SqftBand]] = {
    ClimateZone.ZONE_1: {
        1.5: (600, 900),
        2.0: (901, 1200),
        2.5: (1201, 1500),
        3.0: (1501, 1800),
        3.5: (1801, 2100),
        4.0: (2101, 2400),
        5.0: (2401, 3000),
    },
    ClimateZone.ZONE_2: {
        1.5: (600, 950),
        2.0: (951, 1250),
        2.5: (1251, 1550),
        3.0: (1551, 1850),
        3.5: (1851, 2150),
        4.0: (2151, 2500),
        5.0: (2501, 3100),
    },
    ClimateZone.ZONE_3: {
        1.5: (600, 1000),
        2.0: (1001, 1300),
        2.5: (1301, 1600),
        3.0: (1601, 1900),
        3.5: (1901, 2200),
        4.0: (2201, 2600),
        5.0: (2601, 3200),
    },
    ClimateZone.ZONE_4: {
        1.5: (700, 1050),
        2.0: (1051, 1350),
        2.5: (1351, 1600),
        3.0: (1601, 2000),
        3.5: (2001, 2250),
        4.0: (2251, 2700),
        5.0: (2751, 3300),
    },
    ClimateZone.ZONE_5: {
        1.5: (700, 1100),
        2.0: (1101, 1400),
        2.5: (1401, 1650),
        3.0: (1651, 2100),
        3.5: (2101, 2300),
        4.0: (2301, 2700),
        5.0: (2701, 3300),
    },
}

# BTU per sq ft (min, max)
HEATING_RANGES: Dict[ClimateZone, Tuple[int, int]] = {
    ClimateZone.ZONE_1: (30, 35),
    ClimateZone.ZONE_2: (35, 40),
    ClimateZone.ZONE_3: (40, 45),
    ClimateZone.ZONE_4: (45, 50),
    ClimateZone.ZONE_5: (50, 60),
}

STANDARD_FURNACE_SIZES: List[int] = [45000, 60000, 70000, 80000, 90000, 100000, 120000]

COOLING_FLOOR_FACTORS: Dict[FloorType, float] = {
    FloorType.UPPER: 1.15,
    FloorType.BASEMENT: 0.8,
    FloorType.MAIN: 1.0,
}

HEATING_FLOOR_FACTORS: Dict[FloorType, float] = {
    FloorType.UPPER: 1.10,
    FloorType.BASEMENT: 0.85,
    FloorType.MAIN: 1.0,
}

MAX_FLOORS = 3
