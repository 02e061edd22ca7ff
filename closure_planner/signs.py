"""
Ontario Traffic Manual sign and device catalog.

Codes follow OTM Book 5 (Regulatory Signs) and Book 7 (Temporary Conditions).
Costs are planning estimates per unit in CAD.
"""
import math
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Optional

from .config import DEFAULT_UNIT_COST, MIN_ADVANCE_DISTANCE_M

CATALOG_VERSION = "OTM-B5B7-2024.1"


class SignCategory(str, Enum):
    BARRIER = "barrier"
    CHANNELIZATION = "channelization"
    ADVANCE_WARNING = "advance_warning"
    LANE_CONTROL = "lane_control"
    CLOSURE = "closure"
    REGULATORY = "regulatory"
    LANE_DESIGNATION = "lane_designation"
    INFORMATION = "information"


@dataclass(frozen=True)
class SignCatalogEntry:
    code: str
    name: str
    category: SignCategory
    description: str
    placement: str
    cost: float
    min_distance_m: Optional[int] = None


def _entry(code, name, category, description, placement, cost, min_distance_m=None):
    return code, SignCatalogEntry(code, name, SignCategory(category), description, placement, cost, min_distance_m)


ONTARIO_SIGNS = MappingProxyType(dict([
    # Cones, drums, barricades
    _entry("TC-51B", "Traffic Cones", "channelization",
           "Used for channelizing traffic, marking lanes, and guiding vehicles",
           "On road surface, typically 3-5 meters apart", 5.00),
    _entry("TC-54", "Flexible Drums (Barrels)", "channelization",
           "More visible than cones, used for higher-speed areas",
           "On road surface, typically 5-10 meters apart", 15.00),
    _entry("TC-53A", "Barricades", "barrier",
           "Type II or Type III barricades for hard closures",
           "At closure points, blocking access", 25.00),

    # Advance warning
    _entry("TC-1", "Construction Ahead", "advance_warning",
           "Warns of upcoming construction/road work",
           "150-300m before work zone (based on speed)", 15.00, 150),
    _entry("TC-2B", "Road Work", "advance_warning",
           "Indicates active road work ahead",
           "100-250m before work zone", 15.00, 100),
    _entry("TC-3R", "Right Lane Closed Ahead", "advance_warning",
           "Warns that right lane will be closed",
           "150-300m before lane closure", 15.00, 150),
    _entry("TC-3L", "Left Lane Closed Ahead", "advance_warning",
           "Warns that left lane will be closed",
           "150-300m before lane closure", 15.00, 150),
    _entry("TC-67", "Street Section Closed (Advance)", "advance_warning",
           "Warns of street section closure ahead",
           "200-400m before closure", 20.00, 200),
    _entry("TC-12", "Flashing Arrow Boards", "advance_warning",
           "High-visibility warning with flashing arrows",
           "150-300m before closure (high-speed areas)", 50.00, 150),

    # Lane closure and control
    _entry("TC-4L", "Lane Closure Arrow (Left)", "lane_control",
           "Directs traffic to merge left", "At lane closure point", 20.00),
    _entry("TC-4R", "Lane Closure Arrow (Right)", "lane_control",
           "Directs traffic to merge right", "At lane closure point", 20.00),
    _entry("TC-7tA", "Road Closed (Tab)", "closure",
           "Indicates road is closed ahead", "At closure point or advance warning", 15.00),
    _entry("TC-7tB", "Local Traffic Only (Tab)", "closure",
           "Allows local access only", "At closure point for partial closures", 15.00),

    # Information
    _entry("PVMS", "Portable Variable Message Sign", "information",
           "Dynamic message sign for complex situations", "At key decision points", 100.00),

    # Regulatory
    _entry("Rb-91", "Yield to Oncoming Traffic", "regulatory",
           "Requires yielding to oncoming traffic", "At intersections with modified traffic flow", 15.00),
    _entry("Rb-92", "Road Closed", "regulatory",
           "Prohibits entry - road is closed", "At closure point", 15.00),
    _entry("Rb-10", "No Straight Through", "regulatory",
           "Prohibits straight-through movement", "At intersection approach", 15.00),
    _entry("Rb-11", "No Right Turn", "regulatory",
           "Prohibits right turn", "At intersection approach", 15.00),
    _entry("Rb-12", "No Left Turn", "regulatory",
           "Prohibits left turn", "At intersection approach", 15.00),
    _entry("Rb-25R", "Keep Right", "regulatory",
           "Directs traffic to keep right", "Before obstructions or lane closures", 15.00),
    _entry("Rb-25L", "Keep Left", "regulatory",
           "Directs traffic to keep left", "Before obstructions or lane closures", 15.00),

    # Turn lane designation
    _entry("Rb-41", "Left Turn Only", "lane_designation",
           "Lane restricted to left turns only", "Above or beside lane, before intersection", 20.00),
    _entry("Rb-42", "Right Turn Only", "lane_designation",
           "Lane restricted to right turns only", "Above or beside lane, before intersection", 20.00),
    _entry("Rb-43", "Left Turn or Straight", "lane_designation",
           "Lane allows left turn or straight through", "Above or beside lane, before intersection", 20.00),
    _entry("Rb-44", "Right Turn or Straight", "lane_designation",
           "Lane allows right turn or straight through", "Above or beside lane, before intersection", 20.00),
    _entry("Rb-45", "Left or Right Turn Only", "lane_designation",
           "Lane restricted to left or right turns", "Above or beside lane, before intersection", 20.00),
    _entry("Rb-46", "All Movements Permitted", "lane_designation",
           "All movements allowed (left, straight, right)", "Above or beside lane, before intersection", 20.00),
    _entry("Rb-47", "Straight Only", "lane_designation",
           "Lane restricted to straight-through only", "Above or beside lane, before intersection", 20.00),
]))


def calculate_advance_distance(speed_kmh, min_distance=MIN_ADVANCE_DISTANCE_M):
    """
    Advance warning distance in meters: 2 s of travel at ``speed_kmh`` plus a
    50 m buffer, never less than ``min_distance``. Rounded half up.
    """
    distance = max(min_distance, speed_kmh / 3.6 * 2 + 50)
    return int(math.floor(distance + 0.5))


def get_sign(code):
    return ONTARIO_SIGNS.get(code)


def get_sign_cost(code):
    entry = ONTARIO_SIGNS.get(code)
    return entry.cost if entry and entry.cost else DEFAULT_UNIT_COST
