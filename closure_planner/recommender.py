"""
OTM-compliant device recommendations for a closure scenario.

Placement follows OTM Book 7 for temporary conditions. Each open approach is
taken through the per-approach stages in order:

    1. advance warning   (upstream, distance scaled to speed)
    2. lane control      (merge arrows at the closure point)
    3. regulatory        (road closed / local traffic / turn restrictions)
    4. turn lane signs   (at real intersections only)

then the scenario-wide stages run once over all open approaches:

    5. physical barriers
    6. channelization

Every stage is a list of ``Rule`` entries so each placement decision can be
read, and tested, on its own.
"""
import logging
import math
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, NamedTuple, Optional

from .config import (
    DEFAULT_SPEED_KMH,
    DRUM_SPEED_KMH,
    HIGH_SPEED_THRESHOLD_KMH,
    PRIMARY_ADVANCE_MIN_M,
    SECONDARY_ADVANCE_MIN_M,
    TAPER_LENGTH_M,
    TURN_SIGN_OFFSET_M,
)
from .models import BoundaryType, Device, IntersectionType, RoadClass
from .signs import calculate_advance_distance, get_sign_cost

logger = logging.getLogger(__name__)

DEFAULT_STANDARDS = {
    "primary_advance_min": PRIMARY_ADVANCE_MIN_M,
    "secondary_advance_min": SECONDARY_ADVANCE_MIN_M,
    "high_speed_threshold": HIGH_SPEED_THRESHOLD_KMH,
}

MAJOR_CLASSES = {RoadClass.PRIMARY, RoadClass.SECONDARY, RoadClass.TRUNK}
BARRICADE_CLASSES = MAJOR_CLASSES | {RoadClass.TERTIARY}
TURN_RESTRICTION_TYPES = {IntersectionType.T, IntersectionType.FOUR_WAY}
NO_TURN_SIGN_TYPES = {IntersectionType.STRAIGHT, IntersectionType.DEAD_END}

BARRICADES_BY_TYPE = {IntersectionType.FOUR_WAY: 4, IntersectionType.T: 3}

# (left, straight, right) -> (code, reason)
TURN_LANE_SIGNS = {
    (True, False, False): ("Rb-41", "Left turn only lane"),
    (False, False, True): ("Rb-42", "Right turn only lane"),
    (True, True, False): ("Rb-43", "Left turn or straight lane"),
    (False, True, True): ("Rb-44", "Right turn or straight lane"),
    (True, False, True): ("Rb-45", "Left or right turn only lane"),
    (True, True, True): ("Rb-46", "All movements permitted"),
    (False, True, False): ("Rb-47", "Straight only lane"),
    (False, False, False): None,
}


class RuleInput(NamedTuple):
    scenario: Any
    approach: Any
    speed: int
    primary_distance: int
    secondary_distance: int
    standards: Dict[str, Any]

    @property
    def closure(self):
        return self.scenario.closure_context

    @property
    def hard_closure(self):
        return self.closure.boundary_type == BoundaryType.OPEN_TO_CLOSED


class Placement(NamedTuple):
    code: str
    quantity: int
    offset_m: int
    reason: str
    confidence: float


@dataclass(frozen=True)
class Rule:
    name: str
    when: Callable[[RuleInput], bool]
    place: Callable[[RuleInput], Optional[Placement]]


class DeviceKey(NamedTuple):
    """Devices sharing a key are the same physical placement."""
    code: str
    lat: float
    lng: float
    offset_m: int

    @classmethod
    def of(cls, device):
        return cls(device.code, round(device.lat, 4), round(device.lng, 4), device.offset_m or 0)


# ---- stage 4 helper ----
def available_movements():
    """Movements left open on an approach; straight through runs into the closure."""
    return {"left": True, "straight": False, "right": True}


def _turn_lane_sign(r):
    moves = available_movements()
    hit = TURN_LANE_SIGNS[(moves["left"], moves["straight"], moves["right"])]
    if hit is None:
        return None
    code, reason = hit
    return Placement(code, 1, TURN_SIGN_OFFSET_M, reason, 0.80)


def _channelizer(r):
    if r.speed >= DRUM_SPEED_KMH:
        code, spacing = "TC-54", 10
    else:
        code, spacing = "TC-51B", 5
    quantity = math.ceil(TAPER_LENGTH_M / spacing) + r.approach.lanes * 3
    reason = f"Channelization for {r.approach.lanes}-lane road at {r.speed} km/h"
    return Placement(code, quantity, 0, reason, 0.85)


APPROACH_RULES = (
    # 1. Advance warning
    Rule(
        "major_closure_warning",
        lambda r: r.hard_closure and r.approach.road_class in MAJOR_CLASSES,
        lambda r: Placement("TC-67", 1, -r.primary_distance - 100, "Major closure advance warning", 0.95),
    ),
    Rule(
        "work_ahead",
        lambda r: True,
        lambda r: Placement(
            "TC-1" if r.approach.road_class == RoadClass.PRIMARY else "TC-2B",
            1, -r.primary_distance, f"Advance warning for {r.speed} km/h traffic", 0.90,
        ),
    ),
    Rule(
        "lane_closed_ahead",
        lambda r: r.approach.lanes > 1,
        lambda r: Placement(
            "TC-3R", 1, -r.secondary_distance,
            f"Lane closure warning for {r.approach.lanes}-lane road", 0.85,
        ),
    ),
    Rule(
        "flashing_arrow_board",
        lambda r: r.speed >= r.standards["high_speed_threshold"],
        lambda r: Placement(
            "TC-12", 1, -r.secondary_distance - 50,
            "High-speed area requires flashing arrow boards", 0.90,
        ),
    ),
    # 2. Lane control
    Rule(
        "merge_arrow",
        lambda r: r.hard_closure and r.approach.lanes > 1,
        lambda r: Placement(
            "TC-4R", math.ceil(r.approach.lanes / 2), 0, "Lane closure arrow to guide traffic", 0.90,
        ),
    ),
    # 3. Regulatory
    Rule(
        "road_closed",
        lambda r: r.hard_closure,
        lambda r: Placement("Rb-92", 1, 0, "Road closed - regulatory sign", 0.95),
    ),
    Rule(
        "local_traffic_only",
        lambda r: r.closure.boundary_type == BoundaryType.PARTIAL_CLOSURE,
        lambda r: Placement("TC-7tB", 1, 0, "Local traffic only - partial closure", 0.90),
    ),
    Rule(
        "no_straight_through",
        lambda r: r.scenario.intersection.type in TURN_RESTRICTION_TYPES and r.closure.blocks_straight,
        lambda r: Placement("Rb-10", 1, 0, "No straight through at intersection", 0.85),
    ),
    Rule(
        "keep_right",
        lambda r: r.scenario.intersection.type in TURN_RESTRICTION_TYPES and r.approach.lanes > 1,
        lambda r: Placement("Rb-25R", 1, 0, "Keep right around closure", 0.80),
    ),
    Rule(
        "yield_to_oncoming",
        lambda r: r.closure.creates_one_way,
        lambda r: Placement("Rb-91", 1, 0, "Yield to oncoming traffic", 0.85),
    ),
    # 4. Turn lane designation
    Rule(
        "turn_lane_designation",
        lambda r: r.scenario.intersection.type not in NO_TURN_SIGN_TYPES,
        _turn_lane_sign,
    ),
)

SCENARIO_RULES = (
    # 5. Physical barriers
    Rule(
        "barricades",
        lambda r: r.hard_closure and r.approach.road_class in BARRICADE_CLASSES,
        lambda r: Placement(
            "TC-53A",
            BARRICADES_BY_TYPE.get(r.scenario.intersection.type, 2),
            0,
            f"Hard closure barricades on {r.approach.road_class.value} road",
            0.95,
        ),
    ),
    # 6. Channelization
    Rule(
        "channelization",
        lambda r: r.approach.lanes > 1,
        _channelizer,
    ),
)


def merge_devices(devices):
    """
    Collapse devices with the same ``DeviceKey`` and order them upstream first.

    Within a key the first device wins, keeping the larger quantity and
    confidence and joining the reasons. The sort is stable, so devices at
    the same offset stay in the order the stages produced them.
    """
    merged = {}
    for d in devices:
        key = DeviceKey.of(d)
        seen = merged.get(key)
        if seen is None:
            merged[key] = d
        else:
            merged[key] = replace(
                seen,
                quantity=max(seen.quantity, d.quantity),
                confidence=max(seen.confidence, d.confidence),
                reason=f"{seen.reason}; {d.reason}",
            )
    return sorted(merged.values(), key=lambda d: d.offset_m or 0)


def calculate_device_cost(device):
    """Unit cost (device override, else catalog) times quantity."""
    unit = device.cost or get_sign_cost(device.code)
    return unit * (device.quantity or 1)


class OntarioDeviceRecommender:
    """Maps a Scenario to an ordered, de-duplicated list of Devices."""

    def __init__(self, inventory=None, standards=None, approach_rules=APPROACH_RULES, scenario_rules=SCENARIO_RULES):
        self.inventory = dict(inventory or {})
        self.standards = {**DEFAULT_STANDARDS, **(standards or {})}
        self.approach_rules = tuple(approach_rules)
        self.scenario_rules = tuple(scenario_rules)

    def _rule_input(self, scenario, approach):
        speed = approach.speed_est or DEFAULT_SPEED_KMH
        return RuleInput(
            scenario=scenario,
            approach=approach,
            speed=speed,
            primary_distance=calculate_advance_distance(speed, self.standards["primary_advance_min"]),
            secondary_distance=calculate_advance_distance(speed, self.standards["secondary_advance_min"]),
            standards=self.standards,
        )

    @staticmethod
    def _device(r, placement):
        loc = r.scenario.location
        return Device(
            code=placement.code,
            quantity=placement.quantity,
            location=r.approach.road_name or "Road",
            offset_m=placement.offset_m,
            reason=placement.reason,
            confidence=placement.confidence,
            phase=r.closure.phase or "all",
            lat=loc.lat,
            lng=loc.lng,
            cost=get_sign_cost(placement.code),
        )

    def apply_rule(self, rule, r):
        if not rule.when(r):
            return None
        placement = rule.place(r)
        if placement is None:
            return None
        return self._device(r, placement)

    def recommend(self, scenario):
        """Devices for one scenario, upstream advance warnings first."""
        if scenario is None or scenario.intersection is None:
            return []

        inputs = [
            self._rule_input(scenario, a)
            for a in scenario.approaches
            if a.status == "open"
        ]
        devices = []
        for r in inputs:
            for rule in self.approach_rules:
                d = self.apply_rule(rule, r)
                if d is not None:
                    devices.append(d)
        for rule in self.scenario_rules:
            for r in inputs:
                d = self.apply_rule(rule, r)
                if d is not None:
                    devices.append(d)

        result = merge_devices(devices)
        logger.debug(
            "Scenario at (%.5f, %.5f) phase %s: %d devices from %d placements",
            scenario.location.lat, scenario.location.lng, scenario.phase, len(result), len(devices),
        )
        return result
