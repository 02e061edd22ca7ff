from pathlib import Path

# Closure corridor
BUFFER_M = 50              # half-width of the closed corridor around the route
JUNCTION_SNAP_M = 50       # road-road junctions kept within this distance of the corridor edge
DEDUP_M = 10               # boundary points closer than this are the same point

# Topology
SEARCH_RADIUS_M = 100      # radius used to collect approaches around a boundary point
DEFAULT_SPEED_KMH = 50
SPEED_BY_CLASS = {
    "motorway": 100,
    "trunk": 90,
    "primary": 70,
    "secondary": 60,
    "tertiary": 50,
    "residential": 40,
    "unclassified": 50,
}

# Scenario risk
POI_PROXIMITY_M = 200      # start/finish closer than this -> high risk

# OTM placement standards (Book 7)
MIN_ADVANCE_DISTANCE_M = 150
PRIMARY_ADVANCE_MIN_M = 200
SECONDARY_ADVANCE_MIN_M = 150
HIGH_SPEED_THRESHOLD_KMH = 70
DRUM_SPEED_KMH = 60        # drums instead of cones at or above this speed
TAPER_LENGTH_M = 50
TURN_SIGN_OFFSET_M = -30
DEFAULT_UNIT_COST = 15.00

# OSM fetch
ROUTE_BBOX_BUFFER_M = 500
DRIVABLE_HIGHWAYS = (
    "primary", "secondary", "tertiary", "trunk", "residential", "unclassified",
)
EXCLUDED_HIGHWAYS = {"footway", "path", "cycleway", "steps", "pedestrian"}

# I/O
DATA_DIR = Path("data")
INPUTS = DATA_DIR / "inputs"
OUTPUTS = DATA_DIR / "outputs"
PLANS_DIR = OUTPUTS / "plans"
SUMMARIES_DIR = OUTPUTS / "summaries"
