"""
Seed datasets for a monitoring session.

Everything here is static mission/reference data. Timestamps are expressed
as offsets from the session start so a fresh session always sees the last
seven days of history.
"""

from datetime import datetime, timedelta
from typing import List


# =============================================================================
# HISTORICAL THREATS (playback dataset)
# =============================================================================

# hours_ago is relative to session start
THREATS_SEED: List[dict] = [
    {
        "event_id": "threat-001",
        "event_type": "poaching",
        "hours_ago": 7 * 24,
        "location": {"lat": -2.85, "lng": 38.5},
        "payload": {"severity": "high", "park": "Tsavo East",
                    "description": "Suspected poachers detected near elephant herd",
                    "resolved": True, "response_time_min": 15,
                    "casualties": {"wildlife": 0, "human": 0}}
    },
    {
        "event_id": "threat-002",
        "event_type": "fire",
        "hours_ago": 6 * 24,
        "location": {"lat": -1.42, "lng": 35.18},
        "payload": {"severity": "critical", "park": "Masai Mara",
                    "description": "Bushfire outbreak in northern sector",
                    "resolved": True, "response_time_min": 45,
                    "financial_impact": 250000}
    },
    {
        "event_id": "threat-003",
        "event_type": "wildlife_conflict",
        "hours_ago": 5 * 24,
        "location": {"lat": -2.68, "lng": 37.28},
        "payload": {"severity": "medium", "park": "Amboseli",
                    "description": "Elephant crop raiding incident at buffer zone",
                    "resolved": True, "response_time_min": 30,
                    "casualties": {"wildlife": 0, "human": 0},
                    "financial_impact": 45000}
    },
    {
        "event_id": "threat-004",
        "event_type": "intrusion",
        "hours_ago": 4 * 24,
        "location": {"lat": -0.35, "lng": 36.08},
        "payload": {"severity": "high", "park": "Lake Nakuru",
                    "description": "Unauthorized vehicle detected in restricted zone",
                    "resolved": True, "response_time_min": 8}
    },
    {
        "event_id": "threat-005",
        "event_type": "poaching",
        "hours_ago": 3 * 24,
        "location": {"lat": -3.0, "lng": 38.3},
        "payload": {"severity": "critical", "park": "Tsavo West",
                    "description": "Armed poaching gang intercepted",
                    "resolved": True, "response_time_min": 22,
                    "casualties": {"wildlife": 1, "human": 0}}
    },
    {
        "event_id": "threat-006",
        "event_type": "fire",
        "hours_ago": 2 * 24,
        "location": {"lat": 0.55, "lng": 37.52},
        "payload": {"severity": "medium", "park": "Samburu",
                    "description": "Controlled burn near community border",
                    "resolved": True, "response_time_min": 12}
    },
    {
        "event_id": "threat-007",
        "event_type": "drought",
        "hours_ago": 24,
        "location": {"lat": -2.65, "lng": 37.26},
        "payload": {"severity": "high", "park": "Amboseli",
                    "description": "Water source critically low - wildlife stress detected",
                    "resolved": False, "response_time_min": 0}
    },
    {
        "event_id": "threat-008",
        "event_type": "intrusion",
        "hours_ago": 12,
        "location": {"lat": -1.37, "lng": 36.86},
        "payload": {"severity": "low", "park": "Nairobi NP",
                    "description": "Tourist vehicle off designated path",
                    "resolved": True, "response_time_min": 5}
    },
    {
        "event_id": "threat-009",
        "event_type": "wildlife_conflict",
        "hours_ago": 6,
        "location": {"lat": 0.15, "lng": 38.18},
        "payload": {"severity": "high", "park": "Meru",
                    "description": "Lion spotted near village livestock enclosure",
                    "resolved": True, "response_time_min": 18}
    },
    {
        "event_id": "threat-010",
        "event_type": "poaching",
        "hours_ago": 2,
        "location": {"lat": -0.15, "lng": 37.31},
        "payload": {"severity": "medium", "park": "Mount Kenya",
                    "description": "Snare traps discovered and removed",
                    "resolved": True, "response_time_min": 35}
    },
]


# =============================================================================
# DRONE PATROL MISSIONS
# =============================================================================

# mission_start/estimated_end are minutes relative to session start
PATROLS_SEED: List[dict] = [
    {
        "entity_id": "patrol-mm-1", "drone_id": "DRN-MM-001", "name": "Mara Eagle-1",
        "park_id": "masai-mara", "status": "active", "route_type": "perimeter",
        "waypoints": [
            {"lat": -1.35, "lng": 34.98, "altitude": 150},
            {"lat": -1.32, "lng": 35.08, "altitude": 150},
            {"lat": -1.40, "lng": 35.12, "altitude": 150},
            {"lat": -1.48, "lng": 35.05, "altitude": 150},
            {"lat": -1.45, "lng": 34.95, "altitude": 150},
            {"lat": -1.35, "lng": 34.98, "altitude": 150},
        ],
        "current_position": {"lat": -1.38, "lng": 35.02, "altitude": 150, "heading": 45},
        "speed": 45, "battery": 78, "coverage_radius": 2.5,
        "mission_start_min": -60, "estimated_end_min": 90,
        "capabilities": {"thermal": True, "night_vision": True}
    },
    {
        "entity_id": "patrol-mm-2", "drone_id": "DRN-MM-002", "name": "Mara Hawk-2",
        "park_id": "masai-mara", "status": "active", "route_type": "hotspot",
        "waypoints": [
            {"lat": -1.42, "lng": 35.04, "altitude": 120},
            {"lat": -1.44, "lng": 35.06, "altitude": 120},
            {"lat": -1.43, "lng": 35.08, "altitude": 120},
        ],
        "current_position": {"lat": -1.43, "lng": 35.05, "altitude": 120, "heading": 180},
        "speed": 30, "battery": 65, "coverage_radius": 1.8,
        "mission_start_min": -30, "estimated_end_min": 60,
        "capabilities": {"thermal": True, "night_vision": False}
    },
    {
        "entity_id": "patrol-te-1", "drone_id": "DRN-TE-001", "name": "Tsavo Guardian-1",
        "park_id": "tsavo-east", "status": "active", "route_type": "grid",
        "waypoints": [
            {"lat": -2.95, "lng": 38.65, "altitude": 200},
            {"lat": -3.00, "lng": 38.75, "altitude": 200},
            {"lat": -3.10, "lng": 38.80, "altitude": 200},
            {"lat": -3.15, "lng": 38.70, "altitude": 200},
            {"lat": -3.05, "lng": 38.60, "altitude": 200},
        ],
        "current_position": {"lat": -3.05, "lng": 38.72, "altitude": 200, "heading": 270},
        "speed": 55, "battery": 82, "coverage_radius": 3.0,
        "mission_start_min": -75, "estimated_end_min": 120,
        "capabilities": {"thermal": True, "night_vision": True}
    },
    {
        "entity_id": "patrol-te-2", "drone_id": "DRN-TE-002", "name": "Tsavo Sentinel-2",
        "park_id": "tsavo-east", "status": "returning", "route_type": "perimeter",
        "waypoints": [
            {"lat": -3.20, "lng": 38.85, "altitude": 180},
            {"lat": -3.25, "lng": 38.90, "altitude": 180},
            {"lat": -3.30, "lng": 38.82, "altitude": 180},
            {"lat": -3.22, "lng": 38.78, "altitude": 180},
        ],
        "current_position": {"lat": -3.24, "lng": 38.86, "altitude": 180, "heading": 135},
        "speed": 48, "battery": 21, "coverage_radius": 2.2,
        "mission_start_min": -45, "estimated_end_min": 75,
        "capabilities": {"thermal": True, "night_vision": True}
    },
    {
        "entity_id": "patrol-ab-1", "drone_id": "DRN-AB-001", "name": "Amboseli Scout-1",
        "park_id": "amboseli", "status": "active", "route_type": "surveillance",
        "waypoints": [
            {"lat": -2.62, "lng": 37.22, "altitude": 130},
            {"lat": -2.65, "lng": 37.28, "altitude": 130},
            {"lat": -2.68, "lng": 37.30, "altitude": 130},
            {"lat": -2.70, "lng": 37.25, "altitude": 130},
        ],
        "current_position": {"lat": -2.66, "lng": 37.26, "altitude": 130, "heading": 90},
        "speed": 40, "battery": 88, "coverage_radius": 2.0,
        "mission_start_min": -20, "estimated_end_min": 100,
        "capabilities": {"thermal": True, "night_vision": False}
    },
    {
        "entity_id": "patrol-sb-1", "drone_id": "DRN-SB-001", "name": "Samburu Raptor-1",
        "park_id": "samburu", "status": "standby", "route_type": "perimeter",
        "waypoints": [
            {"lat": 0.48, "lng": 37.48, "altitude": 140},
            {"lat": 0.52, "lng": 37.54, "altitude": 140},
            {"lat": 0.55, "lng": 37.50, "altitude": 140},
            {"lat": 0.50, "lng": 37.46, "altitude": 140},
        ],
        "current_position": {"lat": 0.51, "lng": 37.51, "altitude": 140, "heading": 315},
        "speed": 42, "battery": 75, "coverage_radius": 1.8,
        "mission_start_min": -40, "estimated_end_min": 90,
        "capabilities": {"thermal": True, "night_vision": True}
    },
    {
        "entity_id": "patrol-mr-1", "drone_id": "DRN-MR-001", "name": "Meru Falcon-1",
        "park_id": "meru", "status": "active", "route_type": "hotspot",
        "waypoints": [
            {"lat": 0.02, "lng": 38.08, "altitude": 160},
            {"lat": 0.05, "lng": 38.14, "altitude": 160},
            {"lat": 0.00, "lng": 38.18, "altitude": 160},
        ],
        "current_position": {"lat": 0.03, "lng": 38.12, "altitude": 160, "heading": 60},
        "speed": 38, "battery": 92, "coverage_radius": 2.2,
        "mission_start_min": -15, "estimated_end_min": 120,
        "capabilities": {"thermal": True, "night_vision": False}
    },
    {
        "entity_id": "patrol-ln-1", "drone_id": "DRN-LN-001", "name": "Nakuru Osprey-1",
        "park_id": "lake-nakuru", "status": "charging", "route_type": "surveillance",
        "waypoints": [
            {"lat": -0.28, "lng": 36.05, "altitude": 110},
            {"lat": -0.32, "lng": 36.10, "altitude": 110},
            {"lat": -0.35, "lng": 36.08, "altitude": 110},
        ],
        "current_position": {"lat": -0.30, "lng": 36.08, "altitude": 110, "heading": 150},
        "speed": 35, "battery": 34, "coverage_radius": 1.5,
        "mission_start_min": -25, "estimated_end_min": 80,
        "capabilities": {"thermal": False, "night_vision": False}
    },
]


# =============================================================================
# STATIC OVERLAY DATA
# =============================================================================

ANIMALS_SEED: List[dict] = [
    {"id": "AT001", "species": "Elephant", "name": "Tembo", "collar_id": "EC-2847",
     "location": {"lat": -1.4521, "lng": 35.2103}, "park_id": "masai-mara",
     "speed": 3.2, "direction": "NW", "health_status": "healthy", "battery_level": 87},
    {"id": "AT002", "species": "Lion", "name": "Simba", "collar_id": "LC-1923",
     "location": {"lat": -1.3892, "lng": 35.1847}, "park_id": "masai-mara",
     "speed": 0, "direction": "Stationary", "health_status": "healthy", "battery_level": 92},
    {"id": "AT003", "species": "Rhino", "name": "Kifaru", "collar_id": "RC-0512",
     "location": {"lat": -2.6234, "lng": 37.2912}, "park_id": "amboseli",
     "speed": 1.5, "direction": "E", "health_status": "healthy", "battery_level": 76},
    {"id": "AT004", "species": "Elephant", "name": "Duma", "collar_id": "EC-3156",
     "location": {"lat": -2.8912, "lng": 38.4234}, "park_id": "tsavo-east",
     "speed": 4.8, "direction": "S", "health_status": "concern", "battery_level": 45},
    {"id": "AT005", "species": "Cheetah", "name": "Haraka", "collar_id": "CC-0789",
     "location": {"lat": 0.5523, "lng": 37.5012}, "park_id": "samburu",
     "speed": 0, "direction": "Stationary", "health_status": "healthy", "battery_level": 95},
    {"id": "AT006", "species": "Giraffe", "name": "Twiga", "collar_id": "GC-1456",
     "location": {"lat": -0.3234, "lng": 36.1023}, "park_id": "lake-nakuru",
     "speed": 2.1, "direction": "NE", "health_status": "healthy", "battery_level": 68},
]

RISK_ZONES_SEED: List[dict] = [
    {"id": "PRZ001", "park_id": "tsavo-east", "risk_level": 85,
     "center": {"lat": -2.95, "lng": 38.6}, "radius": 12,
     "patrol_recommendation": "Increase night patrols, deploy 2 additional drones"},
    {"id": "PRZ002", "park_id": "masai-mara", "risk_level": 65,
     "center": {"lat": -1.55, "lng": 35.3}, "radius": 8,
     "patrol_recommendation": "Deploy thermal sensors, coordinate with Tanzania rangers"},
    {"id": "PRZ003", "park_id": "amboseli", "risk_level": 72,
     "center": {"lat": -2.7, "lng": 37.35}, "radius": 10,
     "patrol_recommendation": "Establish checkpoint, increase aerial surveillance"},
    {"id": "PRZ004", "park_id": "samburu", "risk_level": 45,
     "center": {"lat": 0.58, "lng": 37.55}, "radius": 6,
     "patrol_recommendation": "Standard patrols with community liaison"},
]

SENSORS_SEED: List[dict] = [
    {"id": "FS001", "name": "Mara North Camera", "type": "smoke_camera",
     "location": {"lat": -1.4061, "lng": 35.2563}, "park_id": "masai-mara", "status": "active"},
    {"id": "FS002", "name": "Amboseli East Sensor", "type": "ground_sensor",
     "location": {"lat": -2.6527, "lng": 37.2606}, "park_id": "amboseli", "status": "triggered"},
    {"id": "sensor-001", "name": "Elephant Collar - Tembo", "type": "animal_collar",
     "location": {"lat": -1.4833, "lng": 35.1333}, "park_id": "masai-mara", "status": "online"},
    {"id": "sensor-002", "name": "Lion Collar - Simba", "type": "animal_collar",
     "location": {"lat": -1.5012, "lng": 35.1456}, "park_id": "masai-mara", "status": "online"},
]

PARKS_SEED: List[dict] = [
    {"id": "masai-mara", "name": "Maasai Mara National Reserve", "lat": -1.4061, "lng": 35.0400, "area": 1510, "status": "active"},
    {"id": "amboseli", "name": "Amboseli National Park", "lat": -2.6480, "lng": 37.2600, "area": 392, "status": "active"},
    {"id": "tsavo-east", "name": "Tsavo East National Park", "lat": -3.0739, "lng": 38.7600, "area": 13747, "status": "monitoring"},
    {"id": "tsavo-west", "name": "Tsavo West National Park", "lat": -3.3500, "lng": 38.1500, "area": 9065, "status": "monitoring"},
    {"id": "nairobi", "name": "Nairobi National Park", "lat": -1.3733, "lng": 36.8580, "area": 117, "status": "active"},
    {"id": "samburu", "name": "Samburu National Reserve", "lat": 0.5150, "lng": 37.5160, "area": 165, "status": "active"},
    {"id": "buffalo-springs", "name": "Buffalo Springs National Reserve", "lat": 0.7944, "lng": 37.5597, "area": 131, "status": "active"},
    {"id": "shaba", "name": "Shaba National Reserve", "lat": 0.3090, "lng": 38.0167, "area": 239, "status": "monitoring"},
    {"id": "meru", "name": "Meru National Park", "lat": 0.0300, "lng": 38.1200, "area": 870, "status": "active"},
    {"id": "lake-nakuru", "name": "Lake Nakuru National Park", "lat": -0.3031, "lng": 36.0800, "area": 188, "status": "active"},
    {"id": "mount-kenya", "name": "Mount Kenya National Park", "lat": 0.1520, "lng": 37.3050, "area": 715, "status": "active"},
    {"id": "aberdare", "name": "Aberdare National Park", "lat": -0.3387, "lng": 36.7086, "area": 766, "status": "active"},
    {"id": "laikipia", "name": "Laikipia Nature Conservancy", "lat": 0.2920, "lng": 37.0640, "area": 9500, "status": "monitoring"},
]

CORRIDORS_SEED: List[dict] = [
    {"id": "tsavo-corridor", "name": "Tsavo East-West Corridor",
     "parks": ["tsavo-east", "tsavo-west"], "status": "open", "risk_level": 45},
    {"id": "samburu-northern", "name": "Northern Rangelands Corridor",
     "parks": ["samburu", "buffalo-springs", "shaba"], "status": "open", "risk_level": 35},
    {"id": "laikipia-mount-kenya", "name": "Laikipia-Mount Kenya Corridor",
     "parks": ["laikipia", "mount-kenya"], "status": "open", "risk_level": 30},
    {"id": "central-highlands", "name": "Central Highlands Corridor",
     "parks": ["aberdare", "mount-kenya"], "status": "restricted", "risk_level": 55},
]


# =============================================================================
# BUILDERS
# =============================================================================

def threat_records(now: datetime) -> List[dict]:
    """Threat seed with absolute ISO timestamps relative to `now`."""
    records = []
    for seed in THREATS_SEED:
        record = {k: v for k, v in seed.items() if k != "hours_ago"}
        record["timestamp"] = (now - timedelta(hours=seed["hours_ago"])).isoformat()
        records.append(record)
    return records


def patrol_records(now: datetime) -> List[dict]:
    """Patrol seed with absolute mission start/end timestamps relative to `now`."""
    records = []
    for seed in PATROLS_SEED:
        record = {k: v for k, v in seed.items()
                  if k not in ("mission_start_min", "estimated_end_min")}
        record["mission_start"] = (now + timedelta(minutes=seed["mission_start_min"])).isoformat()
        record["estimated_end"] = (now + timedelta(minutes=seed["estimated_end_min"])).isoformat()
        records.append(record)
    return records
