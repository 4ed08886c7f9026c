"""
Derived fields and aggregate statistics for NeoWs asteroid records.

Works on plain dicts as returned by ``NasaModel.to_dict()``; NASA reports
distances and velocities as strings, so every numeric read goes through
``_num``.
"""

import math
from typing import Any, Dict, List, Optional

LUNAR_DISTANCE_KM = 384400
MACH_1_KMH = 1234.8

HIGH_RISK_PHA_DISTANCE_KM = 7_500_000
MEDIUM_RISK_DISTANCE_KM = 1_000_000
MEDIUM_RISK_DIAMETER_KM = 1


def _num(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _first_approach(asteroid: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    approaches = asteroid.get("close_approach_data") or []
    return approaches[0] if approaches else None


def _miss_distance_km(asteroid: Dict[str, Any]) -> float:
    approach = _first_approach(asteroid) or {}
    return _num((approach.get("miss_distance") or {}).get("kilometers"))


def _max_diameter(asteroid: Dict[str, Any], unit: str) -> float:
    diameter = (asteroid.get("estimated_diameter") or {}).get(unit) or {}
    return _num(diameter.get("estimated_diameter_max"))


def calculate_risk_level(distance_km: float, diameter_km: float, is_hazardous: bool) -> str:
    if is_hazardous:
        if distance_km < HIGH_RISK_PHA_DISTANCE_KM:
            return "HIGH"
        return "MEDIUM"
    if distance_km < MEDIUM_RISK_DISTANCE_KM:
        return "MEDIUM"
    if diameter_km > MEDIUM_RISK_DIAMETER_KM:
        return "MEDIUM"
    return "LOW"


def enhance_neo(asteroid: Dict[str, Any]) -> Dict[str, Any]:
    """Add risk_level, relative_speed_mach and lunar_distance from the first approach."""
    enhanced = dict(asteroid)
    approach = _first_approach(asteroid)
    if approach is None:
        return enhanced

    enhanced["risk_level"] = calculate_risk_level(
        _miss_distance_km(asteroid),
        _max_diameter(asteroid, "kilometers"),
        bool(asteroid.get("is_potentially_hazardous_asteroid")),
    )

    kmh = (approach.get("relative_velocity") or {}).get("kilometers_per_hour")
    if kmh:
        enhanced["relative_speed_mach"] = f"{_num(kmh) / MACH_1_KMH:.2f}"

    km = (approach.get("miss_distance") or {}).get("kilometers")
    if km:
        enhanced["lunar_distance"] = f"{_num(km) / LUNAR_DISTANCE_KM:.2f}"

    return enhanced


def process_feed(feed: Dict[str, Any]) -> Dict[str, Any]:
    processed = dict(feed)
    by_date = feed.get("near_earth_objects")
    if not by_date:
        return processed
    processed["near_earth_objects"] = {
        day: [enhance_neo(asteroid) for asteroid in asteroids]
        for day, asteroids in by_date.items()
    }
    return processed


def iter_asteroids(feed: Dict[str, Any]):
    for asteroids in (feed.get("near_earth_objects") or {}).values():
        yield from asteroids


def summarize_feed(feed: Dict[str, Any]) -> Dict[str, Any]:
    summary: Dict[str, Any] = {
        "total_objects": 0,
        "potentially_hazardous": 0,
        "largest_object": None,
        "closest_object": None,
        "dates_covered": list((feed.get("near_earth_objects") or {}).keys()),
    }
    largest = 0.0
    closest = math.inf

    for asteroid in iter_asteroids(feed):
        summary["total_objects"] += 1
        if asteroid.get("is_potentially_hazardous_asteroid"):
            summary["potentially_hazardous"] += 1

        diameter = _max_diameter(asteroid, "kilometers")
        if diameter > largest:
            largest = diameter
            summary["largest_object"] = {
                "name": asteroid.get("name"),
                "diameter_km": f"{diameter:.3f}",
                "id": asteroid.get("id"),
            }

        approach = _first_approach(asteroid)
        if approach is not None:
            distance = _miss_distance_km(asteroid)
            if distance < closest:
                closest = distance
                summary["closest_object"] = {
                    "name": asteroid.get("name"),
                    "distance_km": f"{distance:.0f}",
                    "date": approach.get("close_approach_date"),
                    "id": asteroid.get("id"),
                }

    return summary


def hazardous_asteroids(feed: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Potentially hazardous objects, closest first."""
    hazardous = [a for a in iter_asteroids(feed) if a.get("is_potentially_hazardous_asteroid")]
    hazardous.sort(key=_miss_distance_km)
    return hazardous


def calculate_statistics(feed: Dict[str, Any]) -> Dict[str, Any]:
    stats: Dict[str, Any] = {
        "total_objects": 0,
        "potentially_hazardous": 0,
        "risk_levels": {"HIGH": 0, "MEDIUM": 0, "LOW": 0},
        # small < 100m, medium 100m - 1km, large > 1km
        "size_distribution": {"small": 0, "medium": 0, "large": 0},
        "average_speed": 0,
        "speed_range": {"min": 0, "max": 0},
    }
    speeds: List[float] = []

    for asteroid in iter_asteroids(feed):
        stats["total_objects"] += 1
        if asteroid.get("is_potentially_hazardous_asteroid"):
            stats["potentially_hazardous"] += 1

        risk = asteroid.get("risk_level")
        if risk in stats["risk_levels"]:
            stats["risk_levels"][risk] += 1

        diameter_m = _max_diameter(asteroid, "meters")
        if diameter_m < 100:
            stats["size_distribution"]["small"] += 1
        elif diameter_m < 1000:
            stats["size_distribution"]["medium"] += 1
        else:
            stats["size_distribution"]["large"] += 1

        approach = _first_approach(asteroid) or {}
        kmh = (approach.get("relative_velocity") or {}).get("kilometers_per_hour")
        if kmh:
            speeds.append(_num(kmh))

    if speeds:
        stats["average_speed"] = round(sum(speeds) / len(speeds))
        stats["speed_range"] = {"min": min(speeds), "max": max(speeds)}

    return stats
