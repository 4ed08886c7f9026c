from typing import Dict, List, Optional

VALID_ROVERS = ["curiosity", "opportunity", "spirit", "perseverance"]

VALID_CAMERAS: Dict[str, List[str]] = {
    "curiosity": ["FHAZ", "RHAZ", "MAST", "CHEMCAM", "MAHLI", "MARDI"],
    "opportunity": ["FHAZ", "RHAZ", "NAVCAM", "PANCAM", "MINITES"],
    "spirit": ["FHAZ", "RHAZ", "NAVCAM", "PANCAM", "MINITES"],
    "perseverance": ["FHAZ", "RHAZ", "MAST", "SUPERCAM"],
}

CAMERA_NAMES = {
    "FHAZ": "Front Hazard Avoidance Camera",
    "RHAZ": "Rear Hazard Avoidance Camera",
    "MAST": "Mast Camera",
    "CHEMCAM": "Chemistry and Camera Complex",
    "MAHLI": "Mars Hand Lens Imager",
    "MARDI": "Mars Descent Imager",
    "NAVCAM": "Navigation Camera",
    "PANCAM": "Panoramic Camera",
    "MINITES": "Miniature Thermal Emission Spectrometer",
    "SUPERCAM": "SuperCam",
}


def camera_full_name(camera: str) -> str:
    return CAMERA_NAMES.get(camera, camera)


def normalize_rover(rover: Optional[str]) -> Optional[str]:
    """Lower-cased rover name if it is one we know, else None."""
    if not rover:
        return None
    name = rover.lower()
    return name if name in VALID_ROVERS else None


def normalize_camera(rover: str, camera: Optional[str]) -> Optional[str]:
    """Upper-cased camera if valid for the rover, else None."""
    if not camera:
        return None
    name = camera.upper()
    return name if name in VALID_CAMERAS[rover] else None
