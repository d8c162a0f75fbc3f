"""
Candidate label tables for each issue category.
Each profile lists what a genuine photo of that issue looks like.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class CategoryProfile:
    name:         str
    display_name: str               # used for compound labels and reasons
    labels:       Tuple[str, ...]


# ── ready-made profiles ─────────────────────────────────────

PROFILE_ROAD_DAMAGE = CategoryProfile(
    name="road_damage",
    display_name="road damage",
    labels=(
        "pothole", "damaged road", "cracked pavement", "broken asphalt",
        "road repair needed", "uneven road surface", "sunken road",
        "crumbling road edge", "road with cracks", "hole in the street",
    ),
)

PROFILE_SANITATION = CategoryProfile(
    name="sanitation",
    display_name="sanitation",
    labels=(
        "garbage", "trash", "overflowing trash bin", "litter on the street",
        "illegal dumping", "waste pile", "dirty area", "garbage bags",
        "unsanitary conditions", "rubbish on the ground",
    ),
)

PROFILE_LIGHTING = CategoryProfile(
    name="lighting",
    display_name="street lighting",
    labels=(
        "broken street light", "streetlight", "dark street at night",
        "faulty lamp post", "light pole", "lamp not working",
        "damaged light fixture", "flickering street lamp",
        "unlit road", "lighting issue",
    ),
)

PROFILE_GRAFFITI = CategoryProfile(
    name="graffiti",
    display_name="graffiti",
    labels=(
        "graffiti", "vandalism", "spray paint on wall", "painted wall",
        "defaced property", "tagged building", "graffiti on sign",
        "scribbled wall", "street art on public property", "defaced fence",
    ),
)

PROFILE_SIDEWALK = CategoryProfile(
    name="sidewalk",
    display_name="sidewalk",
    labels=(
        "damaged sidewalk", "broken walkway", "cracked sidewalk",
        "uneven paving stones", "pedestrian path issue", "missing curb",
        "trip hazard on footpath", "blocked sidewalk", "broken curb",
        "raised sidewalk slab",
    ),
)

PROFILE_VEGETATION = CategoryProfile(
    name="vegetation",
    display_name="vegetation",
    labels=(
        "overgrown plants", "fallen tree", "overgrown grass",
        "tree branch blocking road", "weeds", "overgrown bushes",
        "dead tree", "tree issue", "landscaping problem",
        "vegetation maintenance",
    ),
)

PROFILE_OTHER = CategoryProfile(
    name="other",
    display_name="infrastructure",
    labels=(
        "infrastructure issue", "municipal problem", "public facility issue",
        "damaged public property", "broken street furniture",
        "damaged traffic sign", "broken bench", "damaged fence",
        "water leak on street", "blocked drain",
    ),
)

PROFILES: Dict[str, CategoryProfile] = {
    p.name: p for p in (
        PROFILE_ROAD_DAMAGE,
        PROFILE_SANITATION,
        PROFILE_LIGHTING,
        PROFILE_GRAFFITI,
        PROFILE_SIDEWALK,
        PROFILE_VEGETATION,
        PROFILE_OTHER,
    )
}

DEFAULT_PROFILE = PROFILE_OTHER


# ── distractors ─────────────────────────────────────────────

NEGATIVE_LABELS: Tuple[str, ...] = (
    "person face",
    "selfie photo",
    "indoor room",
    "plate of food",
    "pet animal",
    "unrelated screenshot",
    "internet meme",
    "text document",
    "blurry photo",
    "random object",
)


def get_profile(name: str) -> CategoryProfile:
    """Return profile by name, falling back to the generic one."""
    return PROFILES.get(name, DEFAULT_PROFILE)
