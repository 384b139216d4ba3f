"""Pack price table and spend-tier thresholds."""

from typing import Dict, List, NamedTuple


class PackDefinition(NamedTuple):
    name: str
    price: float


class UserTier(NamedTuple):
    name: str
    threshold: float


# Pack names and prices come from the API; this table backs legacy payloads
# and the mock generator.
PACK_DEFINITIONS: List[PackDefinition] = [
    PackDefinition("Pokémon Master Pack", 250),
    PackDefinition("Starter Pack", 30),
    PackDefinition("Great Pack", 150),
    PackDefinition("Gem Sack", 10),
]

MOCK_COLLECTIONS: List[str] = ["pokemon", "one-piece", "sports"]


def normalize_pack_name(name: str = "") -> str:
    return " ".join((name or "").lower().split())


PACK_PRICING: Dict[str, float] = {
    normalize_pack_name(pack.name): pack.price for pack in PACK_DEFINITIONS
}

# Ascending; a total equal to a threshold belongs to that tier.
USER_TIERS: List[UserTier] = [
    UserTier("Free to Play", 0),
    UserTier("Minnow", 100),
    UserTier("Dolphin", 1000),
    UserTier("Whale", 10000),
    UserTier("Leviathan", 50000),
]

LEADERBOARD_TYPES = ("total", "weekly")
