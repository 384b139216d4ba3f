"""
Synthetic wallet payloads in the current purchase-API shape.

Used when the purchase API is unreachable so downstream code runs the same
path for mock and real data. Output is random on every call.
"""

import random
import secrets
import string
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from gachadash.core.constants import MOCK_COLLECTIONS, PACK_DEFINITIONS
from gachadash.schemas.wallet import InventoryDetails, InventoryItem, InventoryTier
from gachadash.utils.date_utils import to_iso

RTP_MULTIPLIER_RANGE = (0.8, 1.2)

_CARD_NAMES = ["Charizard", "Pikachu", "Mewtwo", "Luffy", "Zoro", "Jordan", "Ohtani"]
_GRADES = ["PSA 10", "PSA 9", "BGS 9.5", "CGC 9"]
_TIER_WEIGHTS = {
    InventoryTier.COMMON: 50,
    InventoryTier.UNCOMMON: 25,
    InventoryTier.RARE: 15,
    InventoryTier.EPIC: 7,
    InventoryTier.LEGENDARY: 3,
}


def _random_tx_hash() -> str:
    return "0x" + secrets.token_hex(32)


def _random_code() -> str:
    return "".join(random.choices(string.ascii_uppercase + string.digits, k=8))


def _random_past(now: datetime, history_days: int) -> datetime:
    return now - timedelta(
        days=random.randrange(history_days), seconds=random.randrange(86400)
    )


def _mock_inventory_item(value: float) -> Dict[str, Any]:
    tier = random.choices(list(_TIER_WEIGHTS), weights=list(_TIER_WEIGHTS.values()))[0]
    item_id = str(uuid.uuid4())
    item = InventoryItem(
        id=item_id,
        uuid=item_id,
        tier=tier,
        value=round(value, 2),
        details=InventoryDetails(
            name=random.choice(_CARD_NAMES),
            img=f"https://picsum.photos/seed/{item_id[:8]}/200/280",
            year=random.randint(1999, 2024),
            grade=random.choice(_GRADES),
            set=random.choice(MOCK_COLLECTIONS),
        ),
        variety=random.choice([None, "holo", "reverse holo"]),
    )
    return item.model_dump(mode="json")


def generate_mock_data(
    wallet: str,
    transaction_count: int = 50,
    history_days: int = 90,
    free_pack_probability: float = 0.3,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Generate a payload structurally identical to the purchase API response.

    Args:
        wallet: Wallet address (or username / email) being looked up
        transaction_count: Number of synthetic purchases
        history_days: Purchases are spread over this many past days
        free_pack_probability: Chance that the wallet has 1-4 free-pack redemptions
        now: Reference time, defaults to the current UTC time

    Returns:
        Raw payload dict with paginated ``transactions`` and ``inventoryWins``
    """
    now = now or datetime.now(timezone.utc)
    history_days = max(history_days, 1)

    transactions: List[Dict[str, Any]] = []
    inventory: List[Dict[str, Any]] = []
    breakdown: Dict[str, Dict[str, Any]] = {}
    total_spent = 0.0
    total_winnings = 0.0

    for _ in range(transaction_count):
        pack = random.choice(PACK_DEFINITIONS)
        winnings = round(pack.price * random.uniform(*RTP_MULTIPLIER_RANGE), 2)
        logged_at = _random_past(now, history_days)

        total_spent += pack.price
        total_winnings += winnings

        entry = breakdown.setdefault(
            pack.name,
            {
                "packName": pack.name,
                "packAmount": pack.price,
                "count": 0,
                "totalSpent": 0.0,
                "totalWinnings": 0.0,
                "rtp": 0.0,
            },
        )
        entry["count"] += 1
        entry["totalSpent"] += pack.price
        entry["totalWinnings"] += winnings

        transactions.append(
            {
                "txHash": _random_tx_hash(),
                "amount": pack.price,
                "packName": pack.name,
                "collection": random.choice(MOCK_COLLECTIONS),
                "totalWinnings": winnings,
                "loggedAt": logged_at,
            }
        )
        inventory.append(_mock_inventory_item(winnings))

    for entry in breakdown.values():
        entry["totalWinnings"] = round(entry["totalWinnings"], 2)
        entry["rtp"] = (
            entry["totalWinnings"] / entry["totalSpent"] * 100
            if entry["totalSpent"] > 0
            else 0.0
        )

    transactions.sort(key=lambda tx: tx["loggedAt"], reverse=True)
    for tx in transactions:
        tx["loggedAt"] = to_iso(tx["loggedAt"])

    free_pack_redemptions: List[Dict[str, Any]] = []
    if random.random() < free_pack_probability:
        redeemed_from = random.sample(transactions, k=min(random.randint(1, 4), len(transactions)))
        for tx in redeemed_from:
            free_pack_redemptions.append(
                {
                    "code": _random_code(),
                    "txHash": tx["txHash"],
                    "presetId": random.randint(1, 20),
                    "redeemedAt": tx["loggedAt"],
                }
            )
        free_pack_redemptions.sort(key=lambda r: r["redeemedAt"], reverse=True)

    count = len(transactions)
    return {
        "wallet": wallet,
        "username": None,
        "totalPacks": count,
        "totalSpent": total_spent,
        "totalWinnings": round(total_winnings, 2),
        "rtp": total_winnings / total_spent * 100 if total_spent > 0 else 0,
        "packBreakdown": list(breakdown.values()),
        "transactions": {
            "data": transactions,
            "page": 1,
            "limit": max(count, 1),
            "total": count,
            "totalPages": 1,
        },
        "inventoryWins": {
            "data": inventory,
            "page": 1,
            "limit": max(count, 1),
            "total": count,
            "totalPages": 1,
        },
        "totalFreePacksRedeemed": len(free_pack_redemptions),
        "freePackRedemptions": free_pack_redemptions,
    }
