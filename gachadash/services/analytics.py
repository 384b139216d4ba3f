"""
Wallet analytics: turns a raw purchase payload into dashboard statistics.

Covers KPIs (spend, winnings, RTP, average order value), spending mix,
daily activity series, spend tier and free-pack reconciliation. Nothing in
here raises on missing fields; absent numbers count as 0 and absent lists as
empty.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Set

from gachadash.core.constants import PACK_PRICING, USER_TIERS, normalize_pack_name
from gachadash.schemas.wallet import (
    ActivityPoint,
    FreePackRedemption,
    PieSlice,
    TimeFrame,
    WalletStats,
)
from gachadash.services.normalizer import (
    decode_wallet_payload,
    extract_inventory,
    extract_transactions,
    to_number,
    transaction_amount,
)
from gachadash.utils.date_utils import parse_timestamp

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def get_user_tier(total_spent: float) -> str:
    """Name of the highest tier whose threshold does not exceed ``total_spent``."""
    tier = USER_TIERS[0].name
    for candidate in USER_TIERS:
        if total_spent >= candidate.threshold:
            tier = candidate.name
    return tier


def build_free_pack_hashes(redemptions: List[Any]) -> Set[str]:
    return {
        r["txHash"].lower()
        for r in redemptions
        if isinstance(r, dict) and isinstance(r.get("txHash"), str) and r["txHash"]
    }


def is_free_pack(tx: Dict[str, Any], free_pack_hashes: Set[str]) -> bool:
    """
    Free-pack detection, in order of precedence:

    1. explicit ``isFreePack`` flag on the transaction
    2. txHash listed in the wallet's free-pack redemptions (case-insensitive)
    3. amount of exactly 0, only when the redemption list is empty
    """
    flag = tx.get("isFreePack")
    if isinstance(flag, bool):
        return flag

    tx_hash = tx.get("txHash")
    if isinstance(tx_hash, str) and tx_hash.lower() in free_pack_hashes:
        return True

    if not free_pack_hashes:
        raw_amount = tx.get("amount", tx.get("packAmount"))
        return raw_amount is not None and transaction_amount(tx) == 0
    return False


def get_pack_price(name: str, fallback_amount: Any = None) -> Optional[float]:
    normalized = normalize_pack_name(name)
    if normalized in PACK_PRICING:
        return PACK_PRICING[normalized]
    if fallback_amount is None:
        return None
    return to_number(fallback_amount)


def _price_key(amount: Any) -> str:
    value = to_number(amount)
    return str(int(value)) if value.is_integer() else str(value)


def _day_key(moment: datetime) -> str:
    # wall-clock date of the timestamp as logged, offset included
    return f"{moment.strftime('%b')} {moment.day}"


def build_pie_data(pack_breakdown: List[Dict[str, Any]]) -> List[PieSlice]:
    # sorted() is stable: equal spend keeps breakdown order
    ordered = sorted(
        pack_breakdown, key=lambda p: to_number(p.get("totalSpent")), reverse=True
    )
    return [
        PieSlice(
            name=str(item.get("packName") or ""),
            value=to_number(item.get("totalSpent")),
            count=int(to_number(item.get("count"))),
            packPrice=get_pack_price(item.get("packName") or "", item.get("packAmount")),
        )
        for item in ordered
    ]


def build_chart_data(transactions: List[Dict[str, Any]]) -> List[ActivityPoint]:
    """
    Daily spend/winnings buckets keyed by "Mon D".

    Buckets are ordered by the earliest timestamp that fed them. The key has
    no year, so the same calendar day in different years shares a bucket.
    Each transaction lands on its own date; offsets are not normalized.
    """
    buckets: Dict[str, Dict[str, Any]] = {}

    for tx in transactions:
        logged_at = parse_timestamp(tx.get("loggedAt"))
        if logged_at is None:
            continue
        key = _day_key(logged_at)
        bucket = buckets.setdefault(
            key, {"amount": 0.0, "winnings": 0.0, "actualDate": logged_at}
        )
        bucket["amount"] += transaction_amount(tx)
        bucket["winnings"] += to_number(tx.get("totalWinnings"))
        if logged_at < bucket["actualDate"]:
            bucket["actualDate"] = logged_at

    ordered = sorted(buckets.items(), key=lambda kv: kv[1]["actualDate"])
    return [
        ActivityPoint(date=key, amount=bucket["amount"], winnings=bucket["winnings"])
        for key, bucket in ordered
    ]


def build_price_to_name_map(pack_breakdown: List[Dict[str, Any]]) -> Dict[str, str]:
    # last write wins when two packs share a price
    price_map: Dict[str, str] = {}
    for pack in pack_breakdown:
        price_map[_price_key(pack.get("packAmount"))] = str(pack.get("packName") or "")
    return price_map


def sort_free_packs(redemptions: List[Any]) -> List[FreePackRedemption]:
    packs = [
        FreePackRedemption(
            code=r.get("code"),
            redeemedAt=r.get("redeemedAt"),
            txHash=r.get("txHash"),
            presetId=r.get("presetId"),
        )
        for r in redemptions
        if isinstance(r, dict)
    ]
    return sorted(
        packs,
        key=lambda p: parse_timestamp(p.redeemedAt) or _EPOCH,
        reverse=True,
    )


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _as_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    return str(value)


def process_analytics(
    data: Optional[Dict[str, Any]], lifetime_total_spent: Optional[float] = None
) -> Optional[WalletStats]:
    """
    Build dashboard statistics for one wallet payload.

    Args:
        data: Raw payload from the purchase API (either schema generation)
        lifetime_total_spent: Unfiltered spend used for the tier; defaults to
            ``data["totalSpent"]``

    Returns:
        WalletStats, or None when there is no payload at all
    """
    if not data or not isinstance(data, dict):
        return None

    decoded = decode_wallet_payload(data)

    transactions_env = extract_transactions(data.get("transactions"))
    inventory_env = extract_inventory(
        data.get("inventoryWins", data.get("inventory"))
    )

    redemptions = _as_list(data.get("freePackRedemptions"))
    free_pack_hashes = build_free_pack_hashes(redemptions)

    transactions = []
    for tx in transactions_env.items:
        if not isinstance(tx, dict):
            continue
        transactions.append({**tx, "isFreePack": is_free_pack(tx, free_pack_hashes)})

    pack_breakdown = [p for p in _as_list(data.get("packBreakdown")) if isinstance(p, dict)]

    total_spent = to_number(data.get("totalSpent"))
    total_packs = int(to_number(data.get("totalPacks")))
    avg_order_value = total_spent / total_packs if total_packs > 0 else 0

    tier_total = lifetime_total_spent if lifetime_total_spent is not None else total_spent
    tier = get_user_tier(tier_total)

    total_winnings = to_number(data.get("totalWinnings")) or sum(
        to_number(tx.get("totalWinnings")) for tx in transactions
    )
    rtp = to_number(data.get("rtp")) or (
        total_winnings / total_spent * 100 if total_spent > 0 else 0
    )
    if total_spent <= 0:
        rtp = 0

    stats = WalletStats(
        wallet=_as_text(data.get("wallet")),
        username=_as_text(data.get("username")),
        schemaVersion=decoded.kind,
        totalSpent=total_spent,
        totalPacks=total_packs,
        avgOrderValue=avg_order_value,
        totalWinnings=total_winnings,
        netWinnings=total_winnings - total_spent,
        rtp=rtp,
        pieData=build_pie_data(pack_breakdown),
        chartData=build_chart_data(transactions),
        tier=tier,
        priceToNameMap=build_price_to_name_map(pack_breakdown),
        transactions=transactions,
        transactionsPagination=transactions_env.pagination,
        inventoryItems=[i for i in inventory_env.items if isinstance(i, dict)],
        inventoryPagination=inventory_env.pagination,
        totalFreePacksRedeemed=int(to_number(data.get("totalFreePacksRedeemed"))),
        freePacks=sort_free_packs(redemptions),
    )
    logger.debug(
        f"Analytics for {stats.wallet}: schema={decoded.kind.value} "
        f"spent={total_spent} packs={total_packs} freePacks={len(stats.freePacks)}"
    )
    return stats


def filter_by_time_frame(
    data: Dict[str, Any], time_frame: TimeFrame, now: Optional[datetime] = None
) -> Dict[str, Any]:
    """
    Restrict a payload to transactions logged within the time frame.

    Totals and the pack breakdown are recomputed from the kept transactions;
    free-pack fields are passed through unfiltered. ``TimeFrame.ALL`` returns
    the payload unchanged.
    """
    if not data or time_frame.days is None:
        return data

    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(days=time_frame.days)

    envelope = extract_transactions(data.get("transactions"))
    kept = []
    for tx in envelope.items:
        if not isinstance(tx, dict):
            continue
        logged_at = parse_timestamp(tx.get("loggedAt"))
        if logged_at is not None and logged_at >= cutoff:
            kept.append(tx)

    original_breakdown = [
        p for p in _as_list(data.get("packBreakdown")) if isinstance(p, dict)
    ]
    breakdown: Dict[str, Dict[str, Any]] = {}
    for tx in kept:
        amount = transaction_amount(tx)
        pack_name = tx.get("packName")
        pack_info = next(
            (
                p
                for p in original_breakdown
                if (pack_name and p.get("packName") == pack_name)
                or (not pack_name and to_number(p.get("packAmount")) == amount)
            ),
            None,
        )
        if pack_info is None:
            continue
        name = pack_info.get("packName")
        entry = breakdown.setdefault(
            name,
            {
                "packName": name,
                "packAmount": pack_info.get("packAmount"),
                "count": 0,
                "totalSpent": 0.0,
                "totalWinnings": 0.0,
            },
        )
        entry["count"] += 1
        entry["totalSpent"] += amount
        entry["totalWinnings"] += to_number(tx.get("totalWinnings"))

    filtered = dict(data)
    filtered["transactions"] = kept
    filtered["totalSpent"] = sum(transaction_amount(tx) for tx in kept)
    filtered["totalPacks"] = len(kept)
    filtered["packBreakdown"] = list(breakdown.values())
    if "totalWinnings" in data:
        filtered["totalWinnings"] = sum(to_number(tx.get("totalWinnings")) for tx in kept)
        filtered.pop("rtp", None)
    if "freePackRedemptions" in data:
        filtered["freePackRedemptions"] = _as_list(data.get("freePackRedemptions"))
    return filtered
