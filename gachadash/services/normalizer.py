"""
Response normalization for the purchase API.

Two schema generations are in the wild:
- legacy: flat ``transactions`` array of ``{txHash, packAmount, loggedAt}``
- current: paginated ``{data, page, limit, total, totalPages}`` envelopes for
  ``transactions`` and ``inventoryWins`` plus winnings and free-pack fields

Malformed input never raises; it degrades to the empty envelope.
"""

import logging
import math
from typing import Any, NamedTuple, Optional, Union

from pydantic import ValidationError

from gachadash.schemas.pagination import PaginatedEnvelope
from gachadash.schemas.wallet import (
    CurrentWalletPayload,
    LegacyWalletPayload,
    PayloadKind,
)

logger = logging.getLogger(__name__)


class DecodedPayload(NamedTuple):
    kind: PayloadKind
    payload: Optional[Union[CurrentWalletPayload, LegacyWalletPayload]]


def _int_or_default(value: Any, default: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return default


def normalize(raw: Any) -> PaginatedEnvelope:
    """Wrap a flat list or a paginated mapping into one envelope shape."""
    if isinstance(raw, list):
        return PaginatedEnvelope(
            items=raw, page=1, limit=len(raw), total=len(raw), totalPages=1
        )

    if isinstance(raw, dict) and isinstance(raw.get("data"), list):
        data = raw["data"]
        limit = _int_or_default(raw.get("limit"), len(data))
        total = _int_or_default(raw.get("total"), len(data))
        page = _int_or_default(raw.get("page"), 1)
        if raw.get("totalPages") is None:
            return PaginatedEnvelope.from_counts(data, page, limit, total)

        total_pages = max(_int_or_default(raw.get("totalPages"), 1), 1)
        page = min(max(page, 1), total_pages)
        return PaginatedEnvelope(
            items=data, page=page, limit=limit, total=total, totalPages=total_pages
        )

    if raw is not None:
        logger.debug(f"Unrecognized list payload of type {type(raw).__name__}")
    return PaginatedEnvelope.empty()


def extract_transactions(raw: Any) -> PaginatedEnvelope:
    return normalize(raw)


def extract_inventory(raw: Any) -> PaginatedEnvelope:
    return normalize(raw)


def decode_wallet_payload(raw: Any) -> DecodedPayload:
    """
    Classify a raw wallet payload by schema generation.

    Tries the current shape first, then the legacy one; anything else is
    reported as absent.
    """
    if not isinstance(raw, dict):
        return DecodedPayload(PayloadKind.ABSENT, None)

    try:
        return DecodedPayload(
            PayloadKind.CURRENT, CurrentWalletPayload.model_validate(raw)
        )
    except ValidationError:
        pass

    try:
        return DecodedPayload(PayloadKind.LEGACY, LegacyWalletPayload.model_validate(raw))
    except ValidationError as e:
        logger.debug(f"Wallet payload matched no known schema: {e.error_count()} errors")
        return DecodedPayload(PayloadKind.ABSENT, None)


def transaction_amount(tx: Any) -> float:
    """Current ``amount`` with fallback to legacy ``packAmount``."""
    if not isinstance(tx, dict):
        return 0.0
    amount = tx.get("amount")
    if amount is None:
        amount = tx.get("packAmount")
    return to_number(amount)


def to_number(value: Any) -> float:
    """Numeric value or 0.0; NaN and infinities count as 0.0"""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    return number if math.isfinite(number) else 0.0
