"""Cost-center split (rateio) of a cash transaction"""

from typing import List

from dental_ledger.domain.exceptions import InvalidAmount, InvalidSplit
from dental_ledger.domain.models import RateioEntry


def build_rateio(total_cents: int, entries: List[RateioEntry]) -> List[RateioEntry]:
    """
    Validate and normalize the allocation of a transaction total.

    - No entries: a single uncategorized entry carries the full amount
    - Every entry must be positive
    - Entries must add up to the total exactly, to the cent
    """
    if total_cents <= 0:
        raise InvalidAmount(f"Transaction total must be positive, got {total_cents} cents")

    if not entries:
        return [RateioEntry(amount_cents=total_cents)]

    if any(entry.amount_cents <= 0 for entry in entries):
        raise InvalidAmount("Every rateio entry must have a positive amount")

    entries_sum = sum(entry.amount_cents for entry in entries)
    if entries_sum != total_cents:
        raise InvalidSplit(f"Rateio sum ({entries_sum} cents) differs from total ({total_cents} cents)")

    return entries
