"""Domain models - pure Python dataclasses representing business entities"""

import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional


class InstallmentStatus:
    """Persisted lifecycle states of an installment"""

    OPEN = "open"
    PAID = "paid"
    RENEGOTIATED = "renegotiated"

    TERMINAL = (PAID, RENEGOTIATED)


# Display-only; layered on top of OPEN when the due date has passed
OVERDUE = "overdue"


@dataclass
class Installment:
    """Single payment in a plan"""

    sequence_number: int
    total_in_plan: int
    due_date: date
    amount_cents: int
    description: str = ""
    status: str = InstallmentStatus.OPEN
    paid_amount_cents: int = 0
    id: Optional[uuid.UUID] = None
    version: int = 1

    @property
    def remaining_cents(self) -> int:
        return max(self.amount_cents - self.paid_amount_cents, 0)


@dataclass
class RenegotiationResult:
    """Outcome of collapsing open installments into a new plan"""

    superseded: List[Installment]
    replacement: List[Installment]
    outstanding_cents: int


@dataclass
class RateioEntry:
    """Allocation of part of a cash transaction to a category/cost center"""

    amount_cents: int
    category_id: Optional[uuid.UUID] = None
    cost_center_id: Optional[uuid.UUID] = None


@dataclass
class BudgetQuote:
    """Priced orthodontic/specialty budget"""

    monthly_value_cents: int
    installments: int
    total_cents: int
    cash_value_cents: int
    schedule: List[int] = field(default_factory=list)
