"""
Debt simplification: turn a group's net balances into suggested payments.

Debtors and creditors are matched greedily in the order their balances are
reported (membership order). Balances are deliberately not sorted by
magnitude, so the output is stable for a given membership order; the
number of payments never exceeds ``#debtors + #creditors - 1``.
"""
import logging
from collections import namedtuple
from decimal import Decimal

from apps.expenses.services.balance_calculator import calculate_group_balances
from apps.expenses.services.split_calculator import round2

logger = logging.getLogger(__name__)

Settlement = namedtuple(
    'Settlement',
    ['from_id', 'from_name', 'to_id', 'to_name', 'amount'],
)

SETTLED_THRESHOLD = Decimal('0.01')


def compute_settlements(balances):
    """
    Compute the payments that bring every balance in *balances* to zero.

    Algorithm
    ---------
    1. Collect debtors (balance < 0, tracked as the positive amount owed)
       and creditors (balance > 0), each in input order. Zero balances are
       skipped.
    2. Take the first debtor and the first creditor and settle the smaller
       of their remaining amounts with one payment from debtor to creditor.
    3. Drop whichever party has less than 0.01 left.
    4. Repeat until either queue is empty.
    """
    debtors = []
    creditors = []
    for b in balances:
        if b.balance < 0:
            debtors.append([b.member_id, b.member_name, -b.balance])
        elif b.balance > 0:
            creditors.append([b.member_id, b.member_name, b.balance])

    settlements = []
    while debtors and creditors:
        debtor = debtors[0]
        creditor = creditors[0]

        amount = min(debtor[2], creditor[2])
        settlements.append(
            Settlement(debtor[0], debtor[1], creditor[0], creditor[1], round2(amount))
        )

        debtor[2] -= amount
        creditor[2] -= amount

        if debtor[2] < SETTLED_THRESHOLD:
            debtors.pop(0)
        if creditor[2] < SETTLED_THRESHOLD:
            creditors.pop(0)

    return settlements


def calculate_settlements(group_id):
    """Return the suggested ``Settlement`` list for *group_id*."""
    settlements = compute_settlements(calculate_group_balances(group_id))
    logger.debug(
        'Computed %d settlement(s) for group %s.',
        len(settlements),
        group_id,
    )
    return settlements
