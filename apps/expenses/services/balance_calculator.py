"""
Net balance calculation for a group.

The work is split in two:

* ``load_group_snapshot`` reads the group's current members and all of its
  expenses (with their splits) into immutable tuples.
* ``compute_balances`` is a pure function over such a snapshot, so it can
  be exercised without a database.

A positive balance means the group owes the member money; a negative one
means the member owes the group.
"""
import logging
from collections import namedtuple
from decimal import Decimal

from django.core.exceptions import ValidationError

from apps.expenses.models import Expense
from apps.expenses.services.split_calculator import SplitEntry, round2
from apps.groups.models import Group
from common.exceptions import NotFound

logger = logging.getLogger(__name__)

LedgerMember = namedtuple('LedgerMember', ['id', 'name'])
LedgerExpense = namedtuple('LedgerExpense', ['id', 'payer_id', 'amount', 'splits'])
GroupSnapshot = namedtuple('GroupSnapshot', ['group_id', 'members', 'expenses'])
Balance = namedtuple('Balance', ['member_id', 'member_name', 'balance'])


def load_group_snapshot(group_id):
    """
    Read the current members and expenses of *group_id*.

    Raises
    ------
    NotFound
        If the group does not exist.
    """
    try:
        group = Group.objects.get(pk=group_id)
    except (Group.DoesNotExist, ValidationError):
        raise NotFound('Group not found.')

    members = tuple(
        LedgerMember(m.id, m.name) for m in group.ordered_members()
    )

    expenses = []
    queryset = Expense.objects.filter(group=group).prefetch_related('splits')
    for expense in queryset:
        splits = tuple(SplitEntry(s.member_id, s.amount) for s in expense.splits.all())
        expenses.append(
            LedgerExpense(expense.id, expense.paid_by_id, expense.amount, splits)
        )

    return GroupSnapshot(group.id, members, tuple(expenses))


def compute_balances(members, expenses):
    """
    Aggregate the net position of every member over *expenses*.

    Parameters
    ----------
    members : iterable of LedgerMember
        Current group members, in the order balances should be returned.
    expenses : iterable of LedgerExpense
        Expenses with their splits. Order does not matter.

    Returns
    -------
    list[Balance]
        One entry per member (zero balances included), rounded to 2
        decimal places.

    Amounts paid by or split to someone who is no longer a member are
    dropped; in that case the balances no longer sum to zero.
    """
    members = list(members)
    totals = {m.id: Decimal('0') for m in members}
    dangling = Decimal('0')

    for expense in expenses:
        if expense.payer_id in totals:
            totals[expense.payer_id] += expense.amount
        else:
            dangling += expense.amount

        for split in expense.splits:
            if split.member_id in totals:
                totals[split.member_id] -= split.amount
            else:
                dangling -= split.amount

    if dangling:
        logger.warning(
            'Dropped %s attributed to former group members while computing balances.',
            dangling,
        )

    return [Balance(m.id, m.name, round2(totals[m.id])) for m in members]


def calculate_group_balances(group_id):
    """Return the current ``Balance`` list for *group_id*."""
    snapshot = load_group_snapshot(group_id)
    return compute_balances(snapshot.members, snapshot.expenses)
