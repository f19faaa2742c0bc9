"""
Utilities for calculating how an expense is split among group members.

Every policy returns a list of ``SplitEntry`` tuples in participant order.
Amounts are ``Decimal`` values rounded half away from zero to 2 decimal
places per entry. No remainder is redistributed, so an equal split of an
amount that does not divide evenly may differ from the total by up to
``0.01 * (n - 1)``.

Any violated invariant raises ``InvalidSplit``; no partial output is ever
returned.
"""
from collections import namedtuple
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from common.exceptions import InvalidSplit

SplitEntry = namedtuple('SplitEntry', ['member_id', 'amount'])

EQUAL = 'equal'
PERCENTAGE = 'percentage'
EXACT = 'exact'

CENT = Decimal('0.01')
TOLERANCE = Decimal('0.01')
HUNDRED = Decimal('100')


def round2(value):
    """Round *value* half away from zero to 2 decimal places."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_decimal(value):
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidSplit(f'{value!r} is not a valid number.')


def _check_participants(member_ids):
    if not member_ids:
        raise InvalidSplit('At least one member is required to split an expense.')
    if len(set(member_ids)) != len(member_ids):
        raise InvalidSplit('Each member may appear only once in a split.')


def calculate_equal_split(amount, member_ids):
    """
    Split *amount* equally among *member_ids*.

    Parameters
    ----------
    amount : Decimal | str | int
        The total amount to split.
    member_ids : list
        Member IDs (UUIDs or strings) to split among.

    Returns
    -------
    list[SplitEntry]
        One entry per member, each rounded independently.

    Raises
    ------
    InvalidSplit
        If *member_ids* is empty or contains duplicates.
    """
    _check_participants(member_ids)

    share = round2(to_decimal(amount) / len(member_ids))
    return [SplitEntry(uid, share) for uid in member_ids]


def calculate_percentage_split(amount, member_ids, percentages):
    """
    Split *amount* according to *percentages*, one per member.

    Raises ``InvalidSplit`` unless every percentage lies within 0-100 and
    they sum to 100 (within 0.01).
    """
    _check_participants(member_ids)
    if not percentages:
        raise InvalidSplit('Split details required for percentage split type.')
    if len(percentages) != len(member_ids):
        raise InvalidSplit('Exactly one percentage is required per member.')

    amount = to_decimal(amount)
    percentages = [to_decimal(p) for p in percentages]

    for pct in percentages:
        if pct < 0 or pct > HUNDRED:
            raise InvalidSplit('Percentages must be between 0 and 100.')

    if abs(sum(percentages) - HUNDRED) > TOLERANCE:
        raise InvalidSplit('Percentages must sum to 100.')

    return [
        SplitEntry(uid, round2(amount * pct / HUNDRED))
        for uid, pct in zip(member_ids, percentages)
    ]


def calculate_exact_split(amount, member_ids, amounts):
    """
    Validate and return exact per-member amounts.

    The amounts are passed through unrounded; they must be non-negative,
    carry at most 2 decimal places and sum to *amount* within 0.01.
    """
    _check_participants(member_ids)
    if not amounts:
        raise InvalidSplit('Split details required for exact split type.')
    if len(amounts) != len(member_ids):
        raise InvalidSplit('Exactly one amount is required per member.')

    amount = to_decimal(amount)
    amounts = [to_decimal(a) for a in amounts]

    if any(a < 0 for a in amounts):
        raise InvalidSplit('Split amounts must not be negative.')

    # Split rows are stored with cent precision.
    if any(a != round2(a) for a in amounts):
        raise InvalidSplit('Split amounts must have at most 2 decimal places.')

    if abs(sum(amounts) - amount) > TOLERANCE:
        raise InvalidSplit('Split amounts must sum to the total expense amount.')

    return [SplitEntry(uid, a) for uid, a in zip(member_ids, amounts)]


def compute_split(amount, split_type, member_ids, weights=None):
    """
    Compute the split of *amount* among *member_ids* for *split_type*.

    *weights* is ignored for ``equal``; for ``percentage`` it holds one
    percentage per member and for ``exact`` one monetary amount per member,
    in the same order as *member_ids*.
    """
    member_ids = list(member_ids)

    if split_type == EQUAL:
        return calculate_equal_split(amount, member_ids)
    if split_type == PERCENTAGE:
        return calculate_percentage_split(amount, member_ids, weights)
    if split_type == EXACT:
        return calculate_exact_split(amount, member_ids, weights)

    raise InvalidSplit('Invalid split type.')
