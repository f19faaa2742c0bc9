from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from apps.expenses.models import Expense, ExpenseSplit
from apps.groups.models import Group, GroupMember
from apps.members.models import Member


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def make_member(db):
    def _make(name, email=''):
        return Member.objects.create(name=name, email=email)
    return _make


@pytest.fixture
def make_group(db):
    def _make(name='Weekend trip', members=()):
        group = Group.objects.create(name=name)
        for member in members:
            GroupMember.objects.create(group=group, member=member)
        return group
    return _make


@pytest.fixture
def make_expense(db):
    """Record an expense directly, bypassing the split calculator."""
    def _make(group, paid_by, amount, splits, split_type=Expense.SplitType.EXACT, **extra):
        expense = Expense.objects.create(
            group=group,
            description=extra.pop('description', 'Expense'),
            amount=Decimal(amount),
            paid_by=paid_by,
            split_type=split_type,
            **extra,
        )
        for member, share in splits:
            ExpenseSplit.objects.create(expense=expense, member=member, amount=Decimal(share))
        return expense
    return _make


@pytest.fixture
def trio(make_member, make_group):
    alice = make_member('Alice', 'alice@example.com')
    bob = make_member('Bob', 'bob@example.com')
    carol = make_member('Carol', 'carol@example.com')
    group = make_group(members=[alice, bob, carol])
    return group, alice, bob, carol
