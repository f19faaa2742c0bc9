"""
Management command to seed demo data for the Group Ledger API.

Creates a handful of members, one group and a few expenses covering every
split type, so the balances and settlements endpoints return something
meaningful straight away.

Usage:
    python manage.py seed_demo_data
    python manage.py seed_demo_data --reset  # wipe existing demo data first
"""
from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from apps.expenses.models import Expense, ExpenseSplit
from apps.expenses.services.debt_simplifier import calculate_settlements
from apps.expenses.services.split_calculator import compute_split
from apps.groups.models import Group, GroupMember
from apps.members.models import Member

DEMO_GROUP_NAME = 'Lisbon Weekend'

DEMO_MEMBERS = [
    {'name': 'Alice Martin', 'email': 'alice@example.com'},
    {'name': 'Bob Okafor', 'email': 'bob@example.com'},
    {'name': 'Chen Wei', 'email': 'chen@example.com'},
    {'name': 'Dana Silva', 'email': 'dana@example.com'},
]

# (description, amount, payer index, split type, participants, weights, category, days ago)
DEMO_EXPENSES = [
    ('Apartment', '480.00', 0, Expense.SplitType.EQUAL, [0, 1, 2, 3], None, Expense.Category.ACCOMMODATION, 3),
    ('Seafood dinner', '150.00', 1, Expense.SplitType.PERCENTAGE, [0, 1, 2], ['40', '30', '30'], Expense.Category.FOOD, 2),
    ('Tram passes', '36.00', 2, Expense.SplitType.EXACT, [0, 2, 3], ['12.00', '12.00', '12.00'], Expense.Category.TRAVEL, 2),
    ('Fado show', '90.00', 3, Expense.SplitType.EQUAL, [1, 2, 3], None, Expense.Category.ENTERTAINMENT, 1),
]


class Command(BaseCommand):
    help = 'Seed demo members, a group and expenses for the Group Ledger API'

    def add_arguments(self, parser):
        parser.add_argument(
            '--reset',
            action='store_true',
            help='Delete all existing demo data before seeding',
        )

    def handle(self, *args, **options):
        if options['reset']:
            self._reset()

        with transaction.atomic():
            members = self._seed_members()
            group = self._seed_group(members)
            created = self._seed_expenses(group, members)

        self.stdout.write(self.style.SUCCESS('\nDemo data seeded successfully!\n'))
        self.stdout.write(f'Members:          {len(members)}')
        self.stdout.write(f'Group:            {group.name} ({group.id})')
        self.stdout.write(f'Expenses created: {created}')

        self.stdout.write('\nSuggested settlements:')
        for s in calculate_settlements(group.id):
            self.stdout.write(f'  {s.from_name} -> {s.to_name}: {s.amount}')

    # -----------------------------------------------------------------------

    def _reset(self):
        self.stdout.write('Resetting demo data...')
        Group.objects.filter(name=DEMO_GROUP_NAME).delete()
        emails = [m['email'] for m in DEMO_MEMBERS]
        Member.objects.filter(email__in=emails).delete()
        self.stdout.write('  Reset complete.')

    def _seed_members(self):
        self.stdout.write('\nSeeding members...')
        members = []
        for data in DEMO_MEMBERS:
            member, created = Member.objects.get_or_create(
                email=data['email'],
                defaults={'name': data['name']},
            )
            members.append(member)
            status = 'created' if created else 'exists'
            self.stdout.write(f'  {status}: {member.name}')
        return members

    def _seed_group(self, members):
        self.stdout.write('\nSeeding group...')
        group, _ = Group.objects.get_or_create(
            name=DEMO_GROUP_NAME,
            defaults={'description': 'Long weekend in Portugal.'},
        )
        for member in members:
            GroupMember.objects.get_or_create(group=group, member=member)
        return group

    def _seed_expenses(self, group, members):
        self.stdout.write('\nSeeding expenses...')
        created = 0
        today = timezone.localdate()

        for description, amount, payer, split_type, participants, weights, category, days_ago in DEMO_EXPENSES:
            if Expense.objects.filter(group=group, description=description).exists():
                continue

            amount = Decimal(amount)
            entries = compute_split(
                amount,
                split_type,
                [members[i].id for i in participants],
                weights,
            )
            expense = Expense.objects.create(
                group=group,
                description=description,
                amount=amount,
                category=category,
                split_type=split_type,
                paid_by=members[payer],
                date=today - timedelta(days=days_ago),
            )
            ExpenseSplit.objects.bulk_create(
                [ExpenseSplit(expense=expense, member_id=e.member_id, amount=e.amount) for e in entries]
            )
            created += 1
            self.stdout.write(f'  {description}: {amount} ({split_type})')

        return created
