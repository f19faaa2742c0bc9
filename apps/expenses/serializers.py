"""
Serializers for the Expenses app.
All output uses camelCase to match the web client.
"""
import logging
from decimal import Decimal

from django.db import transaction
from rest_framework import serializers

from apps.expenses.models import Expense, ExpenseSplit
from apps.expenses.services.split_calculator import compute_split
from apps.groups.models import Group
from apps.members.models import Member
from common.exceptions import NotFound

logger = logging.getLogger(__name__)


class ExpenseSplitSerializer(serializers.ModelSerializer):
    memberId = serializers.CharField(source='member_id', read_only=True)
    memberName = serializers.CharField(source='member.name', read_only=True)

    class Meta:
        model = ExpenseSplit
        fields = ['memberId', 'memberName', 'amount']
        read_only_fields = fields


class ExpenseSerializer(serializers.ModelSerializer):
    groupId = serializers.CharField(source='group_id', read_only=True)
    paidBy = serializers.CharField(source='paid_by_id', read_only=True)
    paidByName = serializers.CharField(source='paid_by.name', read_only=True)
    splitType = serializers.CharField(source='split_type', read_only=True)
    splitBetween = ExpenseSplitSerializer(source='splits', many=True, read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Expense
        fields = [
            'id', 'groupId', 'description', 'amount', 'currency', 'category',
            'paidBy', 'paidByName', 'splitType', 'splitBetween', 'date', 'createdAt',
        ]
        read_only_fields = fields


class SplitDetailSerializer(serializers.Serializer):
    """
    One participant of a split. ``amount`` is the percentage for
    percentage splits, the money amount for exact splits and ignored for
    equal splits.
    """
    memberId = serializers.UUIDField()
    amount = serializers.DecimalField(
        max_digits=12,
        decimal_places=4,
        required=False,
        allow_null=True,
    )


def _ensure_group_member(group, member_id, field, message):
    if not group.has_member(member_id):
        raise serializers.ValidationError({field: message})


def _resolve_splits(group, amount, split_type, split_details, default_member_ids):
    """
    Run the split calculator for an expense write and check that every
    participant belongs to *group*.
    """
    if split_details:
        member_ids = [d['memberId'] for d in split_details]
        weights = [d.get('amount') for d in split_details]
    else:
        member_ids = list(default_member_ids)
        weights = None

    entries = compute_split(amount, split_type, member_ids, weights)

    group_member_ids = set(group.memberships.values_list('member_id', flat=True))
    for entry in entries:
        if entry.member_id not in group_member_ids:
            raise serializers.ValidationError(
                {'splitBetween': f'Member {entry.member_id} is not in the group.'}
            )
    return entries


def _save_splits(expense, entries):
    expense.splits.all().delete()
    ExpenseSplit.objects.bulk_create(
        [ExpenseSplit(expense=expense, member_id=e.member_id, amount=e.amount) for e in entries]
    )


class ExpenseCreateSerializer(serializers.Serializer):
    """Accepts camelCase from the client, maps to snake_case model fields."""
    groupId = serializers.UUIDField()
    description = serializers.CharField(max_length=200)
    amount = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal('0.01'),
    )
    currency = serializers.ChoiceField(choices=Expense.Currency.choices, default=Expense.Currency.USD)
    category = serializers.ChoiceField(choices=Expense.Category.choices, default=Expense.Category.OTHER)
    paidBy = serializers.UUIDField()
    splitType = serializers.CharField(max_length=20)
    splitBetween = SplitDetailSerializer(many=True, required=False)
    date = serializers.DateField(required=False)

    def validate(self, attrs):
        try:
            group = Group.objects.get(pk=attrs['groupId'])
        except Group.DoesNotExist:
            raise NotFound('Group not found.')

        if not Member.objects.filter(pk=attrs['paidBy']).exists():
            raise NotFound('Payer member not found.')
        _ensure_group_member(group, attrs['paidBy'], 'paidBy', 'Payer must be a member of the group.')

        # Without explicit details the expense is shared by the whole group.
        attrs['splits'] = _resolve_splits(
            group,
            attrs['amount'],
            attrs['splitType'],
            attrs.get('splitBetween'),
            [m.id for m in group.ordered_members()],
        )
        attrs['group'] = group
        return attrs

    def create(self, validated_data):
        with transaction.atomic():
            expense = Expense(
                group=validated_data['group'],
                description=validated_data['description'],
                amount=validated_data['amount'],
                currency=validated_data['currency'],
                category=validated_data['category'],
                split_type=validated_data['splitType'],
                paid_by_id=validated_data['paidBy'],
            )
            if validated_data.get('date'):
                expense.date = validated_data['date']
            expense.save()
            _save_splits(expense, validated_data['splits'])

        logger.info(
            'Expense created: %s (id=%s, group=%s, splits=%d)',
            expense.description,
            expense.id,
            expense.group_id,
            len(validated_data['splits']),
        )
        return expense


class ExpenseUpdateSerializer(serializers.Serializer):
    """
    Partial update of an expense. The split is recalculated when the amount,
    the split type or the participants change; percentage and exact splits
    must resupply their details.
    """
    description = serializers.CharField(max_length=200, required=False)
    amount = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal('0.01'),
        required=False,
    )
    currency = serializers.ChoiceField(choices=Expense.Currency.choices, required=False)
    category = serializers.ChoiceField(choices=Expense.Category.choices, required=False)
    paidBy = serializers.UUIDField(required=False)
    splitType = serializers.CharField(max_length=20, required=False)
    splitBetween = SplitDetailSerializer(many=True, required=False)
    date = serializers.DateField(required=False)

    def validate(self, attrs):
        expense = self.instance
        group = expense.group

        if 'paidBy' in attrs:
            _ensure_group_member(group, attrs['paidBy'], 'paidBy', 'Payer must be a member of the group.')

        if {'amount', 'splitType', 'splitBetween'} & set(attrs):
            attrs['splits'] = _resolve_splits(
                group,
                attrs.get('amount', expense.amount),
                attrs.get('splitType', expense.split_type),
                attrs.get('splitBetween'),
                expense.splits.values_list('member_id', flat=True),
            )
        return attrs

    def update(self, instance, validated_data):
        field_map = {
            'description': 'description',
            'amount': 'amount',
            'currency': 'currency',
            'category': 'category',
            'paidBy': 'paid_by_id',
            'splitType': 'split_type',
            'date': 'date',
        }
        with transaction.atomic():
            for key, attr in field_map.items():
                if key in validated_data:
                    setattr(instance, attr, validated_data[key])
            instance.save()
            if 'splits' in validated_data:
                _save_splits(instance, validated_data['splits'])

        logger.info('Expense updated: id=%s', instance.id)
        return instance


class BalanceSerializer(serializers.Serializer):
    memberId = serializers.CharField(source='member_id')
    memberName = serializers.CharField(source='member_name')
    balance = serializers.DecimalField(max_digits=12, decimal_places=2)


class SettlementSerializer(serializers.Serializer):
    """Serializes ``Settlement`` tuples; ``from`` is a reserved word, hence get_fields."""

    def get_fields(self):
        return {
            'from': serializers.CharField(source='from_id'),
            'fromName': serializers.CharField(source='from_name'),
            'to': serializers.CharField(source='to_id'),
            'toName': serializers.CharField(source='to_name'),
            'amount': serializers.DecimalField(max_digits=12, decimal_places=2),
        }
