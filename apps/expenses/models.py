"""
Models for the Expenses app.
"""
from django.db import models
from django.utils import timezone

from common.models import TimestampedModel


class Expense(TimestampedModel):
    """
    An expense recorded within a group, paid by one member and split among
    one or more members of the same group.
    """
    class Category(models.TextChoices):
        FOOD = 'food', 'Food & Drinks'
        TRAVEL = 'travel', 'Travel'
        UTILITIES = 'utilities', 'Utilities'
        ENTERTAINMENT = 'entertainment', 'Entertainment'
        ACCOMMODATION = 'accommodation', 'Accommodation'
        SHOPPING = 'shopping', 'Shopping'
        OTHER = 'other', 'Other'

    class SplitType(models.TextChoices):
        EQUAL = 'equal', 'Equal'
        PERCENTAGE = 'percentage', 'Percentage'
        EXACT = 'exact', 'Exact Amount'

    class Currency(models.TextChoices):
        USD = 'USD', 'US Dollar'
        EUR = 'EUR', 'Euro'
        GBP = 'GBP', 'British Pound'
        INR = 'INR', 'Indian Rupee'
        JPY = 'JPY', 'Japanese Yen'
        AUD = 'AUD', 'Australian Dollar'
        CAD = 'CAD', 'Canadian Dollar'
        CHF = 'CHF', 'Swiss Franc'
        CNY = 'CNY', 'Chinese Yuan'

    group = models.ForeignKey(
        'groups.Group',
        on_delete=models.CASCADE,
        related_name='expenses',
    )
    description = models.CharField(max_length=200)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(
        max_length=3,
        choices=Currency.choices,
        default=Currency.USD,
        help_text='ISO 4217 currency code.',
    )
    category = models.CharField(
        max_length=20,
        choices=Category.choices,
        default=Category.OTHER,
        db_index=True,
    )
    split_type = models.CharField(
        max_length=20,
        choices=SplitType.choices,
        default=SplitType.EQUAL,
    )
    paid_by = models.ForeignKey(
        'members.Member',
        on_delete=models.PROTECT,
        related_name='paid_expenses',
    )
    date = models.DateField(default=timezone.localdate)

    class Meta:
        db_table = 'expenses'
        ordering = ['-date', '-created_at']

    def __str__(self):
        return f'{self.description} - {self.currency} {self.amount}'


class ExpenseSplit(TimestampedModel):
    """
    The share of an expense attributed to one member.
    """
    expense = models.ForeignKey(
        Expense,
        on_delete=models.CASCADE,
        related_name='splits',
    )
    member = models.ForeignKey(
        'members.Member',
        on_delete=models.PROTECT,
        related_name='expense_splits',
    )
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text='Amount owed by this member in the expense currency.',
    )

    class Meta:
        db_table = 'expense_splits'
        unique_together = ['expense', 'member']
        ordering = ['created_at']

    def __str__(self):
        return f'{self.member} owes {self.amount} for {self.expense}'
