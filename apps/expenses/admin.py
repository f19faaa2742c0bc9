"""
Admin configuration for the Expenses app.
"""
from django.contrib import admin

from apps.expenses.models import Expense, ExpenseSplit


class ExpenseSplitInline(admin.TabularInline):
    model = ExpenseSplit
    extra = 0
    autocomplete_fields = ['member']


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = [
        'description',
        'amount',
        'currency',
        'category',
        'split_type',
        'paid_by',
        'group',
        'date',
    ]
    list_filter = ['category', 'split_type', 'currency', 'date']
    search_fields = ['description', 'paid_by__name', 'group__name']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [ExpenseSplitInline]


@admin.register(ExpenseSplit)
class ExpenseSplitAdmin(admin.ModelAdmin):
    list_display = ['expense', 'member', 'amount']
    search_fields = ['member__name', 'expense__description']
