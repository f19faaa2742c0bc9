"""
Query-string filters for expense listings.
"""
import django_filters

from apps.expenses.models import Expense


class ExpenseFilter(django_filters.FilterSet):
    group = django_filters.UUIDFilter(field_name='group_id')
    paidBy = django_filters.UUIDFilter(field_name='paid_by_id')
    category = django_filters.ChoiceFilter(choices=Expense.Category.choices)
    dateFrom = django_filters.DateFilter(field_name='date', lookup_expr='gte')
    dateTo = django_filters.DateFilter(field_name='date', lookup_expr='lte')

    class Meta:
        model = Expense
        fields = ['group', 'paidBy', 'category', 'dateFrom', 'dateTo']
