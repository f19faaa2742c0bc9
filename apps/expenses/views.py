"""
Views for the Expenses app.
"""
import logging
import uuid
from decimal import Decimal

from django.db.models import Count, Sum
from rest_framework import status, viewsets
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.expenses.filters import ExpenseFilter
from apps.expenses.models import Expense
from apps.expenses.serializers import (
    ExpenseCreateSerializer,
    ExpenseSerializer,
    ExpenseUpdateSerializer,
)
from apps.groups.models import Group
from common.exceptions import NotFound

logger = logging.getLogger(__name__)


class ExpenseViewSet(viewsets.ModelViewSet):
    """
    ViewSet for Expense CRUD operations.

    list:   GET    /api/v1/expenses/?group=<group_id>&category=<category>&paidBy=<member_id>
    create: POST   /api/v1/expenses/
    read:   GET    /api/v1/expenses/{id}/
    update: PATCH  /api/v1/expenses/{id}/
    delete: DELETE /api/v1/expenses/{id}/
    """
    queryset = Expense.objects.select_related('paid_by', 'group').prefetch_related('splits__member')
    filterset_class = ExpenseFilter
    search_fields = ['description']
    ordering_fields = ['date', 'amount', 'created_at']

    def get_serializer_class(self):
        if self.action == 'create':
            return ExpenseCreateSerializer
        if self.action in ('update', 'partial_update'):
            return ExpenseUpdateSerializer
        return ExpenseSerializer

    def _refreshed(self, expense):
        return self.get_queryset().get(pk=expense.pk)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        expense = serializer.save()
        return Response(
            {
                'success': True,
                'data': ExpenseSerializer(self._refreshed(expense)).data,
            },
            status=status.HTTP_201_CREATED,
        )

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        serializer = ExpenseSerializer(queryset, many=True)
        return Response({'success': True, 'data': serializer.data})

    def retrieve(self, request, *args, **kwargs):
        instance = self.get_object()
        serializer = ExpenseSerializer(instance)
        return Response({'success': True, 'data': serializer.data})

    def update(self, request, *args, **kwargs):
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        expense = serializer.save()
        return Response(
            {
                'success': True,
                'data': ExpenseSerializer(self._refreshed(expense)).data,
            }
        )

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        expense_id = instance.id
        instance.delete()
        logger.info('Expense deleted: id=%s', expense_id)
        return Response(
            {'success': True, 'message': 'Expense deleted.'},
            status=status.HTTP_200_OK,
        )


class ExpenseSummaryView(APIView):
    """
    Get expense summary for a group.

    GET /api/v1/expenses/summary/?group=<group_id>

    Amounts are summed as recorded, regardless of currency.
    """

    def get(self, request):
        group_id = request.query_params.get('group')
        if not group_id:
            return Response(
                {
                    'success': False,
                    'error': {
                        'code': 'validation_error',
                        'message': 'group query parameter is required.',
                    },
                },
                status=status.HTTP_400_BAD_REQUEST,
            )

        group = Group.objects.filter(pk=group_id).first() if _is_uuid(group_id) else None
        if group is None:
            raise NotFound('Group not found.')

        expenses = Expense.objects.filter(group=group)

        totals = expenses.aggregate(total=Sum('amount'), count=Count('id'))

        # Per-category breakdown
        category_totals = (
            expenses.values('category')
            .annotate(total=Sum('amount'), count=Count('id'))
            .order_by('-total')
        )

        # Per-member spending
        member_spending = (
            expenses.values('paid_by__id', 'paid_by__name')
            .annotate(total_paid=Sum('amount'))
            .order_by('-total_paid')
        )

        return Response({
            'success': True,
            'data': {
                'groupId': str(group.id),
                'totalExpenses': str(totals['total'] or Decimal('0.00')),
                'expenseCount': totals['count'],
                'categoryBreakdown': [
                    {
                        'category': row['category'],
                        'total': str(row['total']),
                        'count': row['count'],
                    }
                    for row in category_totals
                ],
                'memberSpending': [
                    {
                        'memberId': str(row['paid_by__id']),
                        'memberName': row['paid_by__name'],
                        'totalPaid': str(row['total_paid']),
                    }
                    for row in member_spending
                ],
            },
        })


def _is_uuid(value):
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True
