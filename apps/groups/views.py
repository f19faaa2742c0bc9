"""
Views for the Groups app.
"""
import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Q
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.expenses.models import Expense
from apps.expenses.serializers import BalanceSerializer, SettlementSerializer
from apps.expenses.services.balance_calculator import calculate_group_balances
from apps.expenses.services.debt_simplifier import calculate_settlements
from apps.groups.models import Group, GroupMember
from apps.groups.serializers import (
    AddGroupMemberSerializer,
    GroupMemberSerializer,
    GroupSerializer,
    GroupWriteSerializer,
    group_detail_data,
)
from apps.members.models import Member
from apps.members.serializers import MemberSerializer
from common.exceptions import MemberInUse, NotFound

logger = logging.getLogger(__name__)


class GroupViewSet(viewsets.ModelViewSet):
    """
    ViewSet for Group CRUD operations, membership and balances.

    list:        GET    /api/v1/groups/
    create:      POST   /api/v1/groups/
    read:        GET    /api/v1/groups/{id}/
    update:      PATCH  /api/v1/groups/{id}/
    delete:      DELETE /api/v1/groups/{id}/
    members:     GET    /api/v1/groups/{id}/members/
    add member:  POST   /api/v1/groups/{id}/members/
    remove:      DELETE /api/v1/groups/{id}/members/{member_id}/
    balances:    GET    /api/v1/groups/{id}/balances/
    settlements: GET    /api/v1/groups/{id}/settlements/
    """
    queryset = Group.objects.prefetch_related('memberships')
    search_fields = ['name', 'description']

    def get_serializer_class(self):
        if self.action in ('create', 'update', 'partial_update'):
            return GroupWriteSerializer
        if self.action == 'members':
            return AddGroupMemberSerializer
        return GroupSerializer

    def get_object(self):
        try:
            return Group.objects.get(pk=self.kwargs['pk'])
        except (Group.DoesNotExist, ValidationError):
            raise NotFound('Group not found.')

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        group = serializer.save()
        logger.info('Group created: %s (id=%s)', group.name, group.id)
        return Response(
            {
                'success': True,
                'data': GroupSerializer(group).data,
            },
            status=status.HTTP_201_CREATED,
        )

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        serializer = GroupSerializer(queryset, many=True)
        return Response({'success': True, 'data': serializer.data})

    def retrieve(self, request, *args, **kwargs):
        instance = self.get_object()
        return Response({'success': True, 'data': group_detail_data(instance)})

    def update(self, request, *args, **kwargs):
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        group = serializer.save()
        return Response({'success': True, 'data': GroupSerializer(group).data})

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        group_id = instance.id
        # Expenses and their splits cascade; members are left untouched.
        instance.delete()
        logger.info('Group deleted: id=%s', group_id)
        return Response(
            {'success': True, 'message': 'Group deleted.'},
            status=status.HTTP_200_OK,
        )

    @action(detail=True, methods=['get', 'post'])
    def members(self, request, pk=None):
        """List the members of a group, or add one."""
        group = self.get_object()

        if request.method == 'GET':
            memberships = group.memberships.select_related('member')
            return Response(
                {'success': True, 'data': GroupMemberSerializer(memberships, many=True).data}
            )

        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        with transaction.atomic():
            if 'memberId' in data:
                try:
                    member = Member.objects.get(pk=data['memberId'])
                except Member.DoesNotExist:
                    raise NotFound('Member not found.')
                if group.has_member(member.id):
                    return Response(
                        {
                            'success': False,
                            'error': {
                                'code': 'already_member',
                                'message': 'Member already in group.',
                            },
                        },
                        status=status.HTTP_400_BAD_REQUEST,
                    )
            else:
                member = Member.objects.create(
                    name=data['name'].strip(),
                    email=data.get('email', '').strip().lower(),
                )
            GroupMember.objects.create(group=group, member=member)

        logger.info('Member %s added to group %s.', member.id, group.id)
        return Response(
            {
                'success': True,
                'data': {
                    'member': MemberSerializer(member).data,
                    'group': GroupSerializer(group).data,
                },
            },
            status=status.HTTP_201_CREATED,
        )

    @action(
        detail=True,
        methods=['delete'],
        url_path=r'members/(?P<member_pk>[^/.]+)',
        url_name='remove-member',
    )
    def remove_member(self, request, pk=None, member_pk=None):
        """
        Remove a member from a group.

        Refused while the member paid for, or shares in, any of the group's
        expenses, so that the group's balances keep summing to zero.
        """
        group = self.get_object()

        try:
            membership = GroupMember.objects.filter(group=group, member_id=member_pk).first()
        except ValidationError:
            membership = None
        if membership is None:
            return Response(
                {
                    'success': False,
                    'error': {
                        'code': 'not_member',
                        'message': 'Member not in group.',
                    },
                },
                status=status.HTTP_400_BAD_REQUEST,
            )

        has_expenses = Expense.objects.filter(group=group).filter(
            Q(paid_by_id=member_pk) | Q(splits__member_id=member_pk)
        ).exists()
        if has_expenses:
            raise MemberInUse(
                'Member has expenses in this group and cannot be removed.',
                code='member_has_expenses',
            )

        membership.delete()
        logger.info('Member %s removed from group %s.', member_pk, group.id)
        return Response(
            {'success': True, 'data': GroupSerializer(group).data},
            status=status.HTTP_200_OK,
        )

    @action(detail=True, methods=['get'])
    def balances(self, request, pk=None):
        """Net balance of every current member."""
        balances = calculate_group_balances(pk)
        return Response(
            {'success': True, 'data': BalanceSerializer(balances, many=True).data}
        )

    @action(detail=True, methods=['get'])
    def settlements(self, request, pk=None):
        """Suggested payments that settle every balance."""
        settlements = calculate_settlements(pk)
        return Response(
            {'success': True, 'data': SettlementSerializer(settlements, many=True).data}
        )
