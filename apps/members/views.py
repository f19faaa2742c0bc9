"""
Views for the Members app.
"""
import logging

from rest_framework import status, viewsets
from rest_framework.response import Response

from apps.members.models import Member
from apps.members.serializers import MemberSerializer, MemberWriteSerializer
from common.exceptions import MemberInUse

logger = logging.getLogger(__name__)


class MemberViewSet(viewsets.ModelViewSet):
    """
    ViewSet for Member CRUD operations.

    list:   GET    /api/v1/members/
    create: POST   /api/v1/members/
    read:   GET    /api/v1/members/{id}/
    update: PATCH  /api/v1/members/{id}/
    delete: DELETE /api/v1/members/{id}/
    """
    queryset = Member.objects.all()
    search_fields = ['name', 'email']

    def get_serializer_class(self):
        if self.action in ('create', 'update', 'partial_update'):
            return MemberWriteSerializer
        return MemberSerializer

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        member = serializer.save()
        logger.info('Member created: %s (id=%s)', member.name, member.id)
        return Response(
            {'success': True, 'data': MemberSerializer(member).data},
            status=status.HTTP_201_CREATED,
        )

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        serializer = MemberSerializer(queryset, many=True)
        return Response({'success': True, 'data': serializer.data})

    def retrieve(self, request, *args, **kwargs):
        instance = self.get_object()
        return Response({'success': True, 'data': MemberSerializer(instance).data})

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        member = serializer.save()
        return Response({'success': True, 'data': MemberSerializer(member).data})

    def destroy(self, request, *args, **kwargs):
        member = self.get_object()
        if member.has_expenses:
            raise MemberInUse(
                'Member has recorded expenses and cannot be deleted.',
            )
        # Group memberships go with the member; groups themselves are kept.
        member.delete()
        logger.info('Member deleted: id=%s', kwargs.get('pk'))
        return Response(
            {'success': True, 'message': 'Member deleted.'},
            status=status.HTTP_200_OK,
        )
