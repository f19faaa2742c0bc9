"""
URL configuration for the Members app.
"""
from django.urls import include, path
from rest_framework.routers import SimpleRouter

from apps.members.views import MemberViewSet

app_name = 'members'

router = SimpleRouter()
router.register(r'', MemberViewSet, basename='member')

urlpatterns = [
    path('', include(router.urls)),
]
