"""
URL configuration for the Expenses app.
"""
from django.urls import include, path
from rest_framework.routers import SimpleRouter

from apps.expenses.views import ExpenseSummaryView, ExpenseViewSet

app_name = 'expenses'

router = SimpleRouter()
router.register(r'', ExpenseViewSet, basename='expense')

urlpatterns = [
    # Explicit paths BEFORE router to avoid conflicts with router's {pk} patterns
    path('summary/', ExpenseSummaryView.as_view(), name='expense-summary'),
    path('', include(router.urls)),
]
