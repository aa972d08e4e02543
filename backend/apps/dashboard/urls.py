"""
Dashboard URL configuration.
"""

from django.urls import path

from .views import AdminOverviewView, DashboardView

urlpatterns = [
    path("", DashboardView.as_view(), name="dashboard"),
    path("admin-overview/", AdminOverviewView.as_view(), name="admin-overview"),
]
