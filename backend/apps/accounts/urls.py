"""
Session and own-profile routes.
"""

from django.urls import path

from .views import ProfileView, RefreshSessionView, SignInView, SignOutView, SignUpView

auth_urlpatterns = [
    path("sign-in/", SignInView.as_view(), name="sign-in"),
    path("sign-up/", SignUpView.as_view(), name="sign-up"),
    path("sign-out/", SignOutView.as_view(), name="sign-out"),
    path("refresh/", RefreshSessionView.as_view(), name="refresh-session"),
]

profile_urlpatterns = [
    path("", ProfileView.as_view(), name="own-profile"),
]
