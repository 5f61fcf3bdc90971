"""Auth and account routes mounted under /api/v1/.

Includes JWT obtain (signin), refresh, verify, signout (blacklist) and the
current staff profile.
"""

from django.urls import path

from .views import RefreshView, SignInView, SignOutView, VerifyView, current_user

urlpatterns = [
    path("auth/signin/", SignInView.as_view(), name="signin"),
    path("auth/refresh/", RefreshView.as_view(), name="token_refresh"),
    path("auth/verify/", VerifyView.as_view(), name="token_verify"),
    path("auth/signout/", SignOutView.as_view(), name="signout"),
    path("account/profile/", current_user, name="profile"),
]
