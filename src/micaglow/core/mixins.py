"""Core mixins for view access control.

Provides three levels of access for the JSON endpoints:
- SignedInRequiredMixin: any authenticated identity (customers included)
- HostPortalMixin: hosts and admins
- AdminPortalMixin: admins only

Failures never redirect; they answer with a JSON body the client can act on.
"""

from django.conf import settings
from django.contrib.auth.mixins import LoginRequiredMixin, UserPassesTestMixin
from django.http import JsonResponse

from micaglow.profile.models import Role


def sign_in_required_response():
    """401 response telling the client to show the sign-in prompt."""
    return JsonResponse(
        {"error": "Sign in required", "login_url": settings.LOGIN_URL},
        status=401,
    )


class SignedInRequiredMixin(LoginRequiredMixin):
    """Authenticated access for any role."""

    def handle_no_permission(self):
        return sign_in_required_response()

    def get_resolver(self):
        """The ProfileResolver attached by ProfileMiddleware."""
        return self.request.profile_resolver


class RoleRequiredMixin(LoginRequiredMixin, UserPassesTestMixin):
    """Authenticated access restricted to the roles in ``allowed_roles``."""

    allowed_roles = ()

    def test_func(self):
        user = self.request.user

        # Superusers always have access
        if user.is_superuser:
            return True

        return self.request.profile_resolver.role in self.allowed_roles

    def handle_no_permission(self):
        if self.request.user.is_authenticated:
            return JsonResponse({"error": "You don't have permission to access this page."}, status=403)
        return sign_in_required_response()

    def get_resolver(self):
        return self.request.profile_resolver


class HostPortalMixin(RoleRequiredMixin):
    """Host dashboard access. Admins may act on every host's data."""

    allowed_roles = (Role.HOST, Role.ADMIN)

    def acting_as_admin(self):
        return self.request.user.is_superuser or self.request.profile_resolver.is_admin


class AdminPortalMixin(RoleRequiredMixin):
    """Admin-only access."""

    allowed_roles = (Role.ADMIN,)
