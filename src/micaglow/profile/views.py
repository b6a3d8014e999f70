"""Profile views for all user types."""

import logging

from django.db import DatabaseError
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views import View

from micaglow.core.mixins import AdminPortalMixin, SignedInRequiredMixin
from micaglow.core.views import invalid_json_response, read_json

from .models import Profile, Role
from .services import set_role

logger = logging.getLogger(__name__)


class ProfileView(SignedInRequiredMixin, View):
    """Current profile and role flags.

    GET /profile/
    """

    def get(self, request):
        return JsonResponse(self.get_resolver().as_dict())


class ProfileRefreshView(SignedInRequiredMixin, View):
    """Re-read the profile from the database.

    POST /profile/refresh/

    Used after a role change made elsewhere instead of reloading the app.
    """

    def post(self, request):
        resolver = self.get_resolver()
        resolver.refresh()
        return JsonResponse(resolver.as_dict())


class ManageUsersView(AdminPortalMixin, View):
    """List every profile, optionally filtered by role.

    GET /manage/users/?role=host
    """

    def get(self, request):
        profiles = Profile.objects.all()
        role = request.GET.get("role")
        if role:
            profiles = profiles.filter(role=role)

        try:
            users = [profile.as_dict() for profile in profiles]
        except DatabaseError:
            logger.exception("Failed to list profiles")
            users = []

        return JsonResponse({"users": users})


class ManageUserRoleView(AdminPortalMixin, View):
    """Change a user's role.

    POST /manage/users/<profile_id>/role/
    {
        "role": "host"
    }
    """

    def post(self, request, profile_id):
        data = read_json(request)
        if data is None:
            return invalid_json_response()

        new_role = data.get("role", "")
        if new_role not in Role.values:
            return JsonResponse(
                {"error": f"Invalid role. Must be one of {', '.join(Role.values)}"},
                status=400,
            )

        resolver = self.get_resolver()
        if resolver.profile is not None and resolver.profile.pk == profile_id:
            # Own profile: go through the resolver so the held copy changes too
            if not resolver.update_role(new_role):
                return JsonResponse({"error": "Failed to update role"}, status=400)
            profile = resolver.profile
        else:
            profile = get_object_or_404(Profile, pk=profile_id)
            try:
                set_role(profile, new_role)
            except DatabaseError as e:
                logger.exception("Failed to update role for profile %s", profile_id)
                return JsonResponse({"error": str(e)}, status=400)

        return JsonResponse({"user": profile.as_dict()})
