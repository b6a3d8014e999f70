"""Profile middleware for MicaGlow."""

from django.utils.functional import SimpleLazyObject

from .services import Identity, ProfileResolver


def get_profile_resolver(request):
    """Build and resolve the ProfileResolver for the request's user."""
    if not hasattr(request, "_cached_profile_resolver"):
        resolver = ProfileResolver(Identity.from_user(getattr(request, "user", None)))
        resolver.resolve()
        request._cached_profile_resolver = resolver
    return request._cached_profile_resolver


class ProfileMiddleware:
    """Middleware to attach the profile resolver to the request.

    Sets request.profile_resolver. Resolution (and first-visit profile
    creation) happens on first access, so requests that never look at the
    role issue no profile queries.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.profile_resolver = SimpleLazyObject(lambda: get_profile_resolver(request))
        return self.get_response(request)
