"""Profile and role resolution.

Maps an authenticated identity to its store Profile, creating a customer
profile on first sight. Any database failure while resolving degrades to
"no profile": callers treat that as a customer without access to role-gated
views, never as a fatal error.
"""

import logging
from dataclasses import dataclass

from django.db import DatabaseError, IntegrityError, transaction

from .models import Profile, Role

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """What the identity provider tells us about the current visitor."""

    id: str
    email: str = ""
    first_name: str | None = None
    last_name: str | None = None
    is_signed_in: bool = True
    is_loaded: bool = True

    @classmethod
    def from_user(cls, user) -> "Identity":
        if user is None or not user.is_authenticated:
            return cls(id="", is_signed_in=False)
        return cls(
            id=str(user.pk),
            email=user.email,
            first_name=user.first_name or None,
            last_name=user.last_name or None,
        )


def create_profile(identity: Identity, role: str = Role.CUSTOMER) -> Profile | None:
    """Persist a new profile for the identity.

    The insert runs in a savepoint so a lost creation race (the unique
    constraint on external_id) does not poison the caller's transaction.

    Returns:
        The created Profile, or None if the insert failed.
    """
    try:
        with transaction.atomic():
            profile = Profile.objects.create(
                external_id=identity.id,
                email=identity.email,
                first_name=identity.first_name,
                last_name=identity.last_name,
                role=role,
            )
    except IntegrityError:
        logger.warning("Profile for identity %s already exists, creation skipped", identity.id)
        return None
    except DatabaseError:
        logger.exception("Failed to create profile for identity %s", identity.id)
        return None

    logger.info("Created %s profile %s for %s", role, profile.pk, identity.email)
    return profile


def resolve_profile(identity: Identity) -> Profile | None:
    """Look up the identity's profile, creating a customer profile if absent.

    Args:
        identity: The signed-in identity

    Returns:
        The existing or newly created Profile, or None on failure.
    """
    try:
        return Profile.objects.get(external_id=identity.id)
    except Profile.DoesNotExist:
        pass
    except DatabaseError:
        logger.exception("Profile lookup failed for identity %s", identity.id)
        return None

    return create_profile(identity, role=Role.CUSTOMER)


def set_role(profile: Profile, role: str) -> Profile:
    """Change a profile's role and update the given instance in place.

    Raises:
        ValueError: If role is not a known role
    """
    if role not in Role.values:
        raise ValueError(f"Invalid role: {role}. Must be one of {Role.values}")

    previous = profile.role
    profile.role = role
    try:
        profile.save(update_fields=["role", "updated_at"])
    except DatabaseError:
        profile.role = previous
        raise

    logger.info("Profile %s role changed from %s to %s", profile.pk, previous, role)
    return profile


class ProfileResolver:
    """Holds the resolved profile for one request.

    Role flags read the held copy, so a successful update_role() is visible
    immediately. refresh() re-reads the row and reconciles the held copy.
    """

    def __init__(self, identity: Identity):
        self.identity = identity
        self.profile = None
        self.loading = True

    def resolve(self) -> Profile | None:
        if not self.identity.is_loaded:
            return None

        if self.identity.is_signed_in:
            self.profile = resolve_profile(self.identity)
        else:
            self.profile = None

        self.loading = False
        return self.profile

    def refresh(self) -> Profile | None:
        """Re-fetch the profile from the database."""
        if self.profile is None:
            return self.resolve()

        try:
            current = Profile.objects.filter(pk=self.profile.pk).first()
        except DatabaseError:
            logger.exception("Profile refresh failed for %s", self.profile.pk)
            return self.profile

        if current is None:
            # Row deleted underneath us; fall back to a fresh resolution
            self.profile = None
            return self.resolve()

        self.profile = current
        return self.profile

    def update_role(self, new_role: str) -> bool:
        if self.profile is None:
            return False

        try:
            set_role(self.profile, new_role)
        except ValueError:
            return False
        except DatabaseError:
            logger.exception("Failed to update role for profile %s", self.profile.pk)
            return False

        return True

    @property
    def role(self) -> str:
        if self.profile is None:
            return Role.CUSTOMER
        return self.profile.role

    @property
    def is_admin(self) -> bool:
        return self.profile is not None and self.profile.role == Role.ADMIN

    @property
    def is_host(self) -> bool:
        return self.profile is not None and self.profile.role == Role.HOST

    @property
    def is_customer(self) -> bool:
        return self.role == Role.CUSTOMER

    def as_dict(self):
        return {
            "profile": self.profile.as_dict() if self.profile else None,
            "role": self.role,
            "is_admin": self.is_admin,
            "is_host": self.is_host,
            "is_customer": self.is_customer,
            "loading": self.loading,
        }
