"""
Authorization gate.

One decision table maps (role, resource, action) to allow/deny. Views consult
it to decide what to expose; services consult it again right before every
mutation, and that second check is the one that counts.
"""

from enum import Enum
from typing import Optional


class Role(str, Enum):
    ADMIN = "admin"
    DONOR = "donor"
    HOSPITAL = "hospital"
    PUBLIC = "public"


class Resource(str, Enum):
    AUTH = "auth"  # sign-in / sign-up screens
    ADMIN_PANEL = "admin_panel"
    PROFILE = "profile"
    HOSPITAL = "hospital"
    DONOR_REGISTRATION = "donor_registration"
    BLOOD_REQUEST = "blood_request"
    BLOOD_STOCK = "blood_stock"
    DONATION = "donation"
    DASHBOARD = "dashboard"


class Action(str, Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    APPROVE = "approve"
    FULFILL = "fulfill"
    CANCEL = "cancel"


MUTATING_ACTIONS = frozenset(a for a in Action if a is not Action.READ)

# ==================================================
# (resource, action) -> roles allowed
# ==================================================
ALL_ROLES = frozenset(Role)
CONTRIBUTOR_ROLES = frozenset({Role.ADMIN, Role.DONOR, Role.HOSPITAL})
ADMIN_ONLY = frozenset({Role.ADMIN})

PERMISSIONS = {
    # Admin panel
    (Resource.ADMIN_PANEL, Action.READ): ADMIN_ONLY,
    # Own profile
    (Resource.PROFILE, Action.READ): ALL_ROLES,
    (Resource.PROFILE, Action.UPDATE): CONTRIBUTOR_ROLES,
    # Hospitals
    (Resource.HOSPITAL, Action.READ): ALL_ROLES,
    (Resource.HOSPITAL, Action.CREATE): ADMIN_ONLY,
    (Resource.HOSPITAL, Action.UPDATE): ADMIN_ONLY,
    # Donor registrations
    (Resource.DONOR_REGISTRATION, Action.READ): ALL_ROLES,
    (Resource.DONOR_REGISTRATION, Action.CREATE): CONTRIBUTOR_ROLES,
    (Resource.DONOR_REGISTRATION, Action.APPROVE): ADMIN_ONLY,
    # Blood requests
    (Resource.BLOOD_REQUEST, Action.READ): ALL_ROLES,
    (Resource.BLOOD_REQUEST, Action.CREATE): CONTRIBUTOR_ROLES,
    (Resource.BLOOD_REQUEST, Action.APPROVE): ADMIN_ONLY,
    (Resource.BLOOD_REQUEST, Action.FULFILL): ADMIN_ONLY,
    (Resource.BLOOD_REQUEST, Action.CANCEL): ADMIN_ONLY,
    # Blood stock
    (Resource.BLOOD_STOCK, Action.READ): ALL_ROLES,
    (Resource.BLOOD_STOCK, Action.CREATE): ADMIN_ONLY,
    (Resource.BLOOD_STOCK, Action.UPDATE): ADMIN_ONLY,
    # History and statistics
    (Resource.DONATION, Action.READ): ALL_ROLES,
    (Resource.DASHBOARD, Action.READ): ALL_ROLES,
}

# Resources whose rows belong to one profile. Non-admins only reach their own.
OWNED_RESOURCES = frozenset({
    Resource.PROFILE,
    Resource.DONOR_REGISTRATION,
    Resource.BLOOD_REQUEST,
    Resource.DONATION,
})

SCOPE_ALL = "all"
SCOPE_OWN = "own"


def role_of(profile) -> Optional[Role]:
    if profile is None:
        return None
    try:
        return Role(profile.role)
    except ValueError:
        return None


def can_access(profile, resource, action, owner_id=None) -> bool:
    """
    Decide whether ``profile`` may perform ``action`` on ``resource``.

    ``profile`` is None for an unauthenticated caller or a principal whose
    profile could not be loaded. ``owner_id`` is the owning profile id of the
    specific row being touched, when there is one.
    """
    resource = Resource(resource)
    action = Action(action)

    if resource is Resource.AUTH:
        return True

    role = role_of(profile)
    if role is None:
        return False

    allowed = PERMISSIONS.get((resource, action), frozenset())
    if role not in allowed:
        return False

    if role is Role.PUBLIC and action in MUTATING_ACTIONS:
        return False

    if owner_id is not None and resource in OWNED_RESOURCES and role is not Role.ADMIN:
        return str(owner_id) == str(profile.pk)

    return True


def history_scope(profile, resource) -> Optional[str]:
    """
    Which rows of an owned resource a profile may list.

    Returns ``SCOPE_ALL`` for admins, ``SCOPE_OWN`` for other roles and None
    when nothing may be listed.
    """
    resource = Resource(resource)
    if not can_access(profile, resource, Action.READ):
        return None
    if role_of(profile) is Role.ADMIN:
        return SCOPE_ALL
    return SCOPE_OWN
