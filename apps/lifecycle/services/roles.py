"""
Who may act on a creator's lifecycle.

Roles are derived per call from the family registry; the acting user is
always passed in explicitly.
"""
import logging

from apps.accounts.models import FamilyMember
from .errors import Forbidden

logger = logging.getLogger(__name__)

ROLE_CREATOR = 'creator'
ROLE_REPRESENTATIVE = FamilyMember.ROLE_REPRESENTATIVE
ROLE_MEMBER = FamilyMember.ROLE_MEMBER
ROLE_NONE = 'none'

FAMILY_ROLES = (ROLE_REPRESENTATIVE, ROLE_MEMBER)


def get_user_role(user, creator):
    """
    Role of user relative to creator.

    Returns:
        str: 'creator' | 'representative' | 'member' | 'none'
    """
    if user.pk == creator.pk:
        return ROLE_CREATOR

    membership = FamilyMember.get_membership(creator, user)
    if membership is None:
        return ROLE_NONE
    if membership.role == FamilyMember.ROLE_REPRESENTATIVE:
        return ROLE_REPRESENTATIVE
    return ROLE_MEMBER


def has_active_representative(creator):
    return FamilyMember.has_active_representative(creator)


def require_related_party(user, creator):
    """Creator or any active family member. Returns the role."""
    role = get_user_role(user, creator)
    if role == ROLE_NONE:
        raise Forbidden()
    return role


def require_family_member(user, creator):
    """Any active family member (representative or member). Returns the role."""
    role = get_user_role(user, creator)
    if role not in FAMILY_ROLES:
        raise Forbidden()
    return role


def require_representative(user, creator, action, allow_fallback=True):
    """
    Gate a representative-only action.

    With allow_fallback, an active member may act when the creator has no
    active representative at all.

    Returns:
        bool: True if the action runs under the fallback rule
    """
    role = get_user_role(user, creator)
    if role == ROLE_REPRESENTATIVE:
        return False

    if not allow_fallback or role != ROLE_MEMBER:
        raise Forbidden()

    if has_active_representative(creator):
        raise Forbidden()

    logger.info(
        f"Member performing representative action (no representative exists): "
        f"user={user.pk} creator={creator.pk} action={action}"
    )
    return True


def can_view_all_votes(role, creator):
    """Representatives see every vote; members do too when nobody represents the creator."""
    if role == ROLE_REPRESENTATIVE:
        return True
    return role == ROLE_MEMBER and not has_active_representative(creator)
