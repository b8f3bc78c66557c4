from django.db import models
from django.contrib.auth.models import User


# =============================================================================
# Family Membership Registry
# =============================================================================

class FamilyMember(models.Model):
    """
    Track who belongs to a creator's family circle.

    The 'creator' is the person whose life record is governed.
    A 'representative' may drive lifecycle actions on the creator's behalf;
    a 'member' may report a death and vote.
    """
    ROLE_REPRESENTATIVE = 'representative'
    ROLE_MEMBER = 'member'

    ROLE_CHOICES = [
        (ROLE_REPRESENTATIVE, 'Representative'),
        (ROLE_MEMBER, 'Member'),
    ]

    STATUS_ACTIVE = 'active'
    STATUS_REMOVED = 'removed'
    STATUS_PENDING = 'pending'

    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_REMOVED, 'Removed'),
        (STATUS_PENDING, 'Pending Invitation'),
    ]

    creator = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='family_members',
        help_text="The person whose record this family governs"
    )
    member = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='family_memberships',
        help_text="The family member"
    )
    role = models.CharField(
        max_length=20,
        choices=ROLE_CHOICES,
        default=ROLE_MEMBER,
    )
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_ACTIVE,
        help_text="Current status of family membership"
    )
    relationship_label = models.CharField(
        max_length=50,
        blank=True,
        help_text="How the member is related to the creator (e.g. 'daughter')"
    )

    # Tracking
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ['creator', 'member']
        indexes = [
            models.Index(fields=['creator', 'status'], name='accounts_fa_creator_5b1d2e_idx'),
            models.Index(fields=['member', 'status'], name='accounts_fa_member__3fa1de_idx'),
        ]

    def __str__(self):
        return f"{self.member.email} in {self.creator.email}'s family ({self.role}, {self.status})"

    @property
    def is_active(self):
        return self.status == self.STATUS_ACTIVE

    @classmethod
    def get_active_members(cls, creator):
        """Get all active family members for a creator."""
        return cls.objects.filter(
            creator=creator,
            status=cls.STATUS_ACTIVE
        ).select_related('member')

    @classmethod
    def get_membership(cls, creator, member):
        """Get the active membership linking member to creator, if any."""
        return cls.objects.filter(
            creator=creator,
            member=member,
            status=cls.STATUS_ACTIVE
        ).first()

    @classmethod
    def get_memberships_of(cls, member):
        """Active memberships where the user votes in someone else's family."""
        return cls.objects.filter(
            member=member,
            status=cls.STATUS_ACTIVE
        ).exclude(creator=member).select_related('creator')

    @classmethod
    def has_active_representative(cls, creator):
        """Check if the creator has at least one active representative."""
        return cls.objects.filter(
            creator=creator,
            role=cls.ROLE_REPRESENTATIVE,
            status=cls.STATUS_ACTIVE
        ).exists()


# =============================================================================
# Notifications
# =============================================================================

class Notification(models.Model):
    """
    In-app notification for a user.

    Written by the lifecycle core as a best-effort side effect;
    optionally mirrored by email through Celery.
    """
    recipient = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='notifications'
    )
    notification_type = models.CharField(max_length=50)
    title = models.CharField(max_length=200)
    message = models.TextField()
    related_creator = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        help_text="Creator whose lifecycle produced this notification"
    )

    is_read = models.BooleanField(default=False)
    email_sent_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['recipient', 'is_read'], name='accounts_no_recipie_8c2f41_idx'),
        ]

    def __str__(self):
        return f"{self.notification_type} -> {self.recipient.email}"
