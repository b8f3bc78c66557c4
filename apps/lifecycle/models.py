from django.db import models
from django.contrib.auth.models import User


class Lifecycle(models.Model):
    """
    What has happened to a creator's record after their death was reported.

    One row per creator. A creator without a row is 'active'.
    """
    STATUS_ACTIVE = 'active'
    STATUS_DEATH_REPORTED = 'death_reported'
    STATUS_CONSENT_GATHERING = 'consent_gathering'
    STATUS_OPENED = 'opened'

    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_DEATH_REPORTED, 'Death Reported'),
        (STATUS_CONSENT_GATHERING, 'Consent Gathering'),
        (STATUS_OPENED, 'Opened'),
    ]

    # A creator in any of these states is treated as deceased
    DECEASED_STATUSES = (STATUS_DEATH_REPORTED, STATUS_CONSENT_GATHERING, STATUS_OPENED)

    DELETION_CONSENT_GATHERING = 'deletion_consent_gathering'

    DELETION_STATUS_CHOICES = [
        (DELETION_CONSENT_GATHERING, 'Deletion Consent Gathering'),
    ]

    creator = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name='lifecycle'
    )
    status = models.CharField(
        max_length=30,
        choices=STATUS_CHOICES,
        default=STATUS_ACTIVE
    )
    deletion_status = models.CharField(
        max_length=30,
        choices=DELETION_STATUS_CHOICES,
        null=True,
        blank=True,
        help_text="Only meaningful once the record is opened"
    )

    # Provenance
    death_reported_at = models.DateTimeField(null=True, blank=True)
    death_reported_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )
    consent_initiated_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )
    opened_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['status'], name='lifecycle_l_status_9d03c1_idx'),
        ]

    def __str__(self):
        if self.deletion_status:
            return f"{self.creator.email}: {self.status} ({self.deletion_status})"
        return f"{self.creator.email}: {self.status}"

    @property
    def is_deceased(self):
        return self.status in self.DECEASED_STATUSES

    @property
    def is_deletion_gathering(self):
        return (
            self.status == self.STATUS_OPENED
            and self.deletion_status == self.DELETION_CONSENT_GATHERING
        )


def get_lifecycle_status(user):
    """Current lifecycle status of a creator; 'active' when there is no record."""
    status = Lifecycle.objects.filter(creator=user).values_list('status', flat=True).first()
    return status or Lifecycle.STATUS_ACTIVE


def is_mutation_blocked(status):
    """
    Whether creator content may no longer be changed or deleted.

    The records subsystem must consult this before every write.
    """
    return status in Lifecycle.DECEASED_STATUSES


def is_deceased_user(user):
    """A user counts as deceased once their own lifecycle leaves 'active'."""
    return get_lifecycle_status(user) in Lifecycle.DECEASED_STATUSES


# =============================================================================
# Votes
# =============================================================================

class ConsentDecision(models.TextChoices):
    PENDING = 'pending', 'Pending'
    AGREED = 'agreed', 'Agreed'
    DECLINED = 'declined', 'Declined'


class BaseConsentRecord(models.Model):
    """
    One family member's vote in a unanimous decision.

    Records are snapshotted when voting starts and removed wholesale when
    the vote concludes.
    """
    lifecycle = models.ForeignKey(
        Lifecycle,
        on_delete=models.CASCADE,
        related_name='%(class)ss'
    )
    family_member = models.ForeignKey(
        'accounts.FamilyMember',
        on_delete=models.CASCADE,
        related_name='%(class)ss'
    )
    decision = models.CharField(
        max_length=10,
        choices=ConsentDecision.choices,
        default=ConsentDecision.PENDING
    )
    decided_at = models.DateTimeField(null=True, blank=True)
    auto_resolved = models.BooleanField(
        default=False,
        help_text="Agreed automatically because the voter is deceased"
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        abstract = True
        unique_together = ['lifecycle', 'family_member']

    def __str__(self):
        return f"{self.family_member.member.email}: {self.decision}"

    @property
    def consented(self):
        """Tri-state view of the decision: None, True or False."""
        if self.decision == ConsentDecision.AGREED:
            return True
        if self.decision == ConsentDecision.DECLINED:
            return False
        return None

    @property
    def is_pending(self):
        return self.decision == ConsentDecision.PENDING


class ConsentRecord(BaseConsentRecord):
    """Vote on opening a creator's record to the family."""

    class Meta(BaseConsentRecord.Meta):
        pass


class DeletionConsentRecord(BaseConsentRecord):
    """Vote on permanently erasing an opened record."""

    class Meta(BaseConsentRecord.Meta):
        pass


# =============================================================================
# Audit trail
# =============================================================================

class LifecycleActionLog(models.Model):
    """
    Append-only audit entry for a lifecycle action.

    Entries outlive the lifecycle row itself: after erasure the lifecycle
    link is cleared but the creator link remains.
    """
    lifecycle = models.ForeignKey(
        Lifecycle,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='actions'
    )
    creator = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='lifecycle_actions'
    )
    action = models.CharField(max_length=50)
    performed_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )
    metadata = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['creator', 'created_at'], name='lifecycle_l_creator_2a6f80_idx'),
        ]

    def __str__(self):
        return f"{self.action} on {self.creator_id} by {self.performed_by_id}"
