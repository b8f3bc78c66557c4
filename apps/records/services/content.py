"""
Write access to conversations.

Every write checks the owner's lifecycle first: once a death is reported
the record is frozen until the report is cancelled or the data is erased.
"""
import logging
from django.db import transaction

from apps.lifecycle.models import get_lifecycle_status, is_mutation_blocked
from ..models import Conversation
from .storage import delete_conversation_audio, purge_creator_media

logger = logging.getLogger(__name__)


class ContentLockedError(Exception):
    """Raised when a write is attempted on a frozen record."""

    def __init__(self, lifecycle_status):
        self.lifecycle_status = lifecycle_status
        super().__init__(
            f"Records cannot be changed while lifecycle status is '{lifecycle_status}'."
        )


def get_lock_status(user):
    """
    Returns:
        dict: {'blocked': bool, 'lifecycle_status': str}
    """
    status = get_lifecycle_status(user)
    return {'blocked': is_mutation_blocked(status), 'lifecycle_status': status}


def ensure_writable(user):
    """Raise ContentLockedError if the user's records are frozen."""
    status = get_lifecycle_status(user)
    if is_mutation_blocked(status):
        raise ContentLockedError(status)


def create_conversation(user, **fields):
    ensure_writable(user)
    conversation = Conversation.objects.create(user=user, **fields)
    logger.info(f"Conversation {conversation.id} created for user {user.pk}")
    return conversation


@transaction.atomic
def delete_conversation(user, conversation):
    """Delete a conversation and its stored audio."""
    ensure_writable(user)
    delete_conversation_audio(conversation)
    conversation_id = conversation.id
    conversation.delete()
    logger.info(f"Conversation {conversation_id} deleted for user {user.pk}")


def erase_creator_content(user):
    """
    Permanently remove every conversation a user owns, audio first.

    Ignores the lifecycle lock: this is the terminal step of a unanimous
    deletion vote. Run it inside the caller's transaction.

    Returns:
        dict: {'audio_deleted': int, 'conversations_deleted': int}
    """
    audio_deleted = purge_creator_media(user)
    conversations_deleted, _ = Conversation.objects.filter(user=user).delete()
    logger.info(
        f"Erased content for user {user.pk}: {conversations_deleted} conversation(s), "
        f"{audio_deleted} audio file(s)"
    )
    return {'audio_deleted': audio_deleted, 'conversations_deleted': conversations_deleted}
