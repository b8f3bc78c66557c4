"""
Conversation audio storage cleanup.

Deletion goes through Django's storage API, so the same code purges
S3 (django-storages) in production and the filesystem in development.
Deleting an object that is already gone is not an error, which makes
every function here safe to re-run.
"""
import logging

from ..models import Conversation

logger = logging.getLogger(__name__)


def purge_creator_media(user):
    """
    Delete all stored audio for a user's conversations.

    Best-effort: per-object failures are logged and skipped.

    Returns:
        int: Number of audio objects deleted
    """
    conversations = Conversation.objects.filter(user=user).exclude(audio='')

    total = 0
    deleted = 0
    for conversation in conversations:
        total += 1
        if delete_conversation_audio(conversation):
            deleted += 1

    if total:
        logger.info(f"Audio cleanup for user {user.pk}: {deleted}/{total} deleted")
    return deleted


def delete_conversation_audio(conversation):
    """Delete one conversation's stored audio. Returns True on success."""
    if not conversation.audio:
        return False

    name = conversation.audio.name
    try:
        conversation.audio.storage.delete(name)
    except Exception as e:
        logger.error(f"Failed to delete audio file {name}: {e}")
        return False

    logger.debug(f"Deleted audio file {name}")
    return True
