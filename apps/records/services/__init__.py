from .storage import purge_creator_media, delete_conversation_audio
from .content import (
    ContentLockedError,
    get_lock_status,
    ensure_writable,
    create_conversation,
    delete_conversation,
    erase_creator_content,
)

__all__ = [
    'purge_creator_media',
    'delete_conversation_audio',
    'ContentLockedError',
    'get_lock_status',
    'ensure_writable',
    'create_conversation',
    'delete_conversation',
    'erase_creator_content',
]
