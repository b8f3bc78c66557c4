from django.db import models
from django.contrib.auth.models import User


def audio_upload_path(instance, filename):
    """Generate upload path: audio/user_id/year/month/filename"""
    from datetime import datetime
    now = datetime.now()
    # Sanitize filename
    safe_name = "".join(c for c in filename if c.isalnum() or c in '._-')
    return f'audio/{instance.user_id}/{now.year}/{now.month:02d}/{safe_name}'


class Conversation(models.Model):
    """
    A recorded conversation in a creator's life record.

    Writes are refused while the creator's lifecycle is not active.
    """
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='conversations'
    )
    title = models.CharField(max_length=200, blank=True)
    transcript = models.TextField(blank=True)
    audio = models.FileField(upload_to=audio_upload_path, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'created_at'], name='records_con_user_id_4e7a1b_idx'),
        ]

    def __str__(self):
        if self.title:
            return f"{self.created_at:%Y-%m-%d}: {self.title}"
        return f"{self.created_at:%Y-%m-%d}: Conversation"

    @property
    def has_audio(self):
        return bool(self.audio)
