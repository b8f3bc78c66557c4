from django.contrib import admin
from .models import Conversation


@admin.register(Conversation)
class ConversationAdmin(admin.ModelAdmin):
    list_display = ('created_at', 'user', 'title', 'has_audio')
    list_filter = ('created_at',)
    search_fields = ('title', 'user__email')
    date_hierarchy = 'created_at'
    readonly_fields = ('created_at', 'updated_at')
    raw_id_fields = ('user',)

    def has_audio(self, obj):
        return obj.has_audio
    has_audio.boolean = True
