from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("id", "recipient", "event_type", "title", "is_read", "created_at")
    list_filter = ("is_read", "event_type")
    search_fields = ("title", "message", "recipient__username")
    readonly_fields = ("created_at", "updated_at")
