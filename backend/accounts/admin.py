from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import ResponderProfile, User


class ResponderProfileInline(admin.StackedInline):
    model = ResponderProfile
    can_delete = False
    readonly_fields = ("points", "resolved_count")


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("username", "email", "display_name", "phone_number",
                    "role", "is_active")
    search_fields = ("username", "email", "display_name", "phone_number")
    list_filter = ("is_active", "is_staff", "role")
    inlines = [ResponderProfileInline]
    fieldsets = BaseUserAdmin.fieldsets + (
        ("Extra Info", {"fields": ("display_name", "phone_number", "role", "push_token")}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ("Extra Info", {"fields": ("email", "display_name", "phone_number", "role")}),
    )


@admin.register(ResponderProfile)
class ResponderProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "tier", "points", "resolved_count")
    list_filter = ("tier",)
    search_fields = ("user__display_name", "user__email")
    readonly_fields = ("points", "resolved_count")
    ordering = ("-points",)
