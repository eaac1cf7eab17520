from django.contrib import admin

from .models import Case, CaseStatusLog


class CaseStatusLogInline(admin.TabularInline):
    model = CaseStatusLog
    extra = 0
    can_delete = False
    readonly_fields = ("from_status", "to_status", "changed_by",
                       "message", "created_at")


@admin.register(Case)
class CaseAdmin(admin.ModelAdmin):
    list_display = ("id", "owner_name", "severity", "status",
                    "assigned_responder_name", "is_escalated", "created_at")
    list_filter = ("status", "severity", "is_escalated", "is_deleted")
    search_fields = ("owner_name", "symptoms")
    # Status and severity change only through the lifecycle services.
    readonly_fields = ("status", "severity", "assigned_responder",
                       "prior_assignee", "resolved_at")
    inlines = [CaseStatusLogInline]


@admin.register(CaseStatusLog)
class CaseStatusLogAdmin(admin.ModelAdmin):
    list_display = ("case", "from_status", "to_status", "changed_by", "created_at")
    list_filter = ("to_status",)
