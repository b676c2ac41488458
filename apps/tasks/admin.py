from django.contrib import admin
from .models import Task


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    list_display = ('title', 'type', 'status', 'severity', 'project', 'assignee', 'deadline', 'completed_at')
    list_filter = ('type', 'status', 'severity', 'priority')
    search_fields = ('title', 'code')
    raw_id_fields = ('project', 'assignee')
