from django.contrib import admin
from .models import Project


class SubProjectInline(admin.TabularInline):
    model = Project
    fk_name = 'parent_project'
    extra = 0
    fields = ('name', 'status', 'weight', 'allocated_hours', 'used_hours')


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ('code', 'name', 'status', 'parent_project', 'lead', 'allocated_hours', 'used_hours', 'milestone_date')
    list_filter = ('status', 'risk_level')
    search_fields = ('name', 'code')
    inlines = [SubProjectInline]
