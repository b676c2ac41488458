from django.contrib import admin
from .models import Member


@admin.register(Member)
class MemberAdmin(admin.ModelAdmin):
    list_display = ('name', 'role', 'title', 'office_location', 'user')
    list_filter = ('role',)
    search_fields = ('name', 'title')
