from django.contrib import admin
from .models import TeacherProfile, TimetableEntry


class TimetableEntryInline(admin.TabularInline):
    model = TimetableEntry
    extra = 0


@admin.register(TeacherProfile)
class TeacherProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'subjects')
    search_fields = ('user__first_name', 'user__last_name', 'user__username')
    inlines = [TimetableEntryInline]


@admin.register(TimetableEntry)
class TimetableEntryAdmin(admin.ModelAdmin):
    list_display = ('teacher', 'section', 'day', 'period')
    list_filter = ('day', 'section')
