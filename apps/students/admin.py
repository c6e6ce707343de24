from django.contrib import admin
from django.urls import reverse
from django.utils.html import format_html
from .models import StudentProfile, Section, Subject


class StudentProfileInline(admin.TabularInline):
    model = StudentProfile
    extra = 0
    readonly_fields = ('user', 'roll_number')
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Section)
class SectionAdmin(admin.ModelAdmin):
    list_display = ('name', 'subject', 'class_teacher', 'student_count', 'view_students_link')
    list_filter = ('subject',)
    inlines = [StudentProfileInline]

    def student_count(self, obj):
        return obj.studentprofile_set.count()
    student_count.short_description = 'Number of Students'

    def view_students_link(self, obj):
        count = obj.studentprofile_set.count()
        if count > 0:
            url = reverse("admin:students_studentprofile_changelist") + f"?section__id={obj.id}"
            return format_html('<a href="{}">View {} Students</a>', url, count)
        return "No students"
    view_students_link.short_description = 'Students'


@admin.register(StudentProfile)
class StudentProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'section', 'roll_number')
    search_fields = ('user__first_name', 'user__last_name', 'roll_number')
    list_filter = ('section',)


@admin.register(Subject)
class SubjectAdmin(admin.ModelAdmin):
    list_display = ('name', 'code')
    search_fields = ('name', 'code')
