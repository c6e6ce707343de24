from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User
from apps.students.models import StudentProfile
from apps.teachers.models import TeacherProfile


class StudentProfileInline(admin.StackedInline):
    model = StudentProfile
    can_delete = False
    verbose_name_plural = 'Student Profile'
    fk_name = 'user'


class TeacherProfileInline(admin.StackedInline):
    model = TeacherProfile
    can_delete = False
    verbose_name_plural = 'Teacher Profile'
    fk_name = 'user'


class UserAdmin(BaseUserAdmin):
    fieldsets = BaseUserAdmin.fieldsets + (('School', {'fields': ('role', 'profile_image')}),)
    add_fieldsets = BaseUserAdmin.add_fieldsets + (('School', {'fields': ('role',)}),)
    list_display = BaseUserAdmin.list_display + ('role',)
    list_filter = BaseUserAdmin.list_filter + ('role',)

    def get_inline_instances(self, request, obj=None):
        inlines = []
        if obj:
            if obj.role == User.STUDENT:
                inlines = [StudentProfileInline(self.model, self.admin_site)]
            elif obj.role == User.TEACHER:
                inlines = [TeacherProfileInline(self.model, self.admin_site)]
        return inlines


admin.site.register(User, UserAdmin)
