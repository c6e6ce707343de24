from django.contrib import admin
from .models import Notice
from .visibility import classify


@admin.register(Notice)
class NoticeAdmin(admin.ModelAdmin):
    list_display = ['title', 'author', 'type', 'target', 'category', 'date']
    list_filter = ['type', 'date']
    search_fields = ['title', 'content', 'target', 'author__username']
    date_hierarchy = 'date'

    def category(self, obj):
        return classify(obj).category
    category.short_description = "Category"

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('author')
