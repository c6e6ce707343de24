from django.urls import path
from .views import notice_board, owned_sections, section_notices, delete_notice

app_name = 'notices'
urlpatterns = [
    path('', notice_board, name='board'),
    path('sections/', owned_sections, name='sections'),
    path('sections/<int:section_id>/', section_notices, name='section_notices'),
    path('<int:notice_id>/', delete_notice, name='delete_notice'),
]
