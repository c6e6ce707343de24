from rest_framework import serializers
from .models import User


class UserSerializer(serializers.ModelSerializer):
    """
    Serializer for the signed-in user, including the school identity
    the notice board needs (teacher profile or student section).
    """
    full_name = serializers.CharField(source='name', read_only=True)
    teacher_id = serializers.SerializerMethodField()
    section_id = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'first_name', 'last_name', 'full_name',
                  'role', 'profile_image', 'teacher_id', 'section_id']

    def get_teacher_id(self, obj):
        profile = getattr(obj, 'teacherprofile', None)
        return profile.id if profile else None

    def get_section_id(self, obj):
        profile = getattr(obj, 'studentprofile', None)
        return profile.section_id if profile else None
