from rest_framework import serializers
from apps.users.models import User
from .models import Notice
from .targeting import BROADCAST_AUDIENCES


class NoticeFormSerializer(serializers.Serializer):
    """Title and content, both required, as entered in the notice form"""
    title = serializers.CharField(max_length=200)
    content = serializers.CharField()


class ComposeNoticeSerializer(NoticeFormSerializer):
    """
    Admin composer: a broadcast notice or a private message to one user.
    """
    type = serializers.ChoiceField(choices=Notice.TYPE_CHOICES, default=Notice.NOTICE)
    target = serializers.CharField(max_length=64)

    def validate(self, data):
        target = data['target']
        if data['type'] == Notice.NOTICE:
            if target not in BROADCAST_AUDIENCES:
                raise serializers.ValidationError({
                    'target': f"Notices can target one of: {', '.join(BROADCAST_AUDIENCES)}"
                })
        else:
            recipient = User.objects.filter(id=int(target)).first() if target.isdecimal() else None
            if recipient is None:
                raise serializers.ValidationError({'target': 'Recipient not found'})
            # stored exactly as the recipient id renders, e.g. "002" -> "2"
            data['target'] = str(recipient.pk)
        return data
