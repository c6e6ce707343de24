from django.db import models
from django.conf import settings
from django.utils import timezone


class Notice(models.Model):
    NOTICE = 'notice'
    PRIVATE_MESSAGE = 'private_message'

    TYPE_CHOICES = [
        (NOTICE, 'Notice'),
        (PRIVATE_MESSAGE, 'Private message'),
    ]

    title = models.CharField(max_length=200)
    content = models.TextField()
    date = models.DateTimeField(default=timezone.now)
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='notices'
    )
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=NOTICE)
    # "All", a role name, "section_<id>" or a recipient user id
    target = models.CharField(max_length=64)

    class Meta:
        ordering = ['-date']
        indexes = [
            models.Index(fields=['target'], name='notice_target_idx'),
        ]

    def __str__(self):
        return self.title
