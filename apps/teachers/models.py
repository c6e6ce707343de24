from django.db import models
from apps.users.models import User


class TeacherProfile(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE)
    subjects = models.CharField(max_length=100, blank=True)  # E.g. "Math,Science"

    def __str__(self):
        return self.user.name


class TimetableEntry(models.Model):
    """A weekly period a teacher takes with a section"""
    DAY_CHOICES = [
        ('mon', 'Monday'),
        ('tue', 'Tuesday'),
        ('wed', 'Wednesday'),
        ('thu', 'Thursday'),
        ('fri', 'Friday'),
        ('sat', 'Saturday'),
    ]

    teacher = models.ForeignKey(TeacherProfile, on_delete=models.CASCADE, related_name='timetable_entries')
    section = models.ForeignKey('students.Section', on_delete=models.CASCADE, related_name='timetable_entries')
    day = models.CharField(max_length=3, choices=DAY_CHOICES, default='mon')
    period = models.PositiveSmallIntegerField(default=1)

    class Meta:
        ordering = ['day', 'period']
        verbose_name_plural = 'timetable entries'

    def __str__(self):
        return f"{self.teacher} - {self.section} ({self.get_day_display()} P{self.period})"
