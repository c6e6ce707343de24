from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    ADMIN = 'Admin'
    TEACHER = 'Teacher'
    STUDENT = 'Student'
    ACCOUNTANT = 'Accountant'
    LIBRARIAN = 'Librarian'

    ROLE_CHOICES = [
        (ADMIN, 'Admin'),
        (TEACHER, 'Teacher'),
        (STUDENT, 'Student'),
        (ACCOUNTANT, 'Accountant'),
        (LIBRARIAN, 'Librarian'),
    ]

    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=STUDENT)
    profile_image = models.URLField(blank=True, default='')

    @property
    def name(self):
        return self.get_full_name() or self.username

    def __str__(self):
        return f"{self.name} ({self.role})"
