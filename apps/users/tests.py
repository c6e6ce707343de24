from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient
from apps.students.models import Section, StudentProfile
from apps.teachers.models import TeacherProfile
from .models import User


class AuthAPITestCase(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.student = User.objects.create_user(
            username='tanvir', password='secret-pass', role=User.STUDENT,
            first_name='Tanvir', last_name='Ahmed',
        )
        self.section = Section.objects.create(name='6A')
        StudentProfile.objects.create(user=self.student, section=self.section, roll_number='01')

    def test_login_any_role(self):
        """Students can sign in and receive a token pair"""
        response = self.client.post(reverse('users:login'),
                                    {'username': 'tanvir', 'password': 'secret-pass'}, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertIn('access_token', response.data)
        self.assertEqual(response.data['user']['role'], User.STUDENT)
        self.assertEqual(response.data['user']['section_id'], self.section.id)

    def test_login_requires_credentials(self):
        response = self.client.post(reverse('users:login'), {'username': 'tanvir'}, format='json')
        self.assertEqual(response.status_code, 400)

    def test_login_wrong_password(self):
        response = self.client.post(reverse('users:login'),
                                    {'username': 'tanvir', 'password': 'nope'}, format='json')
        self.assertEqual(response.status_code, 401)

    def test_profile_with_token(self):
        login = self.client.post(reverse('users:login'),
                                 {'username': 'tanvir', 'password': 'secret-pass'}, format='json')
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {login.data['access_token']}")
        response = self.client.get(reverse('users:profile'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['user']['full_name'], 'Tanvir Ahmed')
        self.assertIsNone(response.data['user']['teacher_id'])

    def test_teacher_profile_id(self):
        teacher = User.objects.create_user(username='rahman', password='secret-pass', role=User.TEACHER)
        profile = TeacherProfile.objects.create(user=teacher)
        self.client.force_authenticate(user=teacher)
        response = self.client.get(reverse('users:profile'))
        self.assertEqual(response.data['user']['teacher_id'], profile.id)
        self.assertIsNone(response.data['user']['section_id'])

    def test_logout_blacklists_refresh_token(self):
        login = self.client.post(reverse('users:login'),
                                 {'username': 'tanvir', 'password': 'secret-pass'}, format='json')
        self.client.force_authenticate(user=self.student)
        response = self.client.post(reverse('users:logout'),
                                    {'refresh_token': login.data['refresh_token']}, format='json')
        self.assertEqual(response.status_code, 200)

        again = self.client.post(reverse('users:logout'),
                                 {'refresh_token': login.data['refresh_token']}, format='json')
        self.assertEqual(again.status_code, 400)
