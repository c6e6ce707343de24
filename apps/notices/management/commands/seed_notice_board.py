from datetime import timedelta

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from apps.notices.models import Notice
from apps.notices.targeting import ALL, STAFF, STUDENT, TEACHER, make_section_target
from apps.students.models import Section, StudentProfile, Subject
from apps.teachers.models import TeacherProfile, TimetableEntry
from apps.users.models import User

DEFAULT_PASSWORD = 'school123'

DEMO_USERS = [
    # username, first name, last name, role
    ('admin', 'School', 'Admin', User.ADMIN),
    ('rahman', 'Abdur', 'Rahman', User.TEACHER),
    ('nasrin', 'Nasrin', 'Akter', User.TEACHER),
    ('accounts', 'Karim', 'Hossain', User.ACCOUNTANT),
    ('library', 'Salma', 'Begum', User.LIBRARIAN),
    ('tanvir', 'Tanvir', 'Ahmed', User.STUDENT),
    ('mitu', 'Mitu', 'Das', User.STUDENT),
    ('rafi', 'Rafi', 'Islam', User.STUDENT),
]

DEMO_SECTIONS = [
    # name, subject code, subject name, class teacher username
    ('6A', 'MATH', 'Mathematics', 'rahman'),
    ('6B', 'ENG', 'English', 'nasrin'),
    ('7A', 'SCI', 'Science', None),
]

DEMO_TIMETABLE = [
    # teacher username, section name, day, period
    ('rahman', '7A', 'mon', 1),
    ('rahman', '6A', 'tue', 2),
    ('nasrin', '6A', 'wed', 3),
]

DEMO_ENROLMENT = {
    'tanvir': ('6A', '01'),
    'mitu': ('6A', '02'),
    'rafi': ('7A', '01'),
}


class Command(BaseCommand):
    help = 'Create a demo school with users, sections, a timetable and notices'

    def add_arguments(self, parser):
        parser.add_argument('--password', default=DEFAULT_PASSWORD, help='Password for every demo user')
        parser.add_argument('--reset', action='store_true', help='Delete existing notices first')

    @transaction.atomic
    def handle(self, *args, **options):
        if options['reset']:
            deleted, _ = Notice.objects.all().delete()
            self.stdout.write(f"Cleared {deleted} notices")

        users = {}
        for username, first_name, last_name, role in DEMO_USERS:
            user, is_new = User.objects.get_or_create(
                username=username,
                defaults={'first_name': first_name, 'last_name': last_name, 'role': role},
            )
            if is_new:
                user.set_password(options['password'])
                user.save()
            users[username] = user

        teachers = {}
        for username, user in users.items():
            if user.role == User.TEACHER:
                teachers[username], _ = TeacherProfile.objects.get_or_create(user=user)

        sections = {}
        for name, code, subject_name, class_teacher in DEMO_SECTIONS:
            subject, _ = Subject.objects.get_or_create(code=code, defaults={'name': subject_name})
            sections[name], _ = Section.objects.get_or_create(
                name=name,
                defaults={'subject': subject, 'class_teacher': teachers.get(class_teacher)},
            )

        for username, section_name, day, period in DEMO_TIMETABLE:
            TimetableEntry.objects.get_or_create(
                teacher=teachers[username], section=sections[section_name], day=day, period=period,
            )

        for username, (section_name, roll_number) in DEMO_ENROLMENT.items():
            StudentProfile.objects.get_or_create(
                user=users[username],
                defaults={'section': sections[section_name], 'roll_number': roll_number},
            )

        if Notice.objects.exists():
            self.stdout.write(self.style.WARNING('Notices already present, skipping demo notices'))
        else:
            self._create_notices(users, sections)

        self.stdout.write(self.style.SUCCESS(
            f"Demo school ready: {len(users)} users, {len(sections)} sections"
        ))

    def _create_notices(self, users, sections):
        now = timezone.now()
        notices = [
            ('School reopens Sunday', 'Classes resume after the winter break.', users['admin'], Notice.NOTICE, ALL),
            ('Staff meeting', 'All staff meet in the hall at 2 PM.', users['admin'], Notice.NOTICE, STAFF),
            ('Lesson plans due', 'Submit next month\'s lesson plans.', users['admin'], Notice.NOTICE, TEACHER),
            ('Sports day', 'Wear your house colours on Thursday.', users['admin'], Notice.NOTICE, STUDENT),
            ('Maths quiz', 'Chapter 4 quiz on Monday.', users['rahman'], Notice.NOTICE,
             make_section_target(sections['6A'].id)),
            ('Fee reminder', 'Please clear the pending library fine.', users['admin'], Notice.PRIVATE_MESSAGE,
             str(users['tanvir'].id)),
        ]
        for offset, (title, content, author, notice_type, target) in enumerate(notices):
            Notice.objects.create(
                title=title,
                content=content,
                author=author,
                type=notice_type,
                target=target,
                date=now - timedelta(hours=offset),
            )
        self.stdout.write(f"Created {len(notices)} notices")
