from datetime import datetime, timedelta, timezone as dt_timezone
from types import SimpleNamespace
from unittest.mock import patch

from django.db import DatabaseError
from django.test import SimpleTestCase, TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient

from apps.students.models import Section, StudentProfile, Subject
from apps.teachers.models import TeacherProfile, TimetableEntry
from apps.users.models import User
from .models import Notice
from .presenters import format_notice_date, initials_avatar, time_ago
from .services import BoardSnapshot, NoticeBoardService, load_board_snapshot
from .targeting import (
    Broadcast, DirectMessage, SectionScoped, Unrecognized,
    build_notice_draft, decode_target, encode_target,
    make_section_target, parse_section_target,
)
from .visibility import (
    BROADCAST, PRIVATE, SECTION, Viewer,
    classify, is_visible, resolve_owned_sections,
    resolve_section_notices, resolve_visible_notices, uses_section_board,
)

BASE = datetime(2025, 3, 5, 9, 30, tzinfo=dt_timezone.utc)


def notice(target, notice_type=Notice.NOTICE, author_id='admin1', hours=0, pk=None):
    return SimpleNamespace(id=pk, author_id=author_id, type=notice_type, target=target,
                           date=BASE + timedelta(hours=hours))


class TargetingTestCase(SimpleTestCase):
    def test_section_target_round_trip(self):
        """Section targets use the section_ prefix and parse back to the id"""
        self.assertEqual(make_section_target('s1'), 'section_s1')
        self.assertEqual(parse_section_target('section_s1'), 's1')
        self.assertEqual(parse_section_target(make_section_target(42)), '42')

    def test_parse_rejects_other_shapes(self):
        self.assertIsNone(parse_section_target('All'))
        self.assertIsNone(parse_section_target('Section_s1'))
        self.assertIsNone(parse_section_target(None))

    def test_decode_each_shape(self):
        self.assertEqual(decode_target('All'), Broadcast('All'))
        self.assertEqual(decode_target('Staff'), Broadcast('Staff'))
        self.assertEqual(decode_target('section_7'), SectionScoped('7'))
        self.assertEqual(decode_target('15', Notice.PRIVATE_MESSAGE), DirectMessage('15'))

    def test_decode_unrecognized_does_not_raise(self):
        """A user id on a plain notice or garbage is unrecognized, not an error"""
        self.assertEqual(decode_target('15'), Unrecognized('15'))
        self.assertEqual(decode_target('section_'), Unrecognized('section_'))
        self.assertEqual(decode_target(None), Unrecognized(''))

    def test_encode_keeps_wire_strings(self):
        for raw, notice_type in [('All', Notice.NOTICE), ('Teacher', Notice.NOTICE),
                                 ('section_3', Notice.NOTICE), ('9', Notice.PRIVATE_MESSAGE)]:
            self.assertEqual(encode_target(decode_target(raw, notice_type)), raw)

    def test_encode_rejects_non_targets(self):
        with self.assertRaises(TypeError):
            encode_target('All')


class VisibilityTestCase(SimpleTestCase):
    def setUp(self):
        self.admin = Viewer(id='admin1', role=User.ADMIN)
        self.teacher = Viewer(id='u2', role=User.TEACHER, teacher_id='t1')
        self.student = Viewer(id='u9', role=User.STUDENT, section_id='s1')
        self.accountant = Viewer(id='u5', role=User.ACCOUNTANT)
        self.librarian = Viewer(id='u6', role=User.LIBRARIAN)

    def test_author_always_sees_own_notice(self):
        for target, notice_type in [('section_s4', Notice.NOTICE), ('u77', Notice.PRIVATE_MESSAGE), ('junk', 'other')]:
            self.assertTrue(is_visible(notice(target, notice_type, author_id='u6'), self.librarian))

    def test_private_message_only_for_recipient_and_author(self):
        message = notice('u9', Notice.PRIVATE_MESSAGE, author_id='admin1')
        self.assertTrue(is_visible(message, self.student))
        self.assertTrue(is_visible(message, self.admin))
        self.assertFalse(is_visible(message, self.teacher))
        self.assertFalse(is_visible(message, self.accountant))

    def test_private_message_matches_integer_ids(self):
        viewer = Viewer(id=15, role=User.STUDENT)
        self.assertTrue(is_visible(notice('15', Notice.PRIVATE_MESSAGE, author_id=1), viewer))

    def test_student_audiences(self):
        """Students see All, Student and their own section only"""
        visible = {'All', 'Student', 'section_s1'}
        for target in ['All', 'Student', 'Staff', 'Teacher', 'section_s1', 'section_s2', 'u9']:
            self.assertEqual(is_visible(notice(target), self.student), target in visible, target)

    def test_student_without_section(self):
        viewer = Viewer(id='u10', role=User.STUDENT)
        self.assertTrue(is_visible(notice('Student'), viewer))
        self.assertFalse(is_visible(notice('section_None'), viewer))

    def test_admin_generic_list_excludes_section_notices(self):
        for target in ['All', 'Staff', 'Teacher', 'Student']:
            self.assertTrue(is_visible(notice(target, author_id='u2'), self.admin))
        self.assertFalse(is_visible(notice('section_s1', author_id='u2'), self.admin))

    def test_teacher_generic_audiences(self):
        self.assertTrue(is_visible(notice('Staff'), self.teacher))
        self.assertTrue(is_visible(notice('Teacher'), self.teacher))
        self.assertFalse(is_visible(notice('Student'), self.teacher))

    def test_accountant_and_librarian_see_staff_notices(self):
        for viewer in (self.accountant, self.librarian):
            self.assertTrue(is_visible(notice('All'), viewer))
            self.assertTrue(is_visible(notice('Staff'), viewer))
            self.assertFalse(is_visible(notice('Teacher'), viewer))
            self.assertFalse(is_visible(notice('Student'), viewer))

    def test_unknown_type_is_hidden(self):
        self.assertFalse(is_visible(notice('All', notice_type='poll', author_id='u2'), self.admin))

    def test_scenario_admin_notice_for_students(self):
        self.assertTrue(is_visible(notice('Student', author_id='admin1'), self.student))

    def test_resolved_list_sorted_newest_first_and_stable(self):
        first = notice('All', hours=1, pk=1)
        tie = notice('Student', hours=1, pk=2)
        older = notice('All', hours=-5, pk=3)
        newest = notice('All', hours=3, pk=4)
        hidden = notice('Teacher', hours=10, pk=5)

        result = resolve_visible_notices([older, first, hidden, tie, newest], self.student)

        self.assertEqual([n.id for n in result], [4, 1, 2, 3])

    def test_section_notices_ignore_role(self):
        notices = [notice('section_s1', hours=0, pk=1), notice('section_s2', pk=2),
                   notice('section_s1', hours=2, pk=3), notice('All', pk=4)]
        result = resolve_section_notices(notices, 's1')
        self.assertEqual([n.id for n in result], [3, 1])

    def test_owned_sections_union_without_duplicates(self):
        sections = [SimpleNamespace(id='s1', class_teacher_id='t1'),
                    SimpleNamespace(id='s2', class_teacher_id=None),
                    SimpleNamespace(id='s3', class_teacher_id='t9')]
        timetable = [SimpleNamespace(teacher_id='t1', section_id='s2'),
                     SimpleNamespace(teacher_id='t1', section_id='s1'),
                     SimpleNamespace(teacher_id='t1', section_id=None),
                     SimpleNamespace(teacher_id='t9', section_id='s3')]

        self.assertEqual(resolve_owned_sections(self.teacher, sections, timetable), {'s1', 's2'})

    def test_owned_sections_empty_for_other_roles(self):
        sections = [SimpleNamespace(id='s1', class_teacher_id='t1')]
        self.assertEqual(resolve_owned_sections(self.admin, sections, []), set())
        self.assertEqual(resolve_owned_sections(Viewer(id='u3', role=User.TEACHER), sections, []), set())

    def test_classify(self):
        self.assertEqual(classify(notice('u9', Notice.PRIVATE_MESSAGE)).category, PRIVATE)
        self.assertEqual(classify(notice('section_s1')).value, 's1')
        self.assertEqual(classify(notice('section_s1')).category, SECTION)
        self.assertEqual(classify(notice('Staff')).category, BROADCAST)
        self.assertEqual(classify(notice('whatever')).value, 'whatever')

    def test_only_teachers_get_section_board(self):
        self.assertTrue(uses_section_board(self.teacher))
        self.assertFalse(uses_section_board(self.admin))
        self.assertFalse(uses_section_board(self.student))


class PresenterTestCase(SimpleTestCase):
    def test_time_ago(self):
        now = BASE
        self.assertEqual(time_ago(now - timedelta(seconds=20), now), 'just now')
        self.assertTrue(time_ago(now - timedelta(hours=3, minutes=5), now).endswith(' ago'))
        self.assertIn('3', time_ago(now - timedelta(hours=3, minutes=5), now))

    def test_format_notice_date(self):
        with timezone.override('UTC'):
            self.assertEqual(format_notice_date(BASE), 'Mar 5, 2025, 9:30 AM')

    def test_initials_avatar(self):
        avatar = initials_avatar('Nasrin Akter')
        self.assertTrue(avatar.startswith('data:image/svg+xml'))
        self.assertIn('NA', avatar)
        self.assertTrue(initials_avatar('').startswith('data:image/svg+xml'))


class NoticeBoardFixtureMixin:
    def create_school(self):
        self.admin = User.objects.create_user(username='admin', password='pass', role=User.ADMIN,
                                              first_name='Head', last_name='Master')
        self.teacher_user = User.objects.create_user(username='rahman', password='pass', role=User.TEACHER,
                                                     first_name='Abdur', last_name='Rahman')
        self.other_teacher_user = User.objects.create_user(username='nasrin', password='pass', role=User.TEACHER)
        self.student = User.objects.create_user(username='tanvir', password='pass', role=User.STUDENT,
                                                first_name='Tanvir', last_name='Ahmed')
        self.accountant = User.objects.create_user(username='karim', password='pass', role=User.ACCOUNTANT)

        self.teacher = TeacherProfile.objects.create(user=self.teacher_user, subjects='Math')
        self.other_teacher = TeacherProfile.objects.create(user=self.other_teacher_user)

        math = Subject.objects.create(name='Mathematics', code='MATH')
        self.s1 = Section.objects.create(name='6A', subject=math, class_teacher=self.teacher)
        self.s2 = Section.objects.create(name='6B', subject=math)
        self.s3 = Section.objects.create(name='7A', subject=math, class_teacher=self.other_teacher)
        TimetableEntry.objects.create(teacher=self.teacher, section=self.s2, day='mon', period=1)
        TimetableEntry.objects.create(teacher=self.teacher, section=self.s1, day='tue', period=2)

        StudentProfile.objects.create(user=self.student, section=self.s1, roll_number='01')

    def post(self, author, target, title='Notice', notice_type=Notice.NOTICE, hours=0):
        return Notice.objects.create(title=title, content='Body', author=author, type=notice_type,
                                     target=target, date=timezone.now() - timedelta(hours=hours))


class NoticeBoardServiceTestCase(NoticeBoardFixtureMixin, TestCase):
    def setUp(self):
        self.create_school()

    def test_viewer_from_user(self):
        teacher = Viewer.from_user(self.teacher_user)
        student = Viewer.from_user(self.student)
        self.assertEqual(teacher.teacher_id, self.teacher.id)
        self.assertIsNone(teacher.section_id)
        self.assertEqual(student.section_id, self.s1.id)
        self.assertEqual(student.name, 'Tanvir Ahmed')

    def test_viewer_from_user_without_profile(self):
        viewer = Viewer.from_user(User.objects.create_user(username='new', password='pass', role=User.TEACHER))
        self.assertIsNone(viewer.teacher_id)

    def test_build_notice_draft(self):
        draft = build_notice_draft({'title': 'Quiz', 'content': 'Monday'}, self.teacher_user,
                                   SectionScoped(str(self.s1.id)))
        self.assertIsNone(draft.pk)
        self.assertEqual(draft.target, f'section_{self.s1.id}')
        self.assertEqual(draft.type, Notice.NOTICE)
        self.assertEqual(draft.author, self.teacher_user)
        self.assertLessEqual(draft.date, timezone.now())

    def test_owned_sections_with_counts(self):
        sections = NoticeBoardService.owned_sections(Viewer.from_user(self.teacher_user), load_board_snapshot())
        self.assertEqual([s['name'] for s in sections], ['6A', '6B'])
        self.assertEqual(sections[0]['student_count'], 1)
        self.assertEqual(sections[0]['subject_name'], 'Mathematics')

    def test_cards_use_placeholders_for_missing_references(self):
        orphan = self.post(None, 'section_999')
        private = self.post(self.admin, '424242', notice_type=Notice.PRIVATE_MESSAGE)
        staff = self.post(self.admin, 'Staff')
        viewer = Viewer.from_user(self.admin)
        snapshot = BoardSnapshot(notices=[orphan, private, staff], users=[self.admin], sections=[self.s1])

        cards = {card['id']: card for card in NoticeBoardService.cards(snapshot.notices, viewer, snapshot)}

        self.assertEqual(cards[orphan.id]['author']['name'], 'School Admin')
        self.assertEqual(cards[orphan.id]['author']['role'], 'Staff')
        self.assertEqual(cards[orphan.id]['ribbon'], 'For Section N/A')
        self.assertEqual(cards[private.id]['ribbon'], 'Private to user')
        self.assertEqual(cards[private.id]['style'], 'private')
        self.assertEqual(cards[staff.id]['ribbon'], 'Notice')
        self.assertEqual(cards[staff.id]['style'], 'generic')
        self.assertTrue(all(card['can_delete'] for card in cards.values()))

    def test_remove(self):
        item = self.post(self.admin, 'All')
        self.assertTrue(NoticeBoardService.remove(item))
        self.assertFalse(Notice.objects.filter(title='Notice').exists())

    def test_create_returns_none_when_save_fails(self):
        draft = build_notice_draft({'title': 'Quiz', 'content': 'Monday'}, self.admin, 'All')
        with patch.object(Notice, 'save', side_effect=DatabaseError('disk full')):
            self.assertIsNone(NoticeBoardService.create(draft))
        self.assertFalse(Notice.objects.exists())

    def test_remove_returns_false_when_delete_fails(self):
        item = self.post(self.admin, 'All')
        with patch.object(Notice, 'delete', side_effect=DatabaseError('locked')):
            self.assertFalse(NoticeBoardService.remove(item))
        self.assertTrue(Notice.objects.filter(id=item.id).exists())


class NoticeBoardAPITestCase(NoticeBoardFixtureMixin, TestCase):
    def setUp(self):
        self.create_school()
        self.client = APIClient()

    def login(self, user):
        self.client.force_authenticate(user=user)

    def test_requires_authentication(self):
        response = self.client.get(reverse('notices:board'))
        self.assertEqual(response.status_code, 401)

    def test_teacher_is_routed_to_sections(self):
        self.login(self.teacher_user)
        response = self.client.get(reverse('notices:board'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['mode'], 'sections')
        self.assertEqual([s['id'] for s in response.data['sections']], [self.s1.id, self.s2.id])

    def test_teacher_without_sections(self):
        self.login(self.other_teacher_user)
        TimetableEntry.objects.all().delete()
        self.s3.class_teacher = None
        self.s3.save()
        response = self.client.get(reverse('notices:sections'))
        self.assertEqual(response.data['sections'], [])
        self.assertEqual(response.data['message'], 'You are not assigned to any sections.')

    def test_student_generic_list(self):
        own_section = self.post(self.teacher_user, f'section_{self.s1.id}', title='Quiz', hours=1)
        self.post(self.teacher_user, f'section_{self.s3.id}', title='Other section')
        self.post(self.admin, 'Teacher', title='Teachers only')
        for_students = self.post(self.admin, 'Student', title='Sports day', hours=2)
        public = self.post(self.admin, 'All', title='Holiday', hours=0)

        self.login(self.student)
        response = self.client.get(reverse('notices:board'))

        self.assertEqual(response.data['mode'], 'list')
        self.assertFalse(response.data['can_create'])
        self.assertEqual([card['id'] for card in response.data['notices']],
                         [public.id, own_section.id, for_students.id])
        self.assertEqual(response.data['notices'][1]['ribbon'], 'For Section 6A')
        self.assertEqual(response.data['notices'][0]['author']['name'], 'Head Master')
        self.assertFalse(response.data['notices'][0]['can_delete'])

    def test_empty_generic_list_message(self):
        self.login(self.accountant)
        response = self.client.get(reverse('notices:board'))
        self.assertEqual(response.data['notices'], [])
        self.assertEqual(response.data['message'], 'No relevant notices or messages found.')

    def test_section_notices_for_owned_section(self):
        quiz = self.post(self.admin, f'section_{self.s2.id}', title='Quiz')
        self.post(self.admin, 'All')

        self.login(self.teacher_user)
        response = self.client.get(reverse('notices:section_notices', kwargs={'section_id': self.s2.id}))

        self.assertEqual(response.status_code, 200)
        self.assertEqual([card['id'] for card in response.data['notices']], [quiz.id])
        self.assertEqual(response.data['section']['name'], '6B')

    def test_section_notices_forbidden_for_foreign_section(self):
        self.login(self.teacher_user)
        response = self.client.get(reverse('notices:section_notices', kwargs={'section_id': self.s3.id}))
        self.assertEqual(response.status_code, 403)

    def test_section_notices_forbidden_for_admin(self):
        self.login(self.admin)
        response = self.client.get(reverse('notices:section_notices', kwargs={'section_id': self.s1.id}))
        self.assertEqual(response.status_code, 403)

    def test_section_notices_unknown_section(self):
        self.login(self.teacher_user)
        response = self.client.get(reverse('notices:section_notices', kwargs={'section_id': 9999}))
        self.assertEqual(response.status_code, 404)

    def test_teacher_posts_section_notice(self):
        self.login(self.teacher_user)
        response = self.client.post(
            reverse('notices:section_notices', kwargs={'section_id': self.s1.id}),
            {'title': 'Quiz', 'content': 'Chapter 4'},
            format='json',
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['message'], 'Notice posted successfully!')
        created = Notice.objects.get(id=response.data['notice_id'])
        self.assertEqual(created.target, f'section_{self.s1.id}')
        self.assertEqual(created.type, Notice.NOTICE)
        self.assertEqual(created.author, self.teacher_user)
        self.assertEqual(response.data['notices'][0]['id'], created.id)

        self.client.force_authenticate(user=self.student)
        board = self.client.get(reverse('notices:board'))
        self.assertIn(created.id, [card['id'] for card in board.data['notices']])

    def test_section_notice_requires_title_and_content(self):
        self.login(self.teacher_user)
        response = self.client.post(
            reverse('notices:section_notices', kwargs={'section_id': self.s1.id}),
            {'title': '', 'content': 'Chapter 4'},
            format='json',
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn('title', response.data['errors'])
        self.assertFalse(Notice.objects.exists())

    def test_admin_composes_broadcast(self):
        self.login(self.admin)
        response = self.client.post(reverse('notices:board'),
                                    {'title': 'Holiday', 'content': 'No school', 'target': 'Student'},
                                    format='json')
        self.assertEqual(response.status_code, 201)
        self.assertTrue(response.data['can_create'])
        self.assertEqual(response.data['notices'][0]['ribbon'], 'For Students')

    def test_admin_sends_private_message(self):
        self.login(self.admin)
        response = self.client.post(reverse('notices:board'), {
            'title': 'Fee reminder', 'content': 'Please pay', 'type': Notice.PRIVATE_MESSAGE,
            'target': str(self.student.id),
        }, format='json')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['notices'][0]['ribbon'], 'Private to Tanvir Ahmed')

        self.login(self.student)
        cards = self.client.get(reverse('notices:board')).data['notices']
        self.assertEqual(cards[0]['category'], 'private')

        self.login(self.accountant)
        self.assertEqual(self.client.get(reverse('notices:board')).data['notices'], [])

    def test_composer_rejects_bad_targets(self):
        self.login(self.admin)
        url = reverse('notices:board')
        section = self.client.post(url, {'title': 'x', 'content': 'y', 'target': f'section_{self.s1.id}'},
                                   format='json')
        missing = self.client.post(url, {'title': 'x', 'content': 'y', 'type': Notice.PRIVATE_MESSAGE,
                                         'target': '999999'}, format='json')
        self.assertEqual(section.status_code, 400)
        self.assertEqual(missing.status_code, 400)
        self.assertFalse(Notice.objects.exists())

    def test_composer_is_admin_only(self):
        self.login(self.student)
        response = self.client.post(reverse('notices:board'),
                                    {'title': 'x', 'content': 'y', 'target': 'All'}, format='json')
        self.assertEqual(response.status_code, 403)

    def test_delete_permissions(self):
        admin_notice = self.post(self.admin, 'All')
        own_notice = self.post(self.teacher_user, f'section_{self.s1.id}')

        self.login(self.student)
        response = self.client.delete(reverse('notices:delete_notice', kwargs={'notice_id': admin_notice.id}))
        self.assertEqual(response.status_code, 403)

        self.login(self.teacher_user)
        response = self.client.delete(reverse('notices:delete_notice', kwargs={'notice_id': own_notice.id}))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['message'], 'Item deleted successfully.')

        self.login(self.admin)
        response = self.client.delete(reverse('notices:delete_notice', kwargs={'notice_id': admin_notice.id}))
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Notice.objects.exists())

    def test_delete_missing_notice(self):
        self.login(self.admin)
        response = self.client.delete(reverse('notices:delete_notice', kwargs={'notice_id': 12345}))
        self.assertEqual(response.status_code, 404)

    def test_private_message_target_is_normalized(self):
        """A zero-padded recipient id is stored as the plain id so the recipient sees it"""
        self.login(self.admin)
        response = self.client.post(reverse('notices:board'), {
            'title': 'Fee reminder', 'content': 'Please pay', 'type': Notice.PRIVATE_MESSAGE,
            'target': f'00{self.student.id}',
        }, format='json')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(Notice.objects.get(id=response.data['notice_id']).target, str(self.student.id))

        self.login(self.student)
        cards = self.client.get(reverse('notices:board')).data['notices']
        self.assertEqual([card['id'] for card in cards], [response.data['notice_id']])

    def test_private_message_rejects_non_decimal_target(self):
        self.login(self.admin)
        response = self.client.post(reverse('notices:board'), {
            'title': 'x', 'content': 'y', 'type': Notice.PRIVATE_MESSAGE, 'target': '²',
        }, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('target', response.data['errors'])
        self.assertFalse(Notice.objects.exists())

    def test_failed_section_post_reports_error(self):
        self.login(self.teacher_user)
        with patch.object(Notice, 'save', side_effect=DatabaseError('disk full')):
            response = self.client.post(
                reverse('notices:section_notices', kwargs={'section_id': self.s1.id}),
                {'title': 'Quiz', 'content': 'Chapter 4'},
                format='json',
            )
        self.assertEqual(response.status_code, 500)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['message'], 'Could not post the notice')
        self.assertNotIn('notices', response.data)
        self.assertFalse(Notice.objects.exists())

    def test_failed_compose_reports_error(self):
        self.login(self.admin)
        with patch.object(Notice, 'save', side_effect=DatabaseError('disk full')):
            response = self.client.post(reverse('notices:board'),
                                        {'title': 'Holiday', 'content': 'No school', 'target': 'All'},
                                        format='json')
        self.assertEqual(response.status_code, 500)
        self.assertFalse(response.data['success'])
        self.assertNotIn('notices', response.data)

    def test_failed_delete_reports_error(self):
        item = self.post(self.admin, 'All')
        self.login(self.admin)
        with patch.object(Notice, 'delete', side_effect=DatabaseError('locked')):
            response = self.client.delete(reverse('notices:delete_notice', kwargs={'notice_id': item.id}))
        self.assertEqual(response.status_code, 500)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['message'], 'Could not delete the notice')
        self.assertNotIn('notices', response.data)
        self.assertTrue(Notice.objects.filter(id=item.id).exists())
