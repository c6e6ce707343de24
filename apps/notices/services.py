from dataclasses import dataclass, field
from django.db import DatabaseError, transaction
from apps.users.models import User
from apps.students.models import Section, StudentProfile
from apps.teachers.models import TimetableEntry
from .models import Notice
from .presenters import build_notice_card
from .visibility import (
    resolve_owned_sections,
    resolve_section_notices,
    resolve_visible_notices,
)
import logging

logger = logging.getLogger(__name__)


@dataclass
class BoardSnapshot:
    """Everything the notice board reads, fetched together for one request"""
    notices: list = field(default_factory=list)
    users: list = field(default_factory=list)
    sections: list = field(default_factory=list)
    students: list = field(default_factory=list)
    timetable: list = field(default_factory=list)

    def users_by_id(self, viewer=None):
        users = {str(user.id): user for user in self.users}
        if viewer is not None:
            users[str(viewer.id)] = viewer
        return users

    def sections_by_id(self):
        return {str(section.id): section for section in self.sections}

    def student_count(self, section_id):
        return sum(1 for student in self.students if student.section_id == section_id)


def load_board_snapshot():
    """
    Load all collections the board needs before anything is built.
    Errors from the database propagate to the caller.
    """
    return BoardSnapshot(
        notices=list(Notice.objects.all()),
        users=list(User.objects.all()),
        sections=list(Section.objects.select_related('subject')),
        students=list(StudentProfile.objects.all()),
        timetable=list(TimetableEntry.objects.all()),
    )


class NoticeBoardService:
    """Notice board reads and writes for one viewer"""

    @staticmethod
    def can_delete(viewer, notice):
        return viewer.role == User.ADMIN or (
            notice.author_id is not None and notice.author_id == viewer.id
        )

    @staticmethod
    def cards(notices, viewer, snapshot):
        users_by_id = snapshot.users_by_id(viewer)
        sections_by_id = snapshot.sections_by_id()
        return [
            build_notice_card(notice, users_by_id, sections_by_id, NoticeBoardService.can_delete(viewer, notice))
            for notice in notices
        ]

    @staticmethod
    def generic_board(viewer, snapshot):
        notices = resolve_visible_notices(snapshot.notices, viewer)
        return NoticeBoardService.cards(notices, viewer, snapshot)

    @staticmethod
    def section_board(viewer, snapshot, section_id):
        notices = resolve_section_notices(snapshot.notices, section_id)
        return NoticeBoardService.cards(notices, viewer, snapshot)

    @staticmethod
    def owned_sections(viewer, snapshot):
        """Owned sections in section order, with subject and head count"""
        owned_ids = resolve_owned_sections(viewer, snapshot.sections, snapshot.timetable)
        return [
            {
                'id': section.id,
                'name': section.name,
                'subject_name': section.subject.name if section.subject else '',
                'student_count': snapshot.student_count(section.id),
            }
            for section in snapshot.sections
            if section.id in owned_ids
        ]

    @staticmethod
    def owns_section(viewer, snapshot, section_id):
        return section_id in resolve_owned_sections(viewer, snapshot.sections, snapshot.timetable)

    @staticmethod
    def create(draft):
        """Save a notice draft. Returns the notice, or None if the write failed."""
        try:
            with transaction.atomic():
                draft.save()
        except DatabaseError as e:
            logger.warning(f"Could not save notice '{draft.title}': {e}")
            return None
        logger.info(f"Notice {draft.id} posted by user {draft.author_id} to '{draft.target}'")
        return draft

    @staticmethod
    def remove(notice):
        """Delete a notice. Returns True when it was removed."""
        notice_id = notice.id
        try:
            with transaction.atomic():
                deleted, _ = notice.delete()
        except DatabaseError as e:
            logger.warning(f"Could not delete notice {notice_id}: {e}")
            return False
        if deleted:
            logger.info(f"Notice {notice_id} deleted")
        return bool(deleted)
