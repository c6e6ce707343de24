"""
Who sees which notice.

Every function here works on plain records: Django model instances or any
object exposing the same attribute names (``author_id``, ``type``, ``target``,
``date`` for notices; ``id`` and ``class_teacher_id`` for sections;
``teacher_id`` and ``section_id`` for timetable entries). The viewer is always
passed in explicitly.
"""
from dataclasses import dataclass
from typing import Optional, Union

from apps.users.models import User
from .models import Notice
from .targeting import ALL, STAFF, TEACHER, STUDENT, make_section_target, parse_section_target

GENERIC_AUDIENCES = {
    User.ADMIN: (ALL, STAFF, TEACHER, STUDENT),
    User.TEACHER: (ALL, STAFF, TEACHER),
    User.ACCOUNTANT: (ALL, STAFF),
    User.LIBRARIAN: (ALL, STAFF),
}

PRIVATE = 'private'
SECTION = 'section'
BROADCAST = 'broadcast'


@dataclass(frozen=True)
class Viewer:
    id: Union[int, str]
    role: str
    teacher_id: Optional[Union[int, str]] = None
    section_id: Optional[Union[int, str]] = None
    name: str = ''
    profile_image: str = ''

    @classmethod
    def from_user(cls, user):
        teacher_id = section_id = None
        if user.role == User.TEACHER:
            profile = getattr(user, 'teacherprofile', None)
            teacher_id = profile.id if profile else None
        elif user.role == User.STUDENT:
            profile = getattr(user, 'studentprofile', None)
            section_id = profile.section_id if profile else None
        return cls(
            id=user.id,
            role=user.role,
            teacher_id=teacher_id,
            section_id=section_id,
            name=user.name,
            profile_image=user.profile_image,
        )


@dataclass(frozen=True)
class Classification:
    category: str
    # recipient id, section id or broadcast target depending on category
    value: Optional[str] = None


def by_date_desc(notices):
    return sorted(notices, key=lambda notice: notice.date, reverse=True)


def uses_section_board(viewer) -> bool:
    return viewer.role == User.TEACHER


def audiences_for(viewer):
    if viewer.role == User.STUDENT:
        if viewer.section_id is None:
            return (ALL, STUDENT)
        return (ALL, STUDENT, make_section_target(viewer.section_id))
    return GENERIC_AUDIENCES.get(viewer.role, ())


def is_visible(notice, viewer) -> bool:
    if notice.author_id is not None and notice.author_id == viewer.id:
        return True
    if notice.type == Notice.PRIVATE_MESSAGE and notice.target == str(viewer.id):
        return True
    if notice.type == Notice.NOTICE:
        return notice.target in audiences_for(viewer)
    return False


def resolve_visible_notices(notices, viewer):
    return by_date_desc(n for n in notices if is_visible(n, viewer))


def resolve_section_notices(notices, section_id):
    # Whether the caller may open this section is decided before we get here.
    target = make_section_target(section_id)
    return by_date_desc(n for n in notices if n.target == target)


def resolve_owned_sections(viewer, sections, timetable_entries) -> set:
    """
    Sections a teacher is class teacher of, plus the ones they are
    timetabled in. Empty for every other role.
    """
    if viewer.role != User.TEACHER or viewer.teacher_id is None:
        return set()

    owned = {
        section.id for section in sections
        if section.class_teacher_id is not None and section.class_teacher_id == viewer.teacher_id
    }
    owned.update(
        entry.section_id for entry in timetable_entries
        if entry.teacher_id == viewer.teacher_id and entry.section_id is not None
    )
    return owned


def classify(notice) -> Classification:
    if notice.type == Notice.PRIVATE_MESSAGE:
        return Classification(PRIVATE, notice.target)
    section_id = parse_section_target(notice.target)
    if section_id is not None:
        return Classification(SECTION, section_id)
    return Classification(BROADCAST, notice.target)
