"""
Audience encoding for the ``Notice.target`` column.

On the wire a target is a plain string: ``"All"``, a role name, ``"section_<id>"``
or a recipient user id. Inside the application it is handled as one of the
variants below and converted back with ``encode_target`` before saving.
"""
from dataclasses import dataclass
from typing import Optional, Union

from django.utils import timezone

from .models import Notice

ALL = 'All'
STAFF = 'Staff'
TEACHER = 'Teacher'
STUDENT = 'Student'

BROADCAST_AUDIENCES = (ALL, STAFF, TEACHER, STUDENT)

SECTION_PREFIX = 'section_'


@dataclass(frozen=True)
class Broadcast:
    audience: str


@dataclass(frozen=True)
class SectionScoped:
    section_id: str


@dataclass(frozen=True)
class DirectMessage:
    user_id: str


@dataclass(frozen=True)
class Unrecognized:
    raw: str


Target = Union[Broadcast, SectionScoped, DirectMessage, Unrecognized]


def make_section_target(section_id) -> str:
    return f"{SECTION_PREFIX}{section_id}"


def parse_section_target(target) -> Optional[str]:
    """Return the section id of a ``section_<id>`` target, else None."""
    if isinstance(target, str) and target.startswith(SECTION_PREFIX):
        return target[len(SECTION_PREFIX):]
    return None


def decode_target(raw, notice_type=Notice.NOTICE) -> Target:
    """Read a stored target string. Never raises on malformed input."""
    raw = raw if isinstance(raw, str) else ''
    if notice_type == Notice.PRIVATE_MESSAGE:
        return DirectMessage(raw) if raw else Unrecognized(raw)
    if raw in BROADCAST_AUDIENCES:
        return Broadcast(raw)
    section_id = parse_section_target(raw)
    if section_id:
        return SectionScoped(section_id)
    return Unrecognized(raw)


def encode_target(target: Target) -> str:
    if isinstance(target, Broadcast):
        return target.audience
    if isinstance(target, SectionScoped):
        return make_section_target(target.section_id)
    if isinstance(target, DirectMessage):
        return str(target.user_id)
    if isinstance(target, Unrecognized):
        return target.raw
    raise TypeError(f"Not a notice target: {target!r}")


def build_notice_draft(form, author, target, notice_type=Notice.NOTICE) -> Notice:
    """
    Build an unsaved notice from validated form data.

    ``target`` may be a wire string or one of the target variants.
    """
    if not isinstance(target, str):
        target = encode_target(target)
    return Notice(
        title=form['title'],
        content=form['content'],
        date=timezone.now(),
        author=author,
        type=notice_type,
        target=target,
    )
