from hashlib import md5
from urllib.parse import quote

from django.utils import dateformat, timezone
from django.utils.timesince import timesince

from .targeting import ALL, STUDENT, TEACHER
from .visibility import PRIVATE, SECTION, classify

DEFAULT_AUTHOR_NAME = 'School Admin'
DEFAULT_AUTHOR_ROLE = 'Staff'
UNKNOWN_SECTION = 'N/A'
UNKNOWN_RECIPIENT = 'user'

# target -> (style, ribbon)
BROADCAST_STYLES = {
    ALL: ('public', 'Public Notice'),
    STUDENT: ('students', 'For Students'),
    TEACHER: ('teachers', 'For Teachers'),
}
GENERIC_STYLE = ('generic', 'Notice')

AVATAR_COLORS = ['#2563eb', '#16a34a', '#d97706', '#db2777', '#7c3aed', '#0891b2']


def initials_avatar(name):
    """SVG data URI showing up to two initials of ``name``."""
    parts = (name or '?').split()
    initials = ''.join(part[0] for part in parts[:2]).upper() or '?'
    color = AVATAR_COLORS[int(md5(initials.encode()).hexdigest(), 16) % len(AVATAR_COLORS)]
    svg = (
        '<svg xmlns="http://www.w3.org/2000/svg" width="64" height="64">'
        f'<rect width="64" height="64" fill="{color}"/>'
        '<text x="50%" y="50%" dy=".35em" text-anchor="middle" '
        f'font-family="sans-serif" font-size="26" fill="#fff">{initials}</text></svg>'
    )
    return 'data:image/svg+xml;charset=utf-8,' + quote(svg)


def time_ago(value, now=None):
    now = now or timezone.now()
    if (now - value).total_seconds() < 60:
        return 'just now'
    return f"{timesince(value, now, depth=1)} ago"


def format_notice_date(value):
    # e.g. "Mar 5, 2025, 9:30 AM"
    return dateformat.format(timezone.localtime(value), 'M j, Y, g:i A')


def describe_author(notice, users_by_id):
    author = users_by_id.get(str(notice.author_id)) if notice.author_id is not None else None
    if author is None:
        return {
            'name': DEFAULT_AUTHOR_NAME,
            'role': DEFAULT_AUTHOR_ROLE,
            'avatar': initials_avatar(DEFAULT_AUTHOR_NAME),
        }
    return {
        'name': author.name,
        'role': author.role or DEFAULT_AUTHOR_ROLE,
        'avatar': author.profile_image or initials_avatar(author.name),
    }


def card_style(notice, users_by_id, sections_by_id):
    """Return (category, style, ribbon) for a notice card."""
    classification = classify(notice)
    if classification.category == PRIVATE:
        recipient = users_by_id.get(classification.value)
        return PRIVATE, 'private', f"Private to {recipient.name if recipient else UNKNOWN_RECIPIENT}"
    if classification.category == SECTION:
        section = sections_by_id.get(classification.value)
        return SECTION, 'section', f"For Section {section.name if section else UNKNOWN_SECTION}"
    style, ribbon = BROADCAST_STYLES.get(classification.value, GENERIC_STYLE)
    return classification.category, style, ribbon


def build_notice_card(notice, users_by_id, sections_by_id, can_delete):
    category, style, ribbon = card_style(notice, users_by_id, sections_by_id)
    return {
        'id': notice.id,
        'title': notice.title,
        'content': notice.content,
        'date': notice.date.isoformat(),
        'formatted_date': format_notice_date(notice.date),
        'time_ago': time_ago(notice.date),
        'type': notice.type,
        'target': notice.target,
        'category': category,
        'style': style,
        'ribbon': ribbon,
        'author': describe_author(notice, users_by_id),
        'can_delete': can_delete,
    }
