from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status
from django.shortcuts import get_object_or_404
from apps.students.models import Section
from apps.users.models import User
from .models import Notice
from .serializers import NoticeFormSerializer, ComposeNoticeSerializer
from .services import NoticeBoardService, load_board_snapshot
from .targeting import build_notice_draft, make_section_target
from .visibility import Viewer, uses_section_board
import logging

logger = logging.getLogger(__name__)

NO_NOTICES = 'No relevant notices or messages found.'
NO_SECTION_NOTICES = 'No notices found for this section.'
NO_SECTIONS = 'You are not assigned to any sections.'


def _board_payload(viewer):
    snapshot = load_board_snapshot()
    if uses_section_board(viewer):
        sections = NoticeBoardService.owned_sections(viewer, snapshot)
        return {
            'success': True,
            'mode': 'sections',
            'sections': sections,
            'message': '' if sections else NO_SECTIONS,
        }

    notices = NoticeBoardService.generic_board(viewer, snapshot)
    return {
        'success': True,
        'mode': 'list',
        'can_create': viewer.role == User.ADMIN,
        'notices': notices,
        'message': '' if notices else NO_NOTICES,
    }


def _section_payload(viewer, section, snapshot=None):
    snapshot = snapshot or load_board_snapshot()
    notices = NoticeBoardService.section_board(viewer, snapshot, section.id)
    return {
        'success': True,
        'section': {
            'id': section.id,
            'name': section.name,
            'subject_name': section.subject.name if section.subject else '',
        },
        'notices': notices,
        'message': '' if notices else NO_SECTION_NOTICES,
    }


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def notice_board(request):
    """
    GET: Notice board for the signed-in user (section picker for teachers)
    POST: Compose a broadcast notice or private message (admin only)
    """
    viewer = Viewer.from_user(request.user)

    if request.method == 'GET':
        return Response(_board_payload(viewer))

    if viewer.role != User.ADMIN:
        logger.warning(f"User {viewer.id} ({viewer.role}) tried to compose a notice")
        return Response({
            'success': False,
            'message': 'Only admins can create notices here'
        }, status=status.HTTP_403_FORBIDDEN)

    serializer = ComposeNoticeSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({'success': False, 'errors': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    draft = build_notice_draft(data, request.user, data['target'], data['type'])
    notice = NoticeBoardService.create(draft)
    if not notice:
        return Response({
            'success': False,
            'message': 'Could not post the notice'
        }, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    payload = _board_payload(viewer)
    payload['message'] = 'Notice posted successfully!'
    payload['notice_id'] = notice.id
    return Response(payload, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def owned_sections(request):
    """Sections the signed-in teacher can post notices to"""
    viewer = Viewer.from_user(request.user)
    sections = NoticeBoardService.owned_sections(viewer, load_board_snapshot())
    return Response({
        'success': True,
        'sections': sections,
        'message': '' if sections else NO_SECTIONS,
    })


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def section_notices(request, section_id):
    """
    GET: Notices posted to one of the teacher's sections
    POST: Post a new notice to that section
    """
    viewer = Viewer.from_user(request.user)
    section = get_object_or_404(Section.objects.select_related('subject'), id=section_id)

    snapshot = load_board_snapshot()
    if not NoticeBoardService.owns_section(viewer, snapshot, section.id):
        return Response({
            'success': False,
            'message': 'You are not assigned to this section'
        }, status=status.HTTP_403_FORBIDDEN)

    if request.method == 'GET':
        return Response(_section_payload(viewer, section, snapshot))

    serializer = NoticeFormSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({'success': False, 'errors': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

    draft = build_notice_draft(
        serializer.validated_data,
        request.user,
        make_section_target(section.id),
        Notice.NOTICE,
    )
    notice = NoticeBoardService.create(draft)
    if not notice:
        return Response({
            'success': False,
            'message': 'Could not post the notice'
        }, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    payload = _section_payload(viewer, section)
    payload['message'] = 'Notice posted successfully!'
    payload['notice_id'] = notice.id
    return Response(payload, status=status.HTTP_201_CREATED)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def delete_notice(request, notice_id):
    """Delete a notice or message (its author or an admin)"""
    viewer = Viewer.from_user(request.user)
    notice = get_object_or_404(Notice, id=notice_id)

    if not NoticeBoardService.can_delete(viewer, notice):
        logger.warning(f"User {viewer.id} tried to delete notice {notice_id}")
        return Response({'success': False, 'message': 'Unauthorized'}, status=status.HTTP_403_FORBIDDEN)

    if not NoticeBoardService.remove(notice):
        return Response({
            'success': False,
            'message': 'Could not delete the notice'
        }, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    payload = _board_payload(viewer)
    payload['message'] = 'Item deleted successfully.'
    return Response(payload)
