# sixkul/utils/serializers.py
"""Plain-dict renderings of models for JSON responses."""
from typing import Any, Dict, Optional

from .dates import day_label, weekday_name


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def user_to_dict(user) -> Dict[str, Any]:
    data = {
        "id": str(user.id),
        "username": user.username,
        "email": user.email,
        "fullName": user.full_name,
        "role": user.role,
        "avatarUrl": user.avatar_url,
        "isActive": user.is_active,
        "createdAt": _iso(user.created_at),
        "profile": None,
    }
    if user.student_profile:
        data["profile"] = student_profile_to_dict(user.student_profile)
    elif user.pembina_profile:
        data["profile"] = pembina_profile_to_dict(user.pembina_profile)
    return data


def student_profile_to_dict(profile) -> Dict[str, Any]:
    return {
        "id": str(profile.id),
        "nis": profile.nis,
        "className": profile.class_name,
        "major": profile.major,
        "phoneNumber": profile.phone_number,
    }


def pembina_profile_to_dict(profile) -> Dict[str, Any]:
    return {
        "id": str(profile.id),
        "nip": profile.nip,
        "expertise": profile.expertise,
        "phoneNumber": profile.phone_number,
    }


def student_brief(profile) -> Dict[str, Any]:
    return {
        "id": str(profile.id),
        "name": profile.user.full_name,
        "nis": profile.nis,
        "class": profile.class_name,
        "major": profile.major,
    }


def extracurricular_brief(ekskul) -> Dict[str, Any]:
    pembina = ekskul.pembina
    return {
        "id": str(ekskul.id),
        "name": ekskul.name,
        "category": ekskul.category,
        "status": ekskul.status,
        "logoUrl": ekskul.logo_url,
        "pembinaName": pembina.user.full_name if pembina else None,
    }


def extracurricular_to_dict(ekskul) -> Dict[str, Any]:
    data = extracurricular_brief(ekskul)
    data.update({
        "description": ekskul.description,
        "pembinaId": str(ekskul.pembina_id) if ekskul.pembina_id else None,
        "createdAt": _iso(ekskul.created_at),
        "updatedAt": _iso(ekskul.updated_at),
    })
    return data


def schedule_to_dict(schedule) -> Dict[str, Any]:
    return {
        "id": str(schedule.id),
        "extracurricularId": str(schedule.extracurricular_id),
        "dayOfWeek": schedule.day_of_week,
        "dayLabel": day_label(schedule.day_of_week),
        "startTime": schedule.start_time,
        "endTime": schedule.end_time,
        "location": schedule.location,
    }


def session_to_dict(session, include_extracurricular: bool = False) -> Dict[str, Any]:
    data = {
        "id": str(session.id),
        "extracurricularId": str(session.extracurricular_id),
        "scheduleId": str(session.schedule_id) if session.schedule_id else None,
        "date": _iso(session.date),
        "dayLabel": day_label(weekday_name(session.date)),
        "startTime": session.start_time,
        "endTime": session.end_time,
        "location": session.location,
        "notes": session.notes,
        "isCancelled": session.is_cancelled,
        "isAdHoc": session.schedule_id is None,
    }
    if include_extracurricular:
        data["extracurricular"] = {
            "id": str(session.extracurricular.id),
            "name": session.extracurricular.name,
            "category": session.extracurricular.category,
        }
    return data


def enrollment_to_dict(enrollment, include_student: bool = True, include_extracurricular: bool = True) -> Dict[str, Any]:
    data = {
        "id": str(enrollment.id),
        "status": enrollment.status,
        "academicYear": enrollment.academic_year,
        "joinedAt": _iso(enrollment.joined_at),
        "studentId": str(enrollment.student_id),
        "extracurricularId": str(enrollment.extracurricular_id),
    }
    if include_student:
        data["student"] = student_brief(enrollment.student)
    if include_extracurricular:
        data["extracurricular"] = extracurricular_brief(enrollment.extracurricular)
    return data


def attendance_to_dict(attendance) -> Dict[str, Any]:
    return {
        "id": str(attendance.id),
        "enrollmentId": str(attendance.enrollment_id),
        "sessionId": str(attendance.session_id) if attendance.session_id else None,
        "date": _iso(attendance.date),
        "status": attendance.status,
        "notes": attendance.notes,
        "isLocked": attendance.is_locked,
    }


def announcement_to_dict(announcement) -> Dict[str, Any]:
    ekskul = announcement.extracurricular
    return {
        "id": str(announcement.id),
        "scope": announcement.scope,
        "title": announcement.title,
        "content": announcement.content,
        "authorId": str(announcement.author_id),
        "authorName": announcement.author.full_name if announcement.author else None,
        "extracurricularId": str(announcement.extracurricular_id) if announcement.extracurricular_id else None,
        "extracurricularName": ekskul.name if ekskul else None,
        "createdAt": _iso(announcement.created_at),
        "updatedAt": _iso(announcement.updated_at),
    }


def notification_to_dict(notification) -> Dict[str, Any]:
    return {
        "id": str(notification.id),
        "type": notification.type,
        "title": notification.title,
        "message": notification.message,
        "isRead": notification.is_read,
        "enrollmentId": str(notification.enrollment_id) if notification.enrollment_id else None,
        "createdAt": _iso(notification.created_at),
    }
