# sixkul/services/admin_user_service.py
import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from email_validator import EmailNotValidError, validate_email
from sqlalchemy import select, func, or_, desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .base_service import BaseService
from ..core.config import settings
from ..core.exceptions import ValidationError, ConflictError, BusinessRuleError
from ..core.security import hash_password
from ..models import User, Role, StudentProfile, PembinaProfile
from ..utils.cache_invalidation import invalidate_admin_cache

logger = logging.getLogger(__name__)


def is_valid_email(value: str) -> bool:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def username_from_email(email: str) -> str:
    return email.split("@", 1)[0].lower()


class AdminUserService(BaseService[User]):
    not_found_message = "Pengguna tidak ditemukan."

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    @staticmethod
    def _validate_new_user(data: Dict[str, Any]) -> List[Dict[str, str]]:
        errors = []
        if not (data.get("full_name") or "").strip():
            errors.append({"field": "name", "message": "Nama wajib diisi"})
        if not is_valid_email((data.get("email") or "").strip()):
            errors.append({"field": "email", "message": "Email tidak valid"})
        role = data.get("role")
        if role not in [r.value for r in Role]:
            errors.append({"field": "role", "message": "Role harus ADMIN, PEMBINA, atau SISWA"})
        if role in (Role.SISWA.value, Role.PEMBINA.value) and not (data.get("specific_id") or "").strip():
            label = "NIS" if role == Role.SISWA.value else "NIP"
            errors.append({"field": "specificId", "message": f"{label} wajib diisi"})
        if role == Role.SISWA.value:
            if not (data.get("class_name") or "").strip():
                errors.append({"field": "className", "message": "Kelas wajib diisi untuk siswa"})
            if not (data.get("major") or "").strip():
                errors.append({"field": "major", "message": "Jurusan wajib diisi untuk siswa"})
        return errors

    async def _ensure_unique(self, email: Optional[str] = None, nis: Optional[str] = None,
                             nip: Optional[str] = None, exclude_user_id: Optional[UUID] = None):
        if email:
            stmt = select(User.id).where(func.lower(User.email) == email.lower())
            if exclude_user_id:
                stmt = stmt.where(User.id != exclude_user_id)
            if (await self.db.execute(stmt)).first():
                raise ConflictError("Email sudah terdaftar.", [{"field": "email", "message": "Email sudah digunakan"}])
        if nis:
            stmt = select(StudentProfile.id).where(StudentProfile.nis == nis)
            if exclude_user_id:
                stmt = stmt.where(StudentProfile.user_id != exclude_user_id)
            if (await self.db.execute(stmt)).first():
                raise ConflictError("NIS sudah terdaftar.", [{"field": "specificId", "message": "NIS sudah digunakan"}])
        if nip:
            stmt = select(PembinaProfile.id).where(PembinaProfile.nip == nip)
            if exclude_user_id:
                stmt = stmt.where(PembinaProfile.user_id != exclude_user_id)
            if (await self.db.execute(stmt)).first():
                raise ConflictError("NIP sudah terdaftar.", [{"field": "specificId", "message": "NIP sudah digunakan"}])

    async def create_user(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Create the account and its role profile in one transaction.

        New accounts start with the configured default password, which is
        returned once so the admin can hand it over.
        """
        errors = self._validate_new_user(data)
        if errors:
            raise ValidationError("Validasi gagal", errors)

        email = data["email"].strip().lower()
        role = data["role"]
        specific_id = (data.get("specific_id") or "").strip() or None
        await self._ensure_unique(
            email=email,
            nis=specific_id if role == Role.SISWA.value else None,
            nip=specific_id if role == Role.PEMBINA.value else None,
        )

        user = User(
            username=username_from_email(email),
            email=email,
            full_name=data["full_name"].strip(),
            role=role,
            password_hash=hash_password(settings.default_password),
            is_active=True,
            student_profile=None,
            pembina_profile=None,
        )
        if role == Role.SISWA.value:
            user.student_profile = StudentProfile(
                nis=specific_id,
                class_name=data["class_name"].strip(),
                major=data["major"].strip(),
                phone_number=data.get("phone_number"),
            )
        elif role == Role.PEMBINA.value:
            user.pembina_profile = PembinaProfile(
                nip=specific_id,
                expertise=data.get("expertise"),
                phone_number=data.get("phone_number"),
            )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"User creation hit a unique constraint: {e}")
            raise ConflictError("Data pengguna sudah terdaftar.")

        await invalidate_admin_cache()
        logger.info(f"User created: {user.email} ({role})")
        return {"user": user, "defaultPassword": settings.default_password}

    async def list_users(self, role: Optional[str] = None, search: Optional[str] = None,
                         page: int = 1, size: int = 20) -> Dict[str, Any]:
        stmt = select(User).where(User.is_deleted == False)
        if role:
            stmt = stmt.where(User.role == role)
        if search:
            term = f"%{search.strip().lower()}%"
            stmt = stmt.where(or_(
                func.lower(User.full_name).like(term),
                func.lower(User.email).like(term),
                func.lower(User.username).like(term),
            ))
        return await self.paginate(stmt.order_by(desc(User.created_at)), page, size)

    async def update_user(self, user_id: UUID, data: Dict[str, Any], actor: User) -> User:
        user = await self.get_or_404(user_id)

        if data.get("is_active") is False and user.id == actor.id:
            raise BusinessRuleError("Anda tidak dapat menonaktifkan akun Anda sendiri.")

        if data.get("full_name") is not None:
            if not data["full_name"].strip():
                raise ValidationError("Validasi gagal", [{"field": "name", "message": "Nama wajib diisi"}])
            user.full_name = data["full_name"].strip()
        if data.get("is_active") is not None:
            user.is_active = data["is_active"]

        specific_id = (data.get("specific_id") or "").strip() or None
        new_role = data.get("role") or user.role
        if new_role not in [r.value for r in Role]:
            raise ValidationError("Validasi gagal", [{"field": "role", "message": "Role tidak valid"}])

        if new_role == Role.SISWA.value:
            await self._ensure_unique(nis=specific_id, exclude_user_id=user.id)
            profile = user.student_profile
            if profile is None:
                missing = self._validate_new_user({**data, "full_name": user.full_name, "email": user.email, "role": new_role})
                if missing:
                    raise ValidationError("Profil siswa wajib dilengkapi", missing)
                user.student_profile = StudentProfile(
                    nis=specific_id, class_name=data["class_name"], major=data["major"],
                    phone_number=data.get("phone_number"),
                )
            else:
                for field, value in (("nis", specific_id), ("class_name", data.get("class_name")),
                                     ("major", data.get("major")), ("phone_number", data.get("phone_number"))):
                    if value is not None:
                        setattr(profile, field, value)
        elif new_role == Role.PEMBINA.value:
            await self._ensure_unique(nip=specific_id, exclude_user_id=user.id)
            profile = user.pembina_profile
            if profile is None:
                if not specific_id:
                    raise ValidationError(
                        "Profil pembina wajib dilengkapi",
                        [{"field": "specificId", "message": "NIP wajib diisi"}],
                    )
                user.pembina_profile = PembinaProfile(
                    nip=specific_id, expertise=data.get("expertise"), phone_number=data.get("phone_number"),
                )
            else:
                for field, value in (("nip", specific_id), ("expertise", data.get("expertise")),
                                     ("phone_number", data.get("phone_number"))):
                    if value is not None:
                        setattr(profile, field, value)
        user.role = new_role

        await self.db.commit()
        await invalidate_admin_cache()
        logger.info(f"User {user.id} updated by {actor.id}")
        return user

    async def deactivate_user(self, user_id: UUID, actor: User) -> User:
        user = await self.get_or_404(user_id)
        if user.id == actor.id:
            raise BusinessRuleError("Anda tidak dapat menonaktifkan akun Anda sendiri.")
        user.is_active = False
        await self.db.commit()
        await invalidate_admin_cache()
        logger.info(f"User {user.id} deactivated by {actor.id}")
        return user
