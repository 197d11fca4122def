"""
Identity Service - accounts, credentials and teacher class assignments

All three account kinds live in the users table, so email uniqueness is a
single check and sign-in is one table queried by email, then by roll number.
"""

from typing import List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select

from classroom.core.security import (
    verify_password,
    get_password_hash,
    create_access_token,
    verify_admin_credentials,
    ADMIN_TOKEN_ID,
)
from classroom.core.exceptions import (
    ConflictError,
    InvalidCredentialsError,
    ResourceNotFoundError,
    ValidationError,
)
from classroom.core.logging_config import logger
from classroom.core.types import is_valid_uuid
from classroom.models.user import User, UserRole, derive_roll_number
from classroom.models.academic import Year, Department, Section, TeacherClass
from classroom.schemas.auth import SignupRequest, ProfileUpdateRequest, UserResponse
from classroom.schemas.admin import UserAdminUpdate

ADMIN_DISPLAY_NAME = "Administrator"


def split_class_codes(department: str) -> List[Tuple[str, str, str]]:
    """
    Parse "FA24-BCS-A,FA24-BCS-B" into [("FA24", "BCS", "A"), ...].

    Codes are uppercased and duplicates dropped; malformed entries raise
    ValidationError.
    """
    parsed: List[Tuple[str, str, str]] = []
    for raw in (department or "").split(","):
        code = raw.strip().upper()
        if not code:
            continue
        parts = [p.strip() for p in code.split("-")]
        if len(parts) != 3 or not all(parts):
            raise ValidationError(
                f"Invalid class code '{raw.strip()}'. Expected YEAR-DEPARTMENT-SECTION.",
                field="department",
            )
        triple = (parts[0], parts[1], parts[2])
        if triple not in parsed:
            parsed.append(triple)

    if not parsed:
        raise ValidationError("Email and department are required for teachers.", field="department")
    return parsed


class IdentityService:
    """Signup, sign-in, profile and account administration"""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ========== Lookups ==========

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalar_one_or_none()

    async def get_by_roll_number(self, roll_number: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(User.roll_number == roll_number.strip().lower())
        )
        return result.scalar_one_or_none()

    async def get_user(self, user_id: str) -> User:
        if not is_valid_uuid(user_id):
            raise ResourceNotFoundError("User", user_id)
        result = await self.db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        if not user:
            raise ResourceNotFoundError("User", user_id)
        return user

    async def email_exists(self, email: str) -> bool:
        return await self.get_by_email(email) is not None

    async def _email_taken_by_other(self, email: str, user_id: str) -> bool:
        result = await self.db.execute(
            select(User.id).where(User.email == email, User.id != user_id)
        )
        return result.first() is not None

    # ========== Teacher classes ==========

    async def resolve_classes(self, department: str) -> List[TeacherClass]:
        """Turn a class code list into unsaved TeacherClass rows"""
        classes = []
        for year_code, dept_code, section_code in split_class_codes(department):
            result = await self.db.execute(
                select(Section)
                .join(Department, Section.department_id == Department.id)
                .join(Year, Department.year_id == Year.id)
                .where(
                    Year.code == year_code,
                    Department.code == dept_code,
                    Section.code == section_code,
                )
            )
            section = result.scalar_one_or_none()
            if not section:
                raise ValidationError(
                    f"Unknown class '{year_code}-{dept_code}-{section_code}'.",
                    field="department",
                )
            classes.append(TeacherClass(
                section_id=section.id,
                year_code=year_code,
                department_code=dept_code,
                section_code=section_code,
            ))
        return classes

    # ========== Signup / Sign-in ==========

    async def signup(self, data: SignupRequest) -> User:
        """Create a student or teacher account"""
        if await self.email_exists(data.email):
            logger.log_auth_event("signup", False, identifier=data.email, reason="Email already in use")
            raise ConflictError("Email already in use.", field="email")

        user = User(
            name=data.full_name,
            email=data.email,
            hashed_password=get_password_hash(data.password),
            profile_image=data.profile_image,
        )

        if data.role == UserRole.STUDENT.value:
            roll_number = derive_roll_number(data.roll_year, data.roll_dept, data.roll_serial)
            if await self.get_by_roll_number(roll_number):
                logger.log_auth_event("signup", False, identifier=data.email,
                                      reason="Roll number already registered")
                raise ConflictError("Roll number already registered.", field="rollNumber")
            user.role = UserRole.STUDENT
            user.roll_year = data.roll_year
            user.roll_dept = data.roll_dept
            user.roll_serial = data.roll_serial
            user.section = data.section
            user.roll_number = roll_number
        else:
            user.role = UserRole.TEACHER
            user.classes = await self.resolve_classes(data.department)

        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            # Concurrent signup took the email or roll number first
            await self.db.rollback()
            raise ConflictError("Email or roll number already registered.")

        await self.db.refresh(user)
        logger.log_auth_event("signup", True, identifier=user.email, role=user.role.value)
        return user

    async def authenticate(self, identifier: str, password: str) -> User:
        """
        Resolve an email or a student roll number and check the password.

        Lookup order: email, then roll number when the identifier has no '@'.
        """
        user = await self.get_by_email(identifier)
        if user is None and "@" not in identifier:
            user = await self.get_by_roll_number(identifier)

        if user is None or not verify_password(password, user.hashed_password):
            logger.log_auth_event("signin", False, identifier=identifier, reason="Invalid credentials")
            raise InvalidCredentialsError("Invalid credentials.")

        logger.log_auth_event("signin", True, identifier=identifier, role=user.role.value)
        return user

    async def signin(self, identifier: str, password: str) -> dict:
        user = await self.authenticate(identifier, password)
        token = create_access_token({"id": user.id, "role": user.role.value})
        return {"token": token, "user": UserResponse.from_user(user)}

    def admin_login(self, email: str, password: str) -> dict:
        """Sign in with the configured administrator credential"""
        if not verify_admin_credentials(email, password):
            logger.log_auth_event("admin_login", False, identifier=email, reason="Invalid admin credentials")
            raise InvalidCredentialsError("Invalid admin credentials.")

        logger.log_auth_event("admin_login", True, identifier=email)
        token = create_access_token({"id": ADMIN_TOKEN_ID, "role": UserRole.ADMIN.value})
        return {
            "token": token,
            "user": UserResponse(
                id=ADMIN_TOKEN_ID,
                name=ADMIN_DISPLAY_NAME,
                email=email.strip().lower(),
                role=UserRole.ADMIN.value,
                profile_image=None,
            ),
        }

    # ========== Profile ==========

    async def update_profile(self, user_id: str, data: ProfileUpdateRequest) -> User:
        """Self-service update of name, email and profile image"""
        if user_id == ADMIN_TOKEN_ID:
            raise ResourceNotFoundError("User", user_id)
        user = await self.get_user(user_id)

        email = data.email.lower() if data.email else None
        if email and await self._email_taken_by_other(email, user.id):
            raise ConflictError("Email already in use.", field="email")

        if data.name:
            user.name = data.name
        if email:
            user.email = email
        if data.profile_image:
            user.profile_image = data.profile_image

        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("Email already in use.", field="email")
        await self.db.refresh(user)
        logger.log_auth_event("profile_update", True, identifier=user.email)
        return user

    # ========== Administration ==========

    async def list_users(self) -> List[User]:
        """Students, teachers and stored admins, newest first"""
        result = await self.db.execute(select(User).order_by(User.created_at.desc()))
        return list(result.scalars().all())

    async def admin_update_user(self, user_id: str, data: UserAdminUpdate) -> User:
        user = await self.get_user(user_id)

        email = data.email.lower() if data.email else None
        role = UserRole(data.role) if data.role else user.role
        roll_year = data.roll_year or user.roll_year
        roll_dept = data.roll_dept or user.roll_dept
        roll_serial = data.roll_serial.strip() if data.roll_serial else user.roll_serial

        # Checks run against stored rows before anything on `user` changes
        with self.db.no_autoflush:
            if email and await self._email_taken_by_other(email, user.id):
                raise ConflictError("Email already in use.", field="email")

            if role == UserRole.STUDENT:
                roll_number = derive_roll_number(roll_year, roll_dept, roll_serial)
                if roll_number and roll_number != user.roll_number:
                    result = await self.db.execute(
                        select(User.id).where(User.roll_number == roll_number, User.id != user.id)
                    )
                    if result.first() is not None:
                        raise ConflictError("Roll number already registered.", field="rollNumber")

        if data.name:
            user.name = data.name.strip()
        if email:
            user.email = email
        user.role = role
        user.roll_year = roll_year
        user.roll_dept = roll_dept
        user.roll_serial = roll_serial
        if data.section:
            user.section = data.section

        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("Email or roll number already registered.")

        await self.db.refresh(user)
        logger.info(f"[Admin] Updated user {user.id}")
        return user

    async def delete_user(self, user_id: str) -> None:
        user = await self.get_user(user_id)
        await self.db.delete(user)
        await self.db.commit()
        logger.info(f"[Admin] Deleted user {user_id}")
