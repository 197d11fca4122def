"""
Unit Tests for the Identity Service
Tests for: admin user updates and profile updates under either session flush mode
"""
import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from classroom.core.exceptions import ConflictError
from classroom.models import User
from classroom.schemas.admin import UserAdminUpdate
from classroom.schemas.auth import ProfileUpdateRequest
from classroom.services.identity_service import IdentityService

from conftest import create_student, create_teacher, test_engine


class TestAdminUpdateUser:
    """Conflict checks must not depend on the session's autoflush setting"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize('autoflush', [False, True])
    async def test_taken_roll_number_is_a_conflict(self, db_session, autoflush):
        await create_student(db_session, roll_serial='300')
        other = await create_student(db_session, roll_serial='301')

        async with AsyncSession(test_engine, expire_on_commit=False, autoflush=autoflush) as session:
            with pytest.raises(ConflictError) as exc_info:
                await IdentityService(session).admin_update_user(other.id, UserAdminUpdate(roll_serial='300'))

        assert exc_info.value.message == 'Roll number already registered.'
        stored = await db_session.scalar(select(User.roll_number).where(User.id == other.id))
        assert stored == 'fa24bcs301'

    @pytest.mark.asyncio
    async def test_taken_email_leaves_row_untouched(self, db_session):
        student = await create_student(db_session)
        teacher = await create_teacher(db_session)

        async with AsyncSession(test_engine, expire_on_commit=False, autoflush=True) as session:
            with pytest.raises(ConflictError) as exc_info:
                await IdentityService(session).admin_update_user(
                    student.id, UserAdminUpdate(name='Renamed', email=teacher.email)
                )

        assert exc_info.value.message == 'Email already in use.'
        stored = await db_session.scalar(select(User.name).where(User.id == student.id))
        assert stored == student.name

    @pytest.mark.asyncio
    async def test_new_roll_components_recompute_roll_number(self, db_session):
        student = await create_student(db_session, roll_serial='410')

        user = await IdentityService(db_session).admin_update_user(
            student.id, UserAdminUpdate(roll_year='sp25', roll_serial='411')
        )

        assert user.roll_year == 'SP25'
        assert user.roll_number == 'sp25bcs411'


class TestUpdateProfile:

    @pytest.mark.asyncio
    async def test_taken_email_with_autoflush_session(self, db_session):
        student = await create_student(db_session)
        teacher = await create_teacher(db_session)

        async with AsyncSession(test_engine, expire_on_commit=False, autoflush=True) as session:
            with pytest.raises(ConflictError):
                await IdentityService(session).update_profile(
                    student.id, ProfileUpdateRequest(name='Renamed', email=teacher.email)
                )

        stored = await db_session.scalar(select(User.email).where(User.id == student.id))
        assert stored == student.email
