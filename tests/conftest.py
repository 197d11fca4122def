"""
Virtual Classroom - Test Configuration and Fixtures
"""
import os
from datetime import datetime
from typing import AsyncGenerator, List, Optional
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from faker import Faker

# Set testing environment
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test_classroom.db'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['ADMIN_EMAIL'] = 'admin@classroom.test'
os.environ['ADMIN_PASSWORD'] = 'admin-password-123'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['COURSEWORK_MUTATION_POLICY'] = 'owner'

from classroom.main import app
from classroom.core.config import settings
from classroom.core.database import Base, get_db, create_engine_for_url
from classroom.core.security import get_password_hash, create_access_token, ADMIN_TOKEN_ID
from classroom.models import User, UserRole, Year, Department, Section, TeacherClass, Quiz
from classroom.modules.auth.dependencies import CurrentIdentity
from classroom.services.storage_service import get_storage_service

fake = Faker()

STUDENT_PASSWORD = 'student-pass-1'
TEACHER_PASSWORD = 'teacher-pass-1'

# Test database setup (foreign keys enforced, as in production)
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test_classroom.db'
test_engine = create_engine_for_url(TEST_DATABASE_URL)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False
)


class FakeStorage:
    """Records uploads instead of talking to S3"""

    def __init__(self):
        self.uploads: List[dict] = []

    async def upload_bytes(self, folder, filename, content, content_type='application/octet-stream'):
        key = f"{folder}/{len(self.uploads) + 1}-{filename}"
        self.uploads.append({
            'folder': folder,
            'filename': filename,
            'content': content,
            'content_type': content_type,
            'key': key,
        })
        return {'url': f"https://files.test/{key}", 'key': key, 'size_bytes': len(content)}


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def fake_storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
async def client(db_session: AsyncSession, fake_storage: FakeStorage) -> AsyncGenerator[AsyncClient, None]:
    """Test client; each request gets its own session like in production"""
    async def override_get_db():
        async with TestSessionLocal() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage_service] = lambda: fake_storage

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def any_teacher_policy():
    """Switch coursework mutation to the permissive policy for one test"""
    previous = settings.COURSEWORK_MUTATION_POLICY
    settings.COURSEWORK_MUTATION_POLICY = 'any_teacher'
    yield
    settings.COURSEWORK_MUTATION_POLICY = previous


# ==================== Data helpers ====================

async def create_hierarchy(session: AsyncSession, year_code: str = 'FA24', dept_code: str = 'BCS',
                           sections: tuple = ('A', 'B')) -> dict:
    """Year -> Department -> Sections"""
    year = Year(code=year_code, label=f"Year {year_code}")
    department = Department(code=dept_code, label=f"Dept {dept_code}", year=year)
    section_rows = {code: Section(code=code, department=department) for code in sections}
    session.add_all([year, department, *section_rows.values()])
    await session.commit()

    return {'year': year, 'department': department, 'sections': section_rows}


async def create_student(session: AsyncSession, section: str = 'A', roll_year: Optional[str] = 'FA24',
                         roll_dept: Optional[str] = 'BCS', roll_serial: Optional[str] = None,
                         email: Optional[str] = None) -> User:
    user = User(
        name=fake.name(),
        email=(email or fake.unique.email()).lower(),
        hashed_password=get_password_hash(STUDENT_PASSWORD),
        role=UserRole.STUDENT,
        profile_image='https://files.test/avatar.png',
        roll_year=roll_year,
        roll_dept=roll_dept,
        roll_serial=roll_serial or str(fake.unique.random_int(min=200, max=999)),
        section=section,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


async def create_teacher(session: AsyncSession, sections: Optional[List[Section]] = None,
                         email: Optional[str] = None) -> User:
    user = User(
        name=fake.name(),
        email=(email or fake.unique.email()).lower(),
        hashed_password=get_password_hash(TEACHER_PASSWORD),
        role=UserRole.TEACHER,
        profile_image='https://files.test/teacher.png',
    )
    for section in sections or []:
        user.classes.append(TeacherClass(
            section_id=section.id,
            year_code=section.department.year.code,
            department_code=section.department.code,
            section_code=section.code,
        ))
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


async def create_coursework(session: AsyncSession, model, creator: User, section: str = 'A',
                            year: Optional[str] = 'FA24', department: Optional[str] = 'BCS', **fields):
    """Assignment or Quiz row owned by `creator`"""
    values = {
        'title': fake.sentence(nb_words=3),
        'course_name': 'Data Structures',
        'start_date': datetime(2024, 9, 1, 9, 0),
        'due_date': datetime(2024, 9, 8, 9, 0),
    }
    if model is Quiz:
        values['marks'] = 20.0
    values.update(fields)
    item = model(created_by=creator.id, section=section, year=year, department=department, **values)
    session.add(item)
    await session.commit()
    await session.refresh(item)
    return item


def headers_for(user_id: str, role: str) -> dict:
    token = create_access_token({'id': str(user_id), 'role': role})
    return {'Authorization': f'Bearer {token}'}


def identity_for(user: User) -> CurrentIdentity:
    """What get_current_identity would hydrate for this user"""
    return CurrentIdentity(
        id=user.id,
        role=user.role.value,
        name=user.name,
        email=user.email,
        section=user.section,
        roll_year=user.roll_year,
        roll_dept=user.roll_dept,
        user=user,
    )


# ==================== Fixtures ====================

@pytest.fixture
async def hierarchy(db_session: AsyncSession) -> dict:
    return await create_hierarchy(db_session)


@pytest.fixture
async def student(db_session: AsyncSession) -> User:
    return await create_student(db_session, section='A')


@pytest.fixture
async def teacher(db_session: AsyncSession) -> User:
    return await create_teacher(db_session)


@pytest.fixture
def student_headers(student: User) -> dict:
    return headers_for(student.id, UserRole.STUDENT.value)


@pytest.fixture
def teacher_headers(teacher: User) -> dict:
    return headers_for(teacher.id, UserRole.TEACHER.value)


@pytest.fixture
def admin_headers() -> dict:
    return headers_for(ADMIN_TOKEN_ID, UserRole.ADMIN.value)
