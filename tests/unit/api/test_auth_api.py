"""
Unit Tests for Authentication API Endpoints
"""
import pytest
from httpx import AsyncClient
from faker import Faker

from classroom.core.security import decode_token
from classroom.core.config import settings

from conftest import STUDENT_PASSWORD, create_student, headers_for

fake = Faker()


def student_signup(**overrides):
    payload = {
        'firstName': fake.first_name(),
        'lastName': fake.last_name(),
        'email': fake.unique.email(),
        'password': 'secret1',
        'role': 'student',
        'rollYear': 'FA24',
        'rollDept': 'BCS',
        'rollSerial': str(fake.unique.random_int(min=100, max=199)),
        'section': 'A',
        'profileImage': 'https://files.test/me.png',
    }
    payload.update(overrides)
    return payload


def teacher_signup(**overrides):
    payload = {
        'firstName': fake.first_name(),
        'lastName': fake.last_name(),
        'email': fake.unique.email(),
        'password': 'secret1',
        'role': 'teacher',
        'department': 'FA24-BCS-A,FA24-BCS-B',
        'profileImage': 'https://files.test/teacher.png',
    }
    payload.update(overrides)
    return payload


class TestRollNumberScenario:
    """Admin builds the hierarchy, a student signs up and signs in by roll number"""

    @pytest.mark.asyncio
    async def test_signup_and_signin_with_roll_number(self, client: AsyncClient, admin_headers):
        response = await client.post('/api/admin/years', json={'code': 'FA24', 'label': 'Fall 2024'},
                                     headers=admin_headers)
        assert response.status_code == 201
        year_id = response.json()['id']

        response = await client.post('/api/admin/departments',
                                     json={'code': 'BCS', 'label': 'BS CS', 'yearId': year_id},
                                     headers=admin_headers)
        assert response.status_code == 201
        department_id = response.json()['id']

        response = await client.post('/api/admin/sections', json={'code': 'A', 'departmentId': department_id},
                                     headers=admin_headers)
        assert response.status_code == 201

        response = await client.post('/api/auth/signup', json=student_signup(
            email='a@x.com', rollYear='FA24', rollDept='BCS', rollSerial='101', section='A',
        ))
        assert response.status_code == 201
        assert response.json() == {'message': 'User registered successfully.'}

        response = await client.post('/api/auth/signin', json={'identifier': 'fa24bcs101', 'password': 'secret1'})

        assert response.status_code == 200
        data = response.json()
        assert data['user']['role'] == 'student'
        assert data['user']['rollNumber'] == 'fa24bcs101'
        assert decode_token(data['token'])['role'] == 'student'

    @pytest.mark.asyncio
    async def test_roll_number_with_wrong_password(self, client: AsyncClient):
        await client.post('/api/auth/signup', json=student_signup(rollSerial='101'))

        response = await client.post('/api/auth/signin', json={'identifier': 'fa24bcs101', 'password': 'wrong'})

        assert response.status_code == 400
        assert response.json() == {'message': 'Invalid credentials.'}
        assert 'token' not in response.json()


class TestSignup:
    """Test signup endpoint"""

    @pytest.mark.asyncio
    async def test_duplicate_email(self, client: AsyncClient, student):
        response = await client.post('/api/auth/signup', json=student_signup(email=student.email.upper()))

        assert response.status_code == 400
        assert response.json()['message'] == 'Email already in use.'

    @pytest.mark.asyncio
    async def test_duplicate_roll_number(self, client: AsyncClient):
        first = await client.post('/api/auth/signup', json=student_signup(rollSerial='150'))
        assert first.status_code == 201

        response = await client.post('/api/auth/signup', json=student_signup(rollYear='fa24', rollSerial='150'))

        assert response.status_code == 400
        assert response.json()['message'] == 'Roll number already registered.'

    @pytest.mark.asyncio
    async def test_email_unique_across_roles(self, client: AsyncClient, hierarchy):
        """A teacher cannot reuse a student's email"""
        await client.post('/api/auth/signup', json=student_signup(email='shared@example.com'))

        response = await client.post('/api/auth/signup', json=teacher_signup(email='shared@example.com'))

        assert response.status_code == 400
        assert response.json()['message'] == 'Email already in use.'

    @pytest.mark.asyncio
    async def test_missing_fields_return_400_with_message(self, client: AsyncClient):
        response = await client.post('/api/auth/signup', json={'email': 'x@example.com'})

        assert response.status_code == 400
        assert response.json() == {'message': 'First name, last name, and password are required.'}

    @pytest.mark.asyncio
    async def test_invalid_section(self, client: AsyncClient):
        response = await client.post('/api/auth/signup', json=student_signup(section='G'))

        assert response.status_code == 400
        assert response.json()['message'] == 'Section must be one of A, B, C, D, E, F.'

    @pytest.mark.asyncio
    async def test_teacher_signup_links_classes(self, client: AsyncClient, hierarchy):
        payload = teacher_signup()

        response = await client.post('/api/auth/signup', json=payload)
        assert response.status_code == 201
        assert response.json() == {'message': 'Teacher registered successfully.'}

        response = await client.post('/api/auth/signin',
                                     json={'identifier': payload['email'], 'password': 'secret1'})
        user = response.json()['user']
        assert user['role'] == 'teacher'
        assert user['department'] == 'FA24-BCS-A,FA24-BCS-B'
        assert [c['section'] for c in user['classes']] == ['A', 'B']
        assert 'rollNumber' not in user

    @pytest.mark.asyncio
    async def test_teacher_signup_unknown_class(self, client: AsyncClient, hierarchy):
        response = await client.post('/api/auth/signup', json=teacher_signup(department='FA24-BCS-F'))

        assert response.status_code == 400
        assert response.json()['message'] == "Unknown class 'FA24-BCS-F'."


class TestSignin:
    """Test signin and admin login"""

    @pytest.mark.asyncio
    async def test_signin_by_email_case_insensitive(self, client: AsyncClient, student):
        response = await client.post('/api/auth/signin',
                                     json={'identifier': student.email.upper(), 'password': STUDENT_PASSWORD})

        assert response.status_code == 200
        data = response.json()
        assert data['user']['id'] == student.id
        assert data['user']['section'] == 'A'
        assert 'hashedPassword' not in data['user']

    @pytest.mark.asyncio
    async def test_unknown_identifier(self, client: AsyncClient):
        response = await client.post('/api/auth/signin', json={'identifier': 'nobody', 'password': 'x'})

        assert response.status_code == 400
        assert response.json()['message'] == 'Invalid credentials.'

    @pytest.mark.asyncio
    async def test_missing_credentials(self, client: AsyncClient):
        response = await client.post('/api/auth/signin', json={'identifier': 'fa24bcs101'})

        assert response.status_code == 400
        assert response.json()['message'] == 'Missing credentials.'

    @pytest.mark.asyncio
    async def test_admin_login(self, client: AsyncClient):
        response = await client.post('/api/auth/admin-login',
                                     json={'email': settings.ADMIN_EMAIL, 'password': settings.ADMIN_PASSWORD})

        assert response.status_code == 200
        data = response.json()
        assert data['user']['role'] == 'admin'
        assert data['user']['name'] == 'Administrator'
        assert decode_token(data['token'])['id'] == 'admin'

    @pytest.mark.asyncio
    async def test_admin_login_wrong_password(self, client: AsyncClient):
        response = await client.post('/api/auth/admin-login',
                                     json={'email': settings.ADMIN_EMAIL, 'password': 'guess'})

        assert response.status_code == 400
        assert response.json()['message'] == 'Invalid admin credentials.'


class TestTokenHandling:
    """Test bearer token checks on protected routes"""

    @pytest.mark.asyncio
    async def test_no_token(self, client: AsyncClient):
        response = await client.get('/api/auth/me')

        assert response.status_code == 401
        assert response.json() == {'message': 'No token provided.'}

    @pytest.mark.asyncio
    async def test_bad_token(self, client: AsyncClient):
        response = await client.get('/api/auth/me', headers={'Authorization': 'Bearer garbage'})

        assert response.status_code == 401
        assert response.json() == {'message': 'Invalid or expired token.'}

    @pytest.mark.asyncio
    async def test_me_hydrates_student(self, client: AsyncClient, student, student_headers):
        response = await client.get('/api/auth/me', headers=student_headers)

        assert response.status_code == 200
        data = response.json()
        assert data['id'] == student.id
        assert data['role'] == 'student'
        assert data['section'] == 'A'
        assert data['rollYear'] == 'FA24'
        assert data['rollDept'] == 'BCS'


class TestProfile:
    """Test self-service profile updates"""

    @pytest.mark.asyncio
    async def test_update_name_and_email(self, client: AsyncClient, student, student_headers):
        response = await client.put('/api/auth/profile', headers=student_headers,
                                    json={'name': 'Renamed Student', 'email': 'Renamed@Example.com'})

        assert response.status_code == 200
        data = response.json()
        assert data['message'] == 'Profile updated successfully.'
        assert data['user']['name'] == 'Renamed Student'
        assert data['user']['email'] == 'renamed@example.com'

    @pytest.mark.asyncio
    async def test_email_taken_by_teacher(self, client: AsyncClient, student_headers, teacher):
        response = await client.put('/api/auth/profile', headers=student_headers, json={'email': teacher.email})

        assert response.status_code == 400
        assert response.json()['message'] == 'Email already in use.'

    @pytest.mark.asyncio
    async def test_admin_has_no_profile(self, client: AsyncClient, admin_headers):
        response = await client.put('/api/auth/profile', headers=admin_headers, json={'name': 'Root'})

        assert response.status_code == 404
        assert response.json()['message'] == 'User not found.'


class TestCheckEmail:

    @pytest.mark.asyncio
    async def test_existing_and_free_email(self, client: AsyncClient, db_session):
        await create_student(db_session, email='taken@example.com')

        taken = await client.post('/api/auth/check-email', json={'email': 'TAKEN@example.com'})
        free = await client.post('/api/auth/check-email', json={'email': 'free@example.com'})

        assert taken.json() == {'exists': True}
        assert free.json() == {'exists': False}


class TestImageUpload:
    """Test profile picture upload"""

    @pytest.mark.asyncio
    async def test_upload_image(self, client: AsyncClient, student_headers, fake_storage):
        response = await client.post('/api/upload/image', headers=student_headers,
                                     files={'image': ('me.png', b'\x89PNG data', 'image/png')})

        assert response.status_code == 200
        assert response.json()['url'].startswith('https://files.test/classroom-profiles/')
        assert fake_storage.uploads[0]['content_type'] == 'image/png'

    @pytest.mark.asyncio
    async def test_non_image_rejected(self, client: AsyncClient, student_headers, fake_storage):
        response = await client.post('/api/upload/image', headers=student_headers,
                                     files={'image': ('cv.pdf', b'%PDF', 'application/pdf')})

        assert response.status_code == 400
        assert response.json()['message'] == 'Only image files are allowed.'
        assert fake_storage.uploads == []

    @pytest.mark.asyncio
    async def test_missing_file(self, client: AsyncClient):
        response = await client.post('/api/upload/image', headers=headers_for('admin', 'admin'))

        assert response.status_code == 400
        assert response.json()['message'] == 'No file uploaded.'

    @pytest.mark.asyncio
    async def test_requires_token(self, client: AsyncClient):
        response = await client.post('/api/upload/image', files={'image': ('me.png', b'x', 'image/png')})

        assert response.status_code == 401
