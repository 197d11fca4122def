"""
Unit Tests for Coursework and Hierarchy Schemas
"""
import pytest
from datetime import datetime
from pydantic import ValidationError as PydanticValidationError

from classroom.schemas.coursework import CourseworkCreate, CourseworkUpdate, QuizCreate, QuizUpdate
from classroom.schemas.admin import YearCreate, DepartmentCreate, SectionCreate, UserAdminUpdate
from classroom.schemas.base import first_error_message


def coursework_form(**overrides):
    form = {
        'title': 'Linked lists',
        'course_name': 'Data Structures',
        'section': 'a',
        'start_date': '2024-09-01T09:00:00',
        'due_date': '2024-09-08T09:00:00',
        'year': 'fa24',
        'department': 'bcs',
    }
    form.update(overrides)
    return form


def error_of(exc_info) -> str:
    return first_error_message(exc_info.value.errors())


class TestCourseworkCreate:
    """Test assignment/quiz metadata validation"""

    def test_codes_are_uppercased(self):
        data = CourseworkCreate.model_validate(coursework_form())

        assert data.section == 'A'
        assert data.year == 'FA24'
        assert data.department == 'BCS'

    def test_year_and_department_are_optional(self):
        data = CourseworkCreate.model_validate(coursework_form(year=None, department=' '))
        assert data.year is None
        assert data.department is None

    @pytest.mark.parametrize('missing', ['title', 'course_name', 'section', 'start_date', 'due_date'])
    def test_required_fields(self, missing):
        with pytest.raises(PydanticValidationError) as exc_info:
            CourseworkCreate.model_validate(coursework_form(**{missing: ''}))
        assert error_of(exc_info) == "Title, course name, section, start date, and due date are required."

    def test_due_before_start(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            CourseworkCreate.model_validate(coursework_form(due_date='2024-08-01T09:00:00'))
        assert error_of(exc_info) == "Due date must be after start date."

    def test_due_equal_to_start_is_allowed(self):
        data = CourseworkCreate.model_validate(coursework_form(due_date='2024-09-01T09:00:00'))
        assert data.due_date == data.start_date

    def test_section_outside_range(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            CourseworkCreate.model_validate(coursework_form(section='G'))
        assert error_of(exc_info) == "Section must be one of A, B, C, D, E, F."

    def test_timezone_aware_dates_stored_as_naive_utc(self):
        data = CourseworkCreate.model_validate(coursework_form(
            start_date='2024-09-01T09:00:00+05:00',
            due_date='2024-09-01T10:00:00Z',
        ))
        assert data.start_date == datetime(2024, 9, 1, 4, 0, 0)
        assert data.due_date.tzinfo is None


class TestQuizSchemas:

    def test_marks_required_and_positive(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            QuizCreate.model_validate(coursework_form())
        assert error_of(exc_info) == "Marks must be a positive number."

        with pytest.raises(PydanticValidationError):
            QuizCreate.model_validate(coursework_form(marks='0'))

    def test_marks_from_form_string(self):
        assert QuizCreate.model_validate(coursework_form(marks='25')).marks == 25.0

    def test_update_allows_missing_marks(self):
        assert QuizUpdate.model_validate({'title': 'Renamed'}).marks is None

    def test_update_rejects_negative_marks(self):
        with pytest.raises(PydanticValidationError):
            QuizUpdate.model_validate({'marks': '-3'})


class TestCourseworkUpdate:

    def test_partial_update_dumps_only_given_fields(self):
        data = CourseworkUpdate.model_validate({'title': 'Trees', 'section': 'b'})
        assert data.model_dump(exclude_none=True) == {'title': 'Trees', 'section': 'B'}

    def test_update_checks_section(self):
        with pytest.raises(PydanticValidationError):
            CourseworkUpdate.model_validate({'section': 'Q'})


class TestHierarchySchemas:

    def test_year_code_uppercased(self):
        assert YearCreate.model_validate({'code': ' fa24 ', 'label': 'Fall 2024'}).code == 'FA24'

    def test_year_requires_code_and_label(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            YearCreate.model_validate({'code': 'FA24'})
        assert error_of(exc_info) == "Code and label are required."

    def test_department_requires_year(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            DepartmentCreate.model_validate({'code': 'BCS', 'label': 'Computer Science'})
        assert error_of(exc_info) == "Year is required."

    def test_department_accepts_camel_case_year_id(self):
        data = DepartmentCreate.model_validate({'code': 'bcs', 'label': 'CS', 'yearId': 'abc'})
        assert data.year_id == 'abc'
        assert data.code == 'BCS'

    def test_section_letter_range(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            SectionCreate.model_validate({'code': 'G', 'departmentId': 'abc'})
        assert error_of(exc_info) == "Section must be one of A, B, C, D, E, F."

    def test_section_requires_department(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            SectionCreate.model_validate({'code': 'A'})
        assert error_of(exc_info) == "Code and department are required."

    def test_admin_update_validates_role_and_section(self):
        assert UserAdminUpdate.model_validate({'role': 'Teacher', 'section': 'c'}).role == 'teacher'

        with pytest.raises(PydanticValidationError):
            UserAdminUpdate.model_validate({'role': 'principal'})
        with pytest.raises(PydanticValidationError):
            UserAdminUpdate.model_validate({'section': 'H'})
