"""
Hierarchy Service - Year -> Department -> Section administration

Delete rules:
- a Year that still has departments cannot be deleted
- deleting a Department removes its sections and their teacher class links
- deleting a Section removes its teacher class links
Coursework and students store codes, not ids, and are left untouched.
"""

from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select, update, func

from classroom.core.exceptions import ConflictError, ResourceNotFoundError
from classroom.core.logging_config import logger
from classroom.core.types import is_valid_uuid
from classroom.models.academic import Year, Department, Section, TeacherClass
from classroom.schemas.admin import (
    YearCreate,
    YearUpdate,
    DepartmentCreate,
    DepartmentUpdate,
    SectionCreate,
)


class HierarchyService:
    """CRUD over the academic tree"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get(self, model, resource_type: str, entity_id: str):
        if not is_valid_uuid(entity_id):
            raise ResourceNotFoundError(resource_type, entity_id)
        result = await self.db.execute(select(model).where(model.id == entity_id))
        entity = result.scalar_one_or_none()
        if not entity:
            raise ResourceNotFoundError(resource_type, entity_id)
        return entity

    async def _commit(self, conflict_message: str) -> None:
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError(conflict_message)

    # ========== Years ==========

    async def list_years(self) -> List[Year]:
        result = await self.db.execute(select(Year).order_by(Year.code.desc()))
        return list(result.scalars().all())

    async def get_year(self, year_id: str) -> Year:
        return await self._get(Year, "Year", year_id)

    async def create_year(self, data: YearCreate) -> Year:
        existing = await self.db.execute(select(Year.id).where(Year.code == data.code))
        if existing.first() is not None:
            raise ConflictError("Year code already exists.", field="code")

        year = Year(code=data.code, label=data.label.strip())
        self.db.add(year)
        await self._commit("Year code already exists.")
        await self.db.refresh(year)
        logger.info(f"[Hierarchy] Created year {year.code}")
        return year

    async def update_year(self, year_id: str, data: YearUpdate) -> Year:
        year = await self.get_year(year_id)

        if data.code and data.code != year.code:
            existing = await self.db.execute(
                select(Year.id).where(Year.code == data.code, Year.id != year.id)
            )
            if existing.first() is not None:
                raise ConflictError("Year code already exists.", field="code")
            # Class links carry a copy of the code
            await self.db.execute(
                update(TeacherClass)
                .where(TeacherClass.year_code == year.code)
                .values(year_code=data.code)
            )
            year.code = data.code
        if data.label and data.label.strip():
            year.label = data.label.strip()

        await self._commit("Year code already exists.")
        await self.db.refresh(year)
        return year

    async def delete_year(self, year_id: str) -> None:
        year = await self.get_year(year_id)

        count = await self.db.scalar(
            select(func.count(Department.id)).where(Department.year_id == year.id)
        )
        if count:
            raise ConflictError("Year has departments. Delete them first.")

        await self.db.delete(year)
        await self.db.commit()
        logger.info(f"[Hierarchy] Deleted year {year.code}")

    # ========== Departments ==========

    async def list_departments(self) -> List[Department]:
        result = await self.db.execute(select(Department).order_by(Department.code.asc()))
        return list(result.scalars().all())

    async def get_department(self, department_id: str) -> Department:
        return await self._get(Department, "Department", department_id)

    async def create_department(self, data: DepartmentCreate) -> Department:
        year = await self.get_year(data.year_id)

        existing = await self.db.execute(select(Department.id).where(Department.code == data.code))
        if existing.first() is not None:
            raise ConflictError("Department code already exists.", field="code")

        department = Department(code=data.code, label=data.label.strip(), year_id=year.id)
        self.db.add(department)
        await self._commit("Department code already exists.")
        await self.db.refresh(department)
        logger.info(f"[Hierarchy] Created department {department.code} in {year.code}")
        return department

    async def update_department(self, department_id: str, data: DepartmentUpdate) -> Department:
        department = await self.get_department(department_id)

        if data.year_id and data.year_id != department.year_id:
            year = await self.get_year(data.year_id)
            department.year_id = year.id
            await self.db.execute(
                update(TeacherClass)
                .where(TeacherClass.section_id.in_([s.id for s in department.sections]))
                .values(year_code=year.code)
            )

        if data.code and data.code != department.code:
            existing = await self.db.execute(
                select(Department.id).where(Department.code == data.code, Department.id != department.id)
            )
            if existing.first() is not None:
                raise ConflictError("Department code already exists.", field="code")
            await self.db.execute(
                update(TeacherClass)
                .where(TeacherClass.section_id.in_([s.id for s in department.sections]))
                .values(department_code=data.code)
            )
            department.code = data.code

        if data.label and data.label.strip():
            department.label = data.label.strip()

        await self._commit("Department code already exists.")
        await self.db.refresh(department)
        return department

    async def delete_department(self, department_id: str) -> None:
        department = await self.get_department(department_id)
        await self.db.delete(department)
        await self.db.commit()
        logger.info(f"[Hierarchy] Deleted department {department.code} and its sections")

    # ========== Sections ==========

    async def list_sections(self) -> List[Section]:
        result = await self.db.execute(select(Section).order_by(Section.code.asc()))
        return list(result.scalars().all())

    async def list_sections_by_department(self, department_id: str) -> List[Section]:
        department = await self.get_department(department_id)
        result = await self.db.execute(
            select(Section)
            .where(Section.department_id == department.id)
            .order_by(Section.code.asc())
        )
        return list(result.scalars().all())

    async def create_section(self, data: SectionCreate) -> Section:
        department = await self.get_department(data.department_id)

        existing = await self.db.execute(
            select(Section.id).where(
                Section.department_id == department.id,
                Section.code == data.code,
            )
        )
        if existing.first() is not None:
            raise ConflictError("Section already exists for this department.", field="code")

        section = Section(code=data.code, department_id=department.id)
        self.db.add(section)
        await self._commit("Section already exists for this department.")
        await self.db.refresh(section)
        logger.info(f"[Hierarchy] Created section {department.code}-{section.code}")
        return section

    async def delete_section(self, section_id: str) -> None:
        section = await self._get(Section, "Section", section_id)
        await self.db.delete(section)
        await self.db.commit()
        logger.info(f"[Hierarchy] Deleted section {section.code}")

    # ========== Maintenance ==========

    async def remove_duplicate_years(self) -> List[str]:
        """
        Delete rows that repeat an existing year code, keeping the oldest.

        Departments pointing at a removed row are moved to the kept one.
        Only needed for databases created before the unique index on
        years.code existed. Returns the deleted ids.
        """
        result = await self.db.execute(select(Year).order_by(Year.created_at.asc(), Year.id.asc()))
        kept = {}
        duplicates = []
        for year in result.scalars().all():
            keeper = kept.setdefault(year.code, year)
            if keeper is not year:
                duplicates.append((year, keeper))

        for year, keeper in duplicates:
            logger.info(f"[Hierarchy] Removing duplicate year {year.code} ({year.id}), keeping {keeper.id}")
            await self.db.execute(
                update(Department)
                .where(Department.year_id == year.id)
                .values(year_id=keeper.id)
            )
            await self.db.delete(year)
        await self.db.commit()
        return [year.id for year, _ in duplicates]
