"""
Unit Tests for database helpers
"""
import pytest

from classroom.core.database import has_unique_column

from conftest import test_engine


class TestUniqueColumnCheck:
    """Used by the duplicate-year cleanup to avoid a second index"""

    @pytest.mark.asyncio
    async def test_created_tables_report_their_unique_columns(self, db_session):
        async with test_engine.connect() as conn:
            year_code = await conn.run_sync(has_unique_column, 'years', 'code')
            year_label = await conn.run_sync(has_unique_column, 'years', 'label')
            # Section codes are only unique per department
            section_code = await conn.run_sync(has_unique_column, 'sections', 'code')

        assert year_code is True
        assert year_label is False
        assert section_code is False
