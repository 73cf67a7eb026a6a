"""
Pytest configuration and fixtures for the parameter table tests.
"""
import io

import pytest
from openpyxl import Workbook

from paramtable.expression_engine import BaseExpressionEngine, Statement
from paramtable.table_model import TableCell


class FakeEngine(BaseExpressionEngine):
    """Accepts everything except the texts listed in `failing`, recording every call."""
    name = 'fake'

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.calls = []

    async def parse(self, text, kind):
        self.calls.append((text, kind))
        if text in self.failing:
            return None, f"cannot parse {text}"
        return Statement(kind=kind, text=text), None


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def table(engine):
    return TableCell(engine=engine)


@pytest.fixture
def make_xlsx():
    """Build .xlsx bytes from a list of rows (None leaves the cell empty), anchored at `origin`."""
    def _make(rows, origin=(1, 1)):
        wb = Workbook()
        ws = wb.active
        for r, row in enumerate(rows, start=origin[0]):
            for c, value in enumerate(row, start=origin[1]):
                if value is not None:
                    ws.cell(row=r, column=c, value=value)
        buf = io.BytesIO()
        wb.save(buf)
        return buf.getvalue()
    return _make


@pytest.fixture
def test_client():
    from app import app

    app.config['TESTING'] = True
    return app.test_client()
