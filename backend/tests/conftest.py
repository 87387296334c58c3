import io

import openpyxl
import pytest

from decision_tables import session_store
from decision_tables.table_codec import parse_table_bytes

OFFERS_HEADER = [
    ['RuleSet', 'com.example.rules'],
    [],
    [],
    [],
    [],
    ['RuleTable Offers'],
    ['NAME', 'CONDITION', 'ACTION'],
    ['', '$c:Customer', ''],
    ['', '$c.getAge() > ($param)', 'offer.setDiscount($param);'],
    ['Rule Name', 'Age', 'Discount'],
]


def build_workbook(rows, title='Rules'):
    """Write ``rows`` from A1 downwards into a fresh workbook and return its bytes."""
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = title
    for r, values in enumerate(rows, start=1):
        for c, value in enumerate(values, start=1):
            if value is None or value == '':
                continue
            ws.cell(row=r, column=c, value=value)
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def offers_rows(*rule_rows):
    return [list(r) for r in OFFERS_HEADER] + [list(r) for r in (rule_rows or (['R1', '30', '10'],))]


@pytest.fixture
def offers_bytes():
    return build_workbook(offers_rows())


@pytest.fixture
def offers_doc(offers_bytes):
    return parse_table_bytes(offers_bytes)


@pytest.fixture
def multi_rule_doc():
    return parse_table_bytes(build_workbook(offers_rows(
        ['R1', '30', '10'],
        ['R2', '40', '15'],
        ['R3', '50', '20'],
    )))


@pytest.fixture
def app():
    from app import app as flask_app
    flask_app.config['TESTING'] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture(autouse=True)
def _clear_sessions():
    yield
    with session_store._sessions_lock:
        session_store._sessions.clear()
