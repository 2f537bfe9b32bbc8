import sys
from pathlib import Path

import pytest
from openpyxl import Workbook

# Ensure `import src...` works when pytest is run from anywhere
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.dao import get_connection  # noqa: E402
from src.main import create_store, init_db  # noqa: E402


def write_xlsx(path, headers, rows):
    """Write a one-sheet workbook: header row followed by data rows."""
    wb = Workbook()
    ws = wb.active
    ws.append(list(headers))
    for r in rows:
        ws.append(list(r))
    wb.save(str(path))
    return path


@pytest.fixture
def db_path(tmp_path):
    return init_db(str(tmp_path / "test_app.sqlite"))


@pytest.fixture
def conn(db_path):
    c = get_connection(db_path)
    yield c
    c.close()


@pytest.fixture
def medical_store(conn):
    """(store_id, vendor_id) for a medical store owned by vendor 7"""
    return create_store(conn, 7, "City Pharmacy", "medical"), 7
