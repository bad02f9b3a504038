import io

import pytest

from webworker import worker
from webworker.cfg import Cfg


FIXED_DATE = 'Oct 18, 2026, 3:50:00 PM'


@pytest.fixture
def root(tmp_path):
    Cfg.init(str(tmp_path), 'Test Server', -6)
    yield tmp_path
    Cfg.init()


@pytest.fixture
def fixed_date(monkeypatch):
    monkeypatch.setattr(worker, 'now', lambda: FIXED_DATE)
    return FIXED_DATE


@pytest.fixture
def exchange(root, fixed_date):
    def run(request):
        rfile = io.BytesIO(request)
        wfile = io.BytesIO()
        worker.handle_connection(rfile, wfile)
        return wfile.getvalue()
    return run
