import os
import tempfile

# must be set before aurelane.config is imported
_tmpdir = tempfile.mkdtemp(prefix="aurelane-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{os.path.join(_tmpdir, 'test.db')}")

import pytest

from aurelane.db import init_db


@pytest.fixture(autouse=True, scope="session")
def setup_db():
    init_db(reset=True)
    yield
