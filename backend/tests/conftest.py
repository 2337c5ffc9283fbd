import os
import tempfile

import pytest

# Set required env vars before any app module is imported so the module-level
# app never points at a real PostgreSQL server during tests.
_test_dir = tempfile.mkdtemp(prefix="calllog-tests-")
_test_env = {
    "DATABASE_URL": f"sqlite+aiosqlite:///{_test_dir}/default.db",
    "STATIC_DIR": os.path.join(_test_dir, "public"),
    "CORS_ORIGINS": '["*"]',
}

for key, value in _test_env.items():
    os.environ.setdefault(key, value)


@pytest.fixture
def sqlite_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'logs.db'}"


@pytest.fixture
def static_dir(tmp_path):
    public = tmp_path / "public"
    (public / "assets").mkdir(parents=True)
    (public / "index.html").write_text("<html><body>call logs</body></html>")
    (public / "assets" / "app.js").write_text("console.log('call logs');")
    return public
