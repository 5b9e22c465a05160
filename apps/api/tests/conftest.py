import os
import tempfile

import pytest

_TMP_DIR = tempfile.mkdtemp(prefix="babylog-tests-")
os.environ["BABYLOG_DATABASE_PATH"] = os.path.join(_TMP_DIR, "babylog.db")
os.environ["BABYLOG_JWT_SECRET"] = "test-secret"
os.environ["AI_PROVIDER"] = "openai"
os.environ.pop("BABYLOG_JWT_AUDIENCE", None)

from babylog.db import get_connection, initialize_db  # noqa: E402


@pytest.fixture(autouse=True)
def reset_state() -> None:
    initialize_db()
    with get_connection() as conn:
        for table in ["logs", "user_babies", "babies", "users"]:
            conn.execute(f"DELETE FROM {table}")
        conn.commit()
