import sqlite3

import pytest

from app.database import init_db


def _connect(db_path):
    conn = sqlite3.connect(str(db_path))
    conn.execute("PRAGMA foreign_keys=ON")
    return conn


class TestInitDb:
    def test_init_is_idempotent(self, tmp_path):
        db_path = tmp_path / "db.sqlite"
        init_db(db_path)
        init_db(db_path)

        conn = _connect(db_path)
        try:
            roles = conn.execute("SELECT name FROM roles ORDER BY name").fetchall()
            indexes = {row[1] for row in conn.execute("PRAGMA index_list(users)")}
        finally:
            conn.close()
        assert roles == [("admin",), ("developer",)]
        assert "idx_users_verification" in indexes

    def test_verification_tokens_are_unique(self, tmp_path):
        db_path = tmp_path / "db.sqlite"
        init_db(db_path)

        conn = _connect(db_path)
        try:
            conn.execute(
                "INSERT INTO users (email, name, password_hash, verification_token) "
                "VALUES ('a@example.com', 'A', 'x', 'tok')"
            )
            with pytest.raises(sqlite3.IntegrityError):
                conn.execute(
                    "INSERT INTO users (email, name, password_hash, verification_token) "
                    "VALUES ('b@example.com', 'B', 'x', 'tok')"
                )
        finally:
            conn.close()

    def test_job_uuid_cannot_change(self, tmp_path):
        db_path = tmp_path / "db.sqlite"
        init_db(db_path)

        conn = _connect(db_path)
        try:
            conn.execute(
                "INSERT INTO users (id, email, name, password_hash) VALUES (1, 'a@example.com', 'A', 'x')"
            )
            conn.execute("INSERT INTO categories (id, title) VALUES (1, 'Design')")
            conn.execute(
                "INSERT INTO jobs (id, uuid, title, description, category_id, user_id) "
                "VALUES (1, 'abc', 'Logo work', 'text', 1, 1)"
            )
            with pytest.raises(sqlite3.IntegrityError, match="immutable"):
                conn.execute("UPDATE jobs SET uuid = 'def' WHERE id = 1")
        finally:
            conn.close()
