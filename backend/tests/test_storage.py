"""
Unit tests for the flat-file stores and attachment storage.
Tests the on-disk record format, attachment saving and lookup, and orphaned
attachment cleanup.
"""

import importlib.util
import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from app import db
from app.errors import NotFoundError
from app.models.email import AttachmentUpload, Email
from app.services.attachments import (
    find_orphaned_attachments,
    purge_orphaned_attachments,
    resolve_attachment,
    sanitize_filename,
    save_attachment,
    stored_name_from_path,
)
from app.services.email_store import delete_email, load_all_emails, load_email, save_email
from app.services.mailbox import permanent_delete, send_email, soft_delete

SCRIPT_PATH = Path(__file__).resolve().parents[2] / "scripts" / "purge_orphaned_attachments.py"


def _make_email(email_id: str = "abc123", **overrides) -> Email:
    fields = {
        "id": email_id,
        "from": "a@x",
        "to": "b@x",
        "subject": "hi",
        "body": "yo",
        "date": datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc),
    }
    fields.update(overrides)
    return Email(**fields)


class TestEmailStore:
    """Test one-file-per-email persistence."""

    def test_record_written_with_from_key(self):
        save_email(_make_email())

        raw = json.loads((db.EMAILS_DIR / "abc123.json").read_text())
        assert raw["from"] == "a@x"
        assert "sender" not in raw
        assert raw["to"] == "b@x"
        assert raw["read"] is False
        assert raw["deleted"] is False
        assert raw["attachments"] == []

    def test_record_is_indented_json(self):
        save_email(_make_email())

        text = (db.EMAILS_DIR / "abc123.json").read_text()
        assert text.startswith("{\n  ")

    def test_legacy_record_loads(self):
        """Records with JavaScript-style dates and numeric ids still load."""
        db.EMAILS_DIR.mkdir(parents=True)
        legacy = {
            "id": "1718000000000",
            "from": "a@x",
            "to": "b@x",
            "subject": "old",
            "body": "message",
            "date": "2024-06-10T06:13:20.000Z",
            "attachments": [{"filename": "f.txt", "path": "/attachments/1718000000000-f.txt"}],
            "read": False,
            "deleted": True,
        }
        (db.EMAILS_DIR / "1718000000000.json").write_text(json.dumps(legacy))

        email = load_email("1718000000000")

        assert email.sender == "a@x"
        assert email.deleted is True
        assert email.date == datetime(2024, 6, 10, 6, 13, 20, tzinfo=timezone.utc)
        assert email.attachments[0].filename == "f.txt"

    def test_date_without_offset_loads_as_utc(self):
        record = _make_email().model_dump(by_alias=True, mode="json")
        record["date"] = "2024-06-10T06:13:20"
        db.EMAILS_DIR.mkdir(parents=True)
        (db.EMAILS_DIR / "abc123.json").write_text(json.dumps(record))

        assert load_email("abc123").date == datetime(2024, 6, 10, 6, 13, 20, tzinfo=timezone.utc)

    def test_load_all_is_sorted_by_file_name(self):
        for email_id in ["ccc", "aaa", "bbb"]:
            save_email(_make_email(email_id))

        assert [e.id for e in load_all_emails()] == ["aaa", "bbb", "ccc"]

    def test_load_all_without_directory_is_empty(self):
        assert load_all_emails() == []

    def test_save_overwrites_existing_record(self):
        email = _make_email()
        save_email(email)
        email.deleted = True
        save_email(email)

        assert load_email("abc123").deleted is True
        assert len(load_all_emails()) == 1

    def test_delete_reports_whether_record_existed(self):
        save_email(_make_email())

        assert delete_email("abc123") is True
        assert delete_email("abc123") is False

    @pytest.mark.parametrize("email_id", ["../users", "a/b", "..", "x.json"])
    def test_unsafe_ids_are_never_resolved(self, email_id):
        assert load_email(email_id) is None
        assert delete_email(email_id) is False

    def test_save_rejects_unsafe_id(self):
        with pytest.raises(ValueError):
            save_email(_make_email("../escape"))


class TestSaveAttachment:
    """Test writing uploaded parts to the attachments directory."""

    def test_save_returns_public_path(self):
        attachment = save_attachment(b"data", "report.pdf")

        assert attachment.filename == "report.pdf"
        assert attachment.path.startswith("/attachments/")
        assert attachment.path.endswith("-report.pdf")

        stored = db.ATTACHMENTS_DIR / stored_name_from_path(attachment.path)
        assert stored.read_bytes() == b"data"

    def test_same_name_uploads_do_not_collide(self):
        first = save_attachment(b"one", "a.txt")
        second = save_attachment(b"two", "a.txt")

        assert first.path != second.path
        assert resolve_attachment(stored_name_from_path(first.path)).read_bytes() == b"one"
        assert resolve_attachment(stored_name_from_path(second.path)).read_bytes() == b"two"

    def test_filename_is_sanitized_on_disk_only(self):
        attachment = save_attachment(b"x", "My Report (v2).pdf")

        assert attachment.filename == "My Report (v2).pdf"
        assert attachment.path.endswith("-My_Report__v2_.pdf")

    def test_missing_filename_uses_default(self):
        attachment = save_attachment(b"x", None)

        assert attachment.filename == "attachment"
        assert attachment.path.endswith("-attachment")

    @pytest.mark.parametrize("raw,expected", [
        ("report.pdf", "report.pdf"),
        ("../../etc/passwd", ".._.._etc_passwd"),
        ("a b\\c", "a_b_c"),
        ("", "attachment"),
    ])
    def test_sanitize_filename(self, raw, expected):
        assert sanitize_filename(raw) == expected


class TestResolveAttachment:
    """Test mapping stored names back to files."""

    def test_unknown_name_raises_not_found(self):
        with pytest.raises(NotFoundError) as exc_info:
            resolve_attachment("nope.txt")

        assert exc_info.value.message == "Attachment not found"

    @pytest.mark.parametrize("name", ["..", ".", "../users.json", "a/b", ""])
    def test_unsafe_name_raises_not_found(self, name):
        db.ATTACHMENTS_DIR.mkdir(parents=True)
        db.USERS_FILE.write_text("[]")

        with pytest.raises(NotFoundError):
            resolve_attachment(name)

    def test_stored_name_from_path(self):
        assert stored_name_from_path("/attachments/abc-f.txt") == "abc-f.txt"
        assert stored_name_from_path("abc-f.txt") == "abc-f.txt"


class TestOrphanedAttachments:
    """Test finding and purging attachment files no email references."""

    def _send_with_attachment(self, name: str = "a.txt"):
        return send_email(
            "a@x", "b@x", "hi", "yo",
            [AttachmentUpload(filename=name, content=b"payload")],
        )

    def test_no_orphans_while_referenced(self):
        self._send_with_attachment()

        assert find_orphaned_attachments() == []

    def test_permanent_delete_leaves_orphan(self):
        email = self._send_with_attachment()
        permanent_delete(email.id)

        assert find_orphaned_attachments() == [stored_name_from_path(email.attachments[0].path)]

    def test_soft_deleted_email_still_references_files(self):
        email = self._send_with_attachment()
        soft_delete(email.id)

        assert find_orphaned_attachments() == []

    def test_purge_deletes_only_orphans(self):
        kept = self._send_with_attachment("kept.txt")
        gone = self._send_with_attachment("gone.txt")
        permanent_delete(gone.id)

        purged = purge_orphaned_attachments()

        assert purged == [stored_name_from_path(gone.attachments[0].path)]
        remaining = sorted(p.name for p in db.ATTACHMENTS_DIR.iterdir())
        assert remaining == [stored_name_from_path(kept.attachments[0].path)]

    def test_dry_run_deletes_nothing(self):
        email = self._send_with_attachment()
        permanent_delete(email.id)

        purged = purge_orphaned_attachments(dry_run=True)

        assert len(purged) == 1
        assert (db.ATTACHMENTS_DIR / purged[0]).exists()

    def test_no_attachments_directory(self):
        assert find_orphaned_attachments() == []
        assert purge_orphaned_attachments() == []


class TestPurgeScript:
    """Test scripts/purge_orphaned_attachments.py against the patched data dir."""

    @pytest.fixture()
    def script(self):
        spec = importlib.util.spec_from_file_location("purge_orphaned_attachments", SCRIPT_PATH)
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module

    def test_dry_run_lists_orphans(self, script, capsys):
        email = send_email(
            "a@x", "b@x", "hi", "yo",
            [AttachmentUpload(filename="a.txt", content=b"payload")],
        )
        permanent_delete(email.id)

        assert script.main(["--dry-run"]) == 0

        out = capsys.readouterr().out
        assert "Would delete 1 orphaned attachment(s)" in out
        assert len(list(db.ATTACHMENTS_DIR.iterdir())) == 1

    def test_purge_deletes_orphans(self, script, capsys):
        email = send_email(
            "a@x", "b@x", "hi", "yo",
            [AttachmentUpload(filename="a.txt", content=b"payload")],
        )
        permanent_delete(email.id)

        assert script.main([]) == 0

        assert "Deleted 1 orphaned attachment(s)" in capsys.readouterr().out
        assert list(db.ATTACHMENTS_DIR.iterdir()) == []

    def test_missing_attachments_directory_fails(self, script, capsys):
        assert script.main([]) == 1
        assert "No attachments directory" in capsys.readouterr().err

    def test_data_dir_option_selects_other_store(self, script, capsys, tmp_path):
        """--data-dir takes effect even though the store is already imported."""
        other = tmp_path / "other"
        (other / "attachments").mkdir(parents=True)
        (other / "attachments" / "stray.txt").write_bytes(b"x")
        db.ATTACHMENTS_DIR.mkdir(parents=True)
        (db.ATTACHMENTS_DIR / "keep.txt").write_bytes(b"x")
        default_attachments = db.ATTACHMENTS_DIR

        assert script.main(["--data-dir", str(other)]) == 0

        out = capsys.readouterr().out
        assert "Deleted: stray.txt" in out
        assert str(other.resolve() / "attachments") in out
        assert not (other / "attachments" / "stray.txt").exists()
        assert (default_attachments / "keep.txt").exists()
        assert db.ATTACHMENTS_DIR == other.resolve() / "attachments"
