"""Tests for the funcli command line: argument parsing and exit codes."""

from unittest.mock import MagicMock, patch

import pytest

from funcli import cli
from funcli.client import ApiError
from funcli.importer import UploadError


def _fake_client():
    client = MagicMock()
    client.__enter__.return_value = client
    return client


class TestParser:

    def test_import_start_options(self):
        args = cli.build_parser().parse_args([
            "import", "start", "space-1", "./notes",
            "--format", "obsidian", "--ignore", "*.tmp", "--ignore", "drafts",
            "--session-file", "/tmp/s.json", "--concurrency", "3",
        ])

        assert args.func is cli.cmd_import
        assert args.space == "space-1"
        assert args.directory == "./notes"
        assert args.format == "obsidian"
        assert args.ignore == ["*.tmp", "drafts"]
        assert args.session_file == "/tmp/s.json"
        assert args.concurrency == 3

    def test_import_start_defaults(self):
        args = cli.build_parser().parse_args(["import", "start", "space-1", "."])
        assert args.format is None
        assert args.ignore == []
        assert args.concurrency == 5

    @pytest.mark.parametrize("argv", [
        ["import", "start", "s", ".", "--format", "notion"],
        ["import", "start", "s", ".", "--concurrency", "0"],
    ])
    def test_invalid_values_rejected(self, argv):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(argv)

    def test_global_options(self):
        args = cli.build_parser().parse_args(["-t", "tok", "-u", "http://localhost:3000", "spaces", "list"])
        assert args.token == "tok"
        assert args.base_url == "http://localhost:3000"


class TestRun:

    def test_no_command_prints_help(self):
        assert cli.run([]) == 0

    def test_missing_subcommand_prints_help(self):
        assert cli.run(["import"]) == 0

    def test_import_log_json(self):
        client = _fake_client()
        with patch("funcli.cli._make_client", return_value=client), \
                patch("funcli.cli.ImportSessionManager") as manager_cls:
            assert cli.run(["import", "log", "sess-1", "--failed-only", "--json"]) == 0

        manager_cls.return_value.log.assert_called_once_with("sess-1", failed_only=True, as_json=True)

    def test_import_start_passes_options(self):
        client = _fake_client()
        with patch("funcli.cli._make_client", return_value=client), \
                patch("funcli.cli.ImportSessionManager") as manager_cls:
            manager_cls.return_value.start.return_value = MagicMock(status="completed")
            assert cli.run(["import", "start", "space-1", "./notes", "--ignore", "*.tmp"]) == 0

        kwargs = manager_cls.call_args[1]
        assert kwargs["ignore"] == ["*.tmp"]
        assert kwargs["concurrency"] == 5
        manager_cls.return_value.start.assert_called_once_with(
            "space-1", "./notes", source_format=None, session_file=None)

    def test_failed_session_exits_nonzero(self):
        with patch("funcli.cli._make_client", return_value=_fake_client()), \
                patch("funcli.cli.ImportSessionManager") as manager_cls:
            manager_cls.return_value.start.return_value = MagicMock(status="failed")
            assert cli.run(["import", "start", "space-1", "./notes"]) == 1

    def test_api_error_exits_one(self):
        client = _fake_client()
        client.list_spaces.side_effect = ApiError(401, "Unauthorized")
        with patch("funcli.cli._make_client", return_value=client):
            assert cli.run(["spaces", "list"]) == 1

    def test_upload_error_exits_one(self):
        with patch("funcli.cli._make_client", return_value=_fake_client()), \
                patch("funcli.cli.ImportSessionManager") as manager_cls:
            manager_cls.return_value.start.side_effect = UploadError("Upload failed for a.md: HTTP 403")
            assert cli.run(["import", "start", "space-1", "./notes"]) == 1

    def test_interrupt_exits_130(self):
        with patch("funcli.cli._make_client", return_value=_fake_client()), \
                patch("funcli.cli.ImportSessionManager") as manager_cls:
            manager_cls.return_value.start.side_effect = KeyboardInterrupt
            assert cli.run(["import", "start", "space-1", "./notes"]) == 130

    def test_missing_api_key_exits_one(self, monkeypatch):
        monkeypatch.delenv("FUNDAMENTO_API_KEY", raising=False)
        monkeypatch.setattr("funcli.config.load_api_key_from_keyring", lambda: None)
        assert cli.run(["spaces", "list"]) == 1

    def test_unwritable_session_file_exits_one(self, import_dir, tmp_path):
        client = _fake_client()
        session_file = str(tmp_path / "nope" / "session.json")
        with patch("funcli.cli._make_client", return_value=client):
            assert cli.run(["import", "start", "space-1", import_dir, "--session-file", session_file]) == 1

        client.create_import_session.assert_not_called()

    def test_documents_get_json(self):
        client = _fake_client()
        client.get_document.return_value = {"id": "doc-1", "title": "Guide"}
        with patch("funcli.cli._make_client", return_value=client):
            assert cli.run(["documents", "get", "doc-1", "--format", "json"]) == 0

        client.get_document.assert_called_once_with("doc-1", "json")

    def test_token_set(self):
        with patch("funcli.cli.save_api_key") as save:
            assert cli.run(["token", "set", "abc"]) == 0
        save.assert_called_once_with("abc")
