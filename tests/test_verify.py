"""
Unit tests for the build-health smoke check.
"""

from investpro import verify


class TestCheckFiles:
    def test_package_tree_is_complete(self):
        ok, message = verify.check_files()
        assert ok, message

    def test_reports_missing_files(self, tmp_path):
        (tmp_path / "main.py").write_text("")

        ok, message = verify.check_files(tmp_path)

        assert not ok
        assert "seed.py" in message
        assert "main.py," not in message


class TestRunChecks:
    def test_routes_skipped_when_import_fails(self, monkeypatch):
        monkeypatch.setattr(
            verify,
            "CHECKS",
            [
                ("files", lambda: (True, "ok")),
                ("import", lambda: (False, "boom")),
                ("routes", lambda: (True, "unreachable")),
            ],
        )

        results = verify.run_checks()

        assert results[-1] == ("routes", False, "skipped: application did not import")

    def test_main_exit_code(self, monkeypatch, capsys):
        monkeypatch.setattr(verify, "CHECKS", [("files", lambda: (True, "ok"))])
        assert verify.main() == 0
        assert "[PASS] files: ok" in capsys.readouterr().out

        monkeypatch.setattr(verify, "CHECKS", [("files", lambda: (False, "missing"))])
        assert verify.main() == 1
        assert "1 check(s) failed" in capsys.readouterr().out
