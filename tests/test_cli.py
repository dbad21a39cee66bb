"""Tests for the ``python -m mimetree`` entry point."""

from __future__ import annotations

from pathlib import Path

import pytest

from tests.conftest import INLINE_MULTIPART_EML, MULTIPLE_HEADERS_EML

from mimetree.__main__ import main


@pytest.fixture
def eml_file(tmp_path: Path) -> Path:
    path = tmp_path / "inline.eml"
    path.write_bytes(INLINE_MULTIPART_EML)
    return path


class TestMain:
    def test_usage(self, capsys):
        assert main([]) == 1
        assert "Usage" in capsys.readouterr().err

    def test_unknown_command(self, eml_file: Path):
        assert main(["explode", str(eml_file)]) == 1

    def test_tree(self, eml_file: Path, capsys):
        assert main(["tree", str(eml_file)]) == 0
        out = capsys.readouterr().out.splitlines()
        assert out[0] == "multipart/alternative"
        assert out[1].startswith("text/plain chars=")
        assert out[3] == "image/jpeg attachment=kien.jpg"

    def test_headers(self, eml_file: Path, capsys):
        assert main(["headers", str(eml_file)]) == 0
        assert "Subject: test inline image attachment" in capsys.readouterr().out

    def test_addresses(self, tmp_path: Path, capsys):
        path = tmp_path / "headers.eml"
        path.write_bytes(MULTIPLE_HEADERS_EML)
        assert main(["addresses", str(path)]) == 0
        out = capsys.readouterr().out.splitlines()
        assert "From: Kien Pham <kpham@sendgrid.com>" in out
        assert "Bcc: Trevor <trevor@sendgrid.com>" in out

    def test_missing_file(self, tmp_path: Path):
        assert main(["tree", str(tmp_path / "missing.eml")]) == 2
