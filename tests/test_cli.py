import subprocess
import sys
import unittest
from pathlib import Path

import pytest

from tagwriter.cli import check_files, main

DOC_YAML = """
tag: feed
attr: {id: main}
children:
  - tag: item
    text: one
  - tag: item
    text: two
"""


def test_render_writes_output_file(tmp_path: Path) -> None:
    doc = tmp_path / "feed.yaml"
    doc.write_text(DOC_YAML, encoding="utf-8")
    out = tmp_path / "feed.xml"

    main(["render", str(doc), "--out", str(out), "--indent", "2"])

    assert out.read_text(encoding="utf-8") == (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<feed id="main">\n'
        "  <item>one</item>\n"
        "  <item>two</item>\n"
        "</feed>\n"
    )
    assert check_files([out]) == []


def test_render_uses_config_file(tmp_path: Path) -> None:
    doc = tmp_path / "feed.yaml"
    doc.write_text(DOC_YAML, encoding="utf-8")
    config = tmp_path / "writer.yaml"
    config.write_text("encoding: iso-8859-1\n", encoding="utf-8")
    out = tmp_path / "feed.xml"

    main(["render", str(doc), "--out", str(out), "--config", str(config)])

    assert out.read_bytes() == b'<feed id="main"><item>one</item><item>two</item></feed>\n'


def test_render_rejects_invalid_config(tmp_path: Path) -> None:
    doc = tmp_path / "feed.yaml"
    doc.write_text(DOC_YAML, encoding="utf-8")
    config = tmp_path / "writer.yaml"
    config.write_text("indentation: 2\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["render", str(doc), "--config", str(config)])
    assert "Invalid writer config" in str(excinfo.value)


def test_render_rejects_invalid_document(tmp_path: Path) -> None:
    doc = tmp_path / "bad.yaml"
    doc.write_text("tag: r\ntext: x\nchildren:\n  - tag: a\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["render", str(doc)])
    assert "Invalid document" in str(excinfo.value)


def test_render_reports_bad_element_names(tmp_path: Path) -> None:
    doc = tmp_path / "bad.yaml"
    doc.write_text("tag: '1bad'\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["render", str(doc), "--out", str(tmp_path / "bad.xml")])
    assert "invalid element name" in str(excinfo.value)


def test_check_reports_malformed_files(tmp_path: Path, capsys) -> None:
    good = tmp_path / "good.xml"
    good.write_text("<a><b/></a>", encoding="utf-8")
    bad = tmp_path / "bad.xml"
    bad.write_text("<a><b></a>", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["check", str(good), str(bad)])

    assert excinfo.value.code == 1
    err = capsys.readouterr().err
    assert f"[check] {bad}" in err
    assert str(good) not in err


def test_check_rejects_entity_declarations(tmp_path: Path, capsys) -> None:
    doc = tmp_path / "entities.xml"
    doc.write_text('<!DOCTYPE a [<!ENTITY x "y">]><a>&x;</a>', encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["check", str(doc)])

    assert excinfo.value.code == 1
    assert f"[check] {doc}" in capsys.readouterr().err


class RenderCliEndToEndTest(unittest.TestCase):
    def test_render_to_stdout_honours_encoding(self) -> None:
        import tempfile

        with tempfile.TemporaryDirectory() as tmp:
            doc = Path(tmp) / "cafe.yaml"
            doc.write_text("tag: r\ntext: café €\n", encoding="utf-8")

            result = subprocess.run(
                [sys.executable, "-m", "tagwriter.cli", "render", str(doc), "--encoding", "latin-1"],
                check=True,
                capture_output=True,
            )

        self.assertEqual(result.stdout, b"<r>caf\xe9 &#8364;</r>\n")

    def test_render_to_stdout(self) -> None:
        import tempfile

        with tempfile.TemporaryDirectory() as tmp:
            doc = Path(tmp) / "feed.yaml"
            doc.write_text(DOC_YAML, encoding="utf-8")

            result = subprocess.run(
                [sys.executable, "-m", "tagwriter.cli", "render", str(doc)],
                check=True,
                capture_output=True,
                text=True,
            )

        self.assertEqual(
            result.stdout,
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            '<feed id="main"><item>one</item><item>two</item></feed>\n',
        )

    def test_check_exit_status(self) -> None:
        import tempfile

        with tempfile.TemporaryDirectory() as tmp:
            bad = Path(tmp) / "bad.xml"
            bad.write_text("<a>", encoding="utf-8")

            result = subprocess.run(
                [sys.executable, "-m", "tagwriter.cli", "check", str(bad)],
                capture_output=True,
                text=True,
            )

        self.assertEqual(result.returncode, 1)
        self.assertIn("[check]", result.stderr)


if __name__ == "__main__":
    unittest.main()
