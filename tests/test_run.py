"""Tests covering the processing orchestrator and CLI."""

from __future__ import annotations

import logging
import shutil
import xml.etree.ElementTree as ET

import pytest

from genreport import run
from genreport.errors import ReferenceDataError

ZERO_NET_COAL = """<GenerationReport><Coal><CoalGenerator><Name>Coal[1]</Name>
<Generation><Day><Date>2017-01-01T00:00:00+00:00</Date><Energy>1</Energy><Price>1</Price></Day></Generation>
<TotalHeatInput>10</TotalHeatInput><ActualNetGeneration>0</ActualNetGeneration>
</CoalGenerator></Coal></GenerationReport>"""


def test_process_file_writes_result(tmp_path, data_dir, factors):
    """A full pass should extract, calculate, and write the result document."""

    out = run.process_file(data_dir / "01-Basic.xml", tmp_path, factors)

    assert out == tmp_path / "01-Basic-Result.xml"
    root = ET.parse(out).getroot()
    assert [g.findtext("Name") for g in root.findall("Totals/Generator")] == [
        "Wind[Offshore]",
        "Wind[Onshore]",
        "Gas[1]",
        "Coal[1]",
    ]
    totals = {g.findtext("Name"): g.findtext("Total") for g in root.findall("Totals/Generator")}
    assert totals["Wind[Onshore]"] == "180.0"
    assert [
        (d.findtext("Name"), d.findtext("Date"), d.findtext("Emission"))
        for d in root.findall("MaxEmissionGenerators/Day")
    ] == [
        ("Coal[1]", "2017-01-01T00:00:00+00:00", "80"),
        ("Gas[1]", "2017-01-02T00:00:00+00:00", "150.0"),
    ]
    assert root.findtext("ActualHeatRates/ActualHeatRate/HeatRate") == "4"


def test_handle_file_logs_and_skips_failures(tmp_path, factors, caplog):
    """Computation errors are logged with the file name and nothing is written."""

    src = tmp_path / "in" / "bad.xml"
    src.parent.mkdir()
    src.write_text(ZERO_NET_COAL, encoding="utf-8")
    out_dir = tmp_path / "out"

    with caplog.at_level(logging.ERROR, logger="genreport.run"):
        result = run.handle_file(src, out_dir, factors)

    assert result is None
    assert "bad.xml" in caplog.text
    assert "zero actual net generation" in caplog.text
    assert not out_dir.exists() or list(out_dir.iterdir()) == []


def test_handle_file_missing_input(tmp_path, factors):
    assert run.handle_file(tmp_path / "gone.xml", tmp_path, factors) is None


def test_process_directory_counts(tmp_path, data_dir, factors):
    in_dir = tmp_path / "in"
    in_dir.mkdir()
    shutil.copy(data_dir / "01-Basic.xml", in_dir / "good.xml")
    (in_dir / "broken.xml").write_text("<GenerationReport>", encoding="utf-8")
    (in_dir / "old-Result.xml").write_text("<GenerationOutput/>", encoding="utf-8")
    (in_dir / "readme.txt").write_text("ignore me", encoding="utf-8")

    stats = run.process_directory(in_dir, tmp_path / "out", factors)

    assert stats == {"processed": 1, "failed": 1}
    assert [p.name for p in (tmp_path / "out").iterdir()] == ["good-Result.xml"]


def test_main_once(monkeypatch, tmp_path, data_dir, capsys):
    """`--once` should process the input folder and report stats."""

    in_dir = tmp_path / "in"
    in_dir.mkdir()
    shutil.copy(data_dir / "01-Basic.xml", in_dir)

    code = run.main(
        [
            "--input-folder", str(in_dir),
            "--output-folder", str(tmp_path / "out"),
            "--reference-data", str(data_dir / "ReferenceData.xml"),
            "--once",
        ]
    )

    assert code == 0
    assert "Done. Stats: {'processed': 1, 'failed': 0}" in capsys.readouterr().out
    assert (tmp_path / "out" / "01-Basic-Result.xml").exists()


def test_main_bad_reference_data(monkeypatch, tmp_path, capsys):
    """Unusable reference data is fatal for the run."""

    def fail(path):
        raise ReferenceDataError("cannot read reference data")

    monkeypatch.setattr(run, "load_reference_factors", fail)
    monkeypatch.setattr(run, "watch", lambda *a, **k: pytest.fail("should not watch"))

    code = run.main(["--input-folder", str(tmp_path), "--output-folder", str(tmp_path)])

    assert code == 2
    assert "ERROR: cannot read reference data" in capsys.readouterr().err


def test_main_watches_by_default(monkeypatch, tmp_path, factors):
    """Without `--once` the CLI hands `handle_file` to the watcher."""

    monkeypatch.setattr(run, "load_reference_factors", lambda path: factors)
    handled = []
    monkeypatch.setattr(
        run, "handle_file", lambda path, output_dir, factors: handled.append((path, output_dir))
    )

    def fake_watch(input_dir, callback):
        assert input_dir == tmp_path / "in"
        callback(tmp_path / "in" / "new.xml")
        return True

    monkeypatch.setattr(run, "watch", fake_watch)

    code = run.main(["--input-folder", str(tmp_path / "in"), "--output-folder", str(tmp_path / "out")])

    assert code == 0
    assert handled == [(tmp_path / "in" / "new.xml", tmp_path / "out")]


def test_handle_file_contains_decimal_overflow(tmp_path, factors):
    """An out-of-range product is a per-file failure, not a crash."""

    src = tmp_path / "huge.xml"
    src.write_text(
        "<GenerationReport><Wind><WindGenerator><Name>Wind[Onshore]</Name><Generation>"
        "<Day><Date>2017-01-01T00:00:00+00:00</Date><Energy>1E999999</Energy>"
        "<Price>10</Price></Day></Generation></WindGenerator></Wind></GenerationReport>",
        encoding="utf-8",
    )
    out_dir = tmp_path / "out"

    assert run.handle_file(src, out_dir, factors) is None
    assert not out_dir.exists()


def test_main_reports_dead_watcher(monkeypatch, tmp_path, factors):
    """A watcher that stops without an interrupt yields a failing exit code."""

    monkeypatch.setattr(run, "load_reference_factors", lambda path: factors)
    monkeypatch.setattr(run, "watch", lambda input_dir, callback: False)

    code = run.main(["--input-folder", str(tmp_path), "--output-folder", str(tmp_path)])

    assert code == 1
