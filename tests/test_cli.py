import json
from pathlib import Path

import numpy as np
import soundfile as sf

from sfzreader.cli import _build_root_parser, main
from sfzreader.constants import DEFAULT_ENCODING

SFZ_TEXT = """// two-layer piano
<group> tune=10 volume=-3
<region> sample=Samples\\C4.wav key=60 tune=5 hivel=63 loop_mode=loop_continuous loop_start=10 loop_end=90
<region> sample=Samples\\C4_loud.wav key=60 lovel=64
<region> sample=Samples\\readme.txt
"""


def _write_instrument(tmp_path: Path) -> Path:
    sfz = tmp_path / "piano.sfz"
    sfz.write_text(SFZ_TEXT, encoding="ascii")
    return sfz


def test_inspect_prints_descriptors_without_audio(tmp_path: Path, capsys) -> None:
    sfz = _write_instrument(tmp_path)

    assert main(["inspect", str(sfz)]) == 0

    out = capsys.readouterr().out
    assert "C4.wav: key 60 (261.63 Hz) notes 60-60 vel 0-63 tune 15 gain -3 pan 0 loop 10-90" in out
    assert "C4_loud.wav: key 60 (261.63 Hz) notes 60-60 vel 64-127 tune 10 gain -3 pan 0\n" in out
    assert "2 region(s)" in out


def test_inspect_json(tmp_path: Path, capsys) -> None:
    sfz = _write_instrument(tmp_path)

    assert main(["inspect", "--json", str(sfz)]) == 0

    records = json.loads(capsys.readouterr().out)
    assert [r["tune"] for r in records] == [15, 10]
    assert records[0]["path"] == str(tmp_path / "Samples" / "C4.wav")
    assert records[0]["is_looping"] is True
    assert records[1]["minimum_velocity"] == 64


def test_keymap_loads_samples(tmp_path: Path, capsys) -> None:
    sfz = _write_instrument(tmp_path)
    (tmp_path / "Samples").mkdir()
    sf.write(tmp_path / "Samples" / "C4.wav", np.zeros(100, dtype=np.float32), 22050)
    sf.write(tmp_path / "Samples" / "C4_loud.wav", np.zeros(100, dtype=np.float32), 22050)

    assert main(["keymap", str(sfz)]) == 0

    out = capsys.readouterr().out
    assert " 60: C4.wav [vel 0-63], C4_loud.wav [vel 64-127]" in out
    assert " 61:" not in out
    assert "2 sample(s) loaded" in out


def test_keymap_strict_reports_missing_sample(tmp_path: Path, capsys) -> None:
    sfz = _write_instrument(tmp_path)

    assert main(["keymap", "--strict", str(sfz)]) == 1

    assert "Error: Could not load sample" in capsys.readouterr().err


def test_missing_sfz_file(tmp_path: Path, capsys) -> None:
    assert main(["inspect", str(tmp_path / "nope.sfz")]) == 1

    assert "Error: Could not load SFZ" in capsys.readouterr().err


def test_encoding_default_matches_loader() -> None:
    parser = _build_root_parser()

    assert parser.parse_args(["inspect", "x.sfz"]).encoding == DEFAULT_ENCODING
    assert parser.parse_args(["keymap", "x.sfz"]).encoding == DEFAULT_ENCODING
