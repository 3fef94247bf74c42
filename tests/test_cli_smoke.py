from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path

import numpy as np
import pytest

from matbridge.__main__ import main


def test_cli_roundtrip_subprocess(tmp_path: Path):
    source = np.arange(24, dtype=np.float64).reshape(2, 3, 4)
    np.save(tmp_path / "in.npy", source)

    proc = subprocess.run(
        [
            sys.executable,
            "-m",
            "matbridge",
            "roundtrip",
            str(tmp_path / "in.npy"),
            "--name",
            "cube",
            "--out",
            str(tmp_path / "out.npy"),
        ],
        capture_output=True,
        text=True,
        check=False,
    )
    if proc.returncode != 0:
        pytest.fail(f"CLI failed: {proc.returncode}\n{proc.stdout}\n{proc.stderr}")
    np.testing.assert_array_equal(np.load(tmp_path / "out.npy"), source)


def test_cli_roundtrip_complex_json(tmp_path: Path):
    payload = {"real": [[1.0, 2.0], [3.0, 4.0]], "imag": [[0.5, 0.0], [0.0, -0.5]]}
    (tmp_path / "in.json").write_text(json.dumps(payload), encoding="utf-8")

    main(["roundtrip", str(tmp_path / "in.json"), "--out", str(tmp_path / "out.json")])

    assert json.loads((tmp_path / "out.json").read_text(encoding="utf-8")) == payload


def test_cli_prints_result(tmp_path: Path, capsys):
    (tmp_path / "in.json").write_text(json.dumps([[1, 2], [3, 4]]), encoding="utf-8")

    main(["roundtrip", str(tmp_path / "in.json")])

    out = capsys.readouterr().out
    assert out.startswith("# m [2, 2]")


def test_cli_without_command_prints_help(capsys):
    main([])

    assert "roundtrip" in capsys.readouterr().out


def test_cli_roundtrip_keeps_vector_shape(tmp_path: Path):
    source = np.array([1.0, -2.0, 3.5])
    np.save(tmp_path / "vec.npy", source)

    main(["roundtrip", str(tmp_path / "vec.npy"), "--out", str(tmp_path / "vec_out.npy")])

    restored = np.load(tmp_path / "vec_out.npy")
    assert restored.shape == (3,)
    np.testing.assert_array_equal(restored, source)
