from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import numpy as np

from .core.matrix import MatrixValue
from .engine import LocalEngine
from .processor import MatrixProcessor


def _load_array(path: Path) -> np.ndarray:
    try:
        if str(path).lower().endswith(".json"):
            payload = json.loads(path.read_text(encoding="utf-8"))
            if isinstance(payload, dict) and "real" in payload:
                arr = np.asarray(payload["real"], dtype=np.float64)
                if payload.get("imag") is not None:
                    arr = arr + 1j * np.asarray(payload["imag"], dtype=np.float64)
                return arr
            return np.asarray(payload, dtype=np.float64)
        return np.load(path)
    except FileNotFoundError as exc:  # pragma: no cover - defensive
        raise SystemExit(f"Input file not found: {path}") from exc


def _write_output(path: Path, array: np.ndarray) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if str(path).lower().endswith(".json"):
        if np.iscomplexobj(array):
            payload: Any = {"real": array.real.tolist(), "imag": array.imag.tolist()}
        else:
            payload = array.tolist()
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    else:
        np.save(path, array)


def _roundtrip(input_path: Path, name: str, out: Optional[Path]) -> None:
    engine = LocalEngine()
    processor = MatrixProcessor(engine)
    source = _load_array(input_path)
    processor.set_matrix(name, MatrixValue.from_array(source))
    # The engine stores vectors and scalars as 2-D; restore the input shape.
    result = processor.get_matrix(name).to_array().reshape(source.shape, order="F")
    if out is None:
        np.set_printoptions(suppress=True)
        print(f"# {name} {list(result.shape)}")
        print(result)
        return
    _write_output(out, result)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="matbridge command line utilities")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log engine commands")
    subparsers = parser.add_subparsers(dest="cmd")

    rt_parser = subparsers.add_parser(
        "roundtrip", help="Store an array in a local engine and read it back"
    )
    rt_parser.add_argument("input", type=Path, help="Path to a .npy or .json array")
    rt_parser.add_argument("--name", default="m", help="Engine variable name (default: m)")
    rt_parser.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Optional output path (.npy/.json). If omitted, prints the result",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.cmd == "roundtrip":
        _roundtrip(args.input, name=args.name, out=args.out)
        return

    parser.print_help()


if __name__ == "__main__":  # pragma: no cover
    main(sys.argv[1:])
