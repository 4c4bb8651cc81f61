"""Command-line front end for the streaming SHA-256 engine.

Usage:
    python sha256_cli.py                      # interactive prompt
    python sha256_cli.py "message"
    python sha256_cli.py -f path/to/file
    python sha256_cli.py "message" --format yaml
    python sha256_cli.py --check vectors.yaml

Without arguments the program asks for one line on stdin and prints
`SHA256("<line>") = <digest>`, echoing the line's raw bytes. With a message
argument the argument's bytes (as `os.fsencode` gives them) are hashed; with
`-f` the raw bytes of the file are fed to the engine in chunks. `--check` verifies a YAML file of reference vectors.
"""

from __future__ import annotations

import argparse
import os
import sys
from typing import Any, Dict, List, Optional

import yaml

from sha256_engine import Sha256Error, Sha256Hasher


PROMPT = "Enter a string to hash with SHA256: "

# Read size used when feeding files to the engine.
FILE_CHUNK_SIZE = 64 * 1024


def _result_line(label: bytes, digest: str) -> bytes:
    return b"SHA256(" + label + b") = " + digest.encode("ascii") + b"\n"


def _yaml_record(label: bytes, hasher: Sha256Hasher, digest: str) -> str:
    record = {
        "input": label.decode("utf-8", errors="replace"),
        "length": hasher.length,
        "blocks": hasher.blocks,
        "digest": digest,
        "hexdigest": hasher.hexdigest(),
    }
    return yaml.safe_dump(record, default_flow_style=False, sort_keys=False)


def _write_bytes(line: bytes) -> None:
    """Write raw bytes to stdout so the echoed input is reproduced exactly."""
    stream = getattr(sys.stdout, "buffer", None)
    if stream is None:
        sys.stdout.write(line.decode("utf-8", errors="replace"))
        return
    sys.stdout.flush()
    stream.write(line)
    stream.flush()


def _emit(args, label: bytes, hasher: Sha256Hasher) -> None:
    digest = hasher.finalize()
    if args.verbose:
        sys.stderr.write(f"ingested {hasher.length} bytes in {hasher.blocks} blocks\n")
    if args.format == "yaml":
        sys.stdout.write(_yaml_record(label, hasher, digest))
    else:
        _write_bytes(_result_line(label, digest))


def _read_line() -> bytes:
    """Read one line of raw bytes from stdin without its trailing newline."""
    stream = getattr(sys.stdin, "buffer", None)
    if stream is not None:
        line = stream.readline()
    else:
        line = sys.stdin.readline().encode("utf-8")
    if line.endswith(b"\n"):
        line = line[:-1]
    return line


def run_interactive(args) -> int:
    """Prompt for a line, hash it and print the result."""
    print(PROMPT, end="", flush=True)
    message = _read_line()
    _emit(args, b'"' + message + b'"', Sha256Hasher(message))
    return 0


def run_file(args) -> int:
    hasher = Sha256Hasher()
    try:
        with open(args.file, "rb") as f:
            for chunk in iter(lambda: f.read(FILE_CHUNK_SIZE), b""):
                hasher.ingest(chunk)
    except OSError as e:
        sys.stderr.write(f"Error reading file '{args.file}': {e}\n")
        return 1
    _emit(args, os.fsencode(args.file), hasher)
    return 0


def load_vectors(path: str) -> List[Dict[str, Any]]:
    """Load reference vectors from a YAML file.

    The file must hold a mapping with a `vectors` list; each entry needs a
    `sha256` value and one of `message` or `hex`, plus an optional
    non-negative integer `repeat`. Every entry's input is decoded here, so
    a malformed file fails with `ValueError` before anything is hashed.
    The returned entries carry the decoded bytes under `data`.
    """
    with open(path, "r", encoding="utf-8") as f:
        doc = yaml.safe_load(f)

    if not isinstance(doc, dict) or not isinstance(doc.get("vectors"), list):
        raise ValueError(f"{path}: expected a mapping with a 'vectors' list")

    vectors = []
    for i, entry in enumerate(doc["vectors"]):
        if not isinstance(entry, dict) or "sha256" not in entry:
            raise ValueError(f"{path}: vector {i} has no 'sha256' value")
        if ("message" in entry) == ("hex" in entry):
            raise ValueError(f"{path}: vector {i} needs exactly one of 'message' or 'hex'")
        try:
            data = vector_input(entry)
        except ValueError as e:
            raise ValueError(f"{path}: vector {i}: {e}") from e
        vectors.append(dict(entry, data=data))
    return vectors


def vector_input(entry: Dict[str, Any]) -> bytes:
    """Return the message bytes described by a vector entry."""
    repeat = entry.get("repeat", 1)
    if isinstance(repeat, bool) or not isinstance(repeat, int) or repeat < 0:
        raise ValueError(f"'repeat' must be a non-negative integer, got {repeat!r}")
    if "hex" in entry:
        data = bytes.fromhex(str(entry["hex"]))
    else:
        data = str(entry["message"]).encode("utf-8")
    return data * repeat


def run_check(args) -> int:
    try:
        vectors = load_vectors(args.check)
    except (OSError, ValueError, yaml.YAMLError) as e:
        sys.stderr.write(f"Error loading vectors '{args.check}': {e}\n")
        return 1

    passed = 0
    failed = 0
    for i, entry in enumerate(vectors):
        name = entry.get("name", f"vector {i + 1}")
        expected = str(entry["sha256"]).lower()
        actual = Sha256Hasher(entry["data"]).hexdigest()
        if actual == expected:
            passed += 1
            print(f"[OK] {name}")
        else:
            failed += 1
            print(f"[FAIL] {name}: expected {expected}, got {actual}")

    print(f"\n[SUMMARY] {passed} passed, {failed} failed")
    return 0 if failed == 0 else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Compute SHA-256 digests with a pure-Python engine"
    )
    parser.add_argument(
        "message",
        nargs="?",
        help="Message to hash. Prompts on stdin when omitted.",
    )
    parser.add_argument(
        "-f",
        "--file",
        type=str,
        help="Hash the raw bytes of this file",
    )
    parser.add_argument(
        "--check",
        type=str,
        metavar="VECTORS",
        help="Verify the engine against a YAML file of reference vectors",
    )
    parser.add_argument(
        "--format",
        type=str,
        choices=["text", "yaml"],
        default="text",
        help="Output format: text or yaml (default: text)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Report byte and block counts on stderr",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    modes = [args.message is not None, args.file is not None, args.check is not None]
    if sum(modes) > 1:
        parser.error("give at most one of MESSAGE, --file or --check")

    try:
        if args.check is not None:
            return run_check(args)
        if args.file is not None:
            return run_file(args)
        if args.message is not None:
            message = os.fsencode(args.message)
            _emit(args, b'"' + message + b'"', Sha256Hasher(message))
            return 0
        return run_interactive(args)
    except Sha256Error as e:
        sys.stderr.write(f"Error: {e}\n")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
