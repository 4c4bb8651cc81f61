import hashlib
import io
import sys
from pathlib import Path

import pytest
import yaml

import sha256_cli
from sha256_cli import PROMPT, load_vectors, main, vector_input


VECTORS_PATH = Path(__file__).parent / "vectors.yaml"
ABC_DIGEST = "0x ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"


def _stdin(monkeypatch, raw: bytes):
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(raw), encoding="utf-8"))


def test_interactive_prompt_and_result(monkeypatch, capsys):
    _stdin(monkeypatch, b"abc\n")
    assert main([]) == 0
    out = capsys.readouterr().out
    assert out == PROMPT + f'SHA256("abc") = {ABC_DIGEST}\n'


def test_interactive_keeps_interior_spaces(monkeypatch, capsys):
    line = b"hello  world "
    _stdin(monkeypatch, line + b"\n")
    assert main([]) == 0
    out = capsys.readouterr().out
    expected = "0x " + hashlib.sha256(line).hexdigest()
    assert out.endswith(f'SHA256("hello  world ") = {expected}\n')


def test_interactive_empty_input(monkeypatch, capsys):
    _stdin(monkeypatch, b"")
    assert main([]) == 0
    out = capsys.readouterr().out
    assert out.endswith('SHA256("") = 0x ' + hashlib.sha256(b"").hexdigest() + "\n")


def test_message_argument(capsys):
    assert main(["abc"]) == 0
    assert capsys.readouterr().out == f'SHA256("abc") = {ABC_DIGEST}\n'


def test_yaml_output(capsys):
    assert main(["abc", "--format", "yaml"]) == 0
    record = yaml.safe_load(capsys.readouterr().out)
    assert record["digest"] == ABC_DIGEST
    assert record["hexdigest"] == ABC_DIGEST[3:]
    assert record["length"] == 3
    assert record["blocks"] == 1


def test_verbose_reports_counts(capsys):
    assert main(["abc", "-v"]) == 0
    assert "ingested 3 bytes in 1 blocks" in capsys.readouterr().err


def test_file_mode_streams_in_chunks(tmp_path, capsys, monkeypatch):
    monkeypatch.setattr(sha256_cli, "FILE_CHUNK_SIZE", 100)
    data = bytes((i * 31) & 0xFF for i in range(1000))
    path = tmp_path / "data.bin"
    path.write_bytes(data)

    assert main(["-f", str(path)]) == 0
    out = capsys.readouterr().out
    assert out == f"SHA256({path}) = 0x {hashlib.sha256(data).hexdigest()}\n"


def test_file_mode_missing_file(tmp_path, capsys):
    assert main(["-f", str(tmp_path / "missing.bin")]) == 1
    assert "Error reading file" in capsys.readouterr().err


def test_check_bundled_vectors(capsys):
    assert main(["--check", str(VECTORS_PATH)]) == 0
    out = capsys.readouterr().out
    assert "[FAIL]" not in out
    assert "0 failed" in out


def test_check_reports_mismatch(tmp_path, capsys):
    path = tmp_path / "bad.yaml"
    path.write_text(
        "vectors:\n"
        "  - name: wrong\n"
        "    message: abc\n"
        "    sha256: " + "0" * 64 + "\n",
        encoding="utf-8",
    )
    assert main(["--check", str(path)]) == 1
    out = capsys.readouterr().out
    assert "[FAIL] wrong" in out


def test_check_rejects_malformed_file(tmp_path, capsys):
    path = tmp_path / "malformed.yaml"
    path.write_text("- just a list\n", encoding="utf-8")
    assert main(["--check", str(path)]) == 1
    assert "Error loading vectors" in capsys.readouterr().err


def test_load_vectors_requires_one_input_field(tmp_path):
    path = tmp_path / "both.yaml"
    path.write_text(
        "vectors:\n"
        "  - message: abc\n"
        "    hex: '616263'\n"
        "    sha256: " + "0" * 64 + "\n",
        encoding="utf-8",
    )
    with pytest.raises(ValueError):
        load_vectors(str(path))


def test_vector_input_hex_and_repeat():
    assert vector_input({"hex": "6162", "repeat": 3}) == b"ababab"
    assert vector_input({"message": "abc"}) == b"abc"


def test_conflicting_modes_are_usage_errors(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["abc", "--check", str(VECTORS_PATH)])
    assert exc.value.code == 2


def test_interactive_hashes_and_echoes_raw_bytes(monkeypatch, capsysbinary):
    line = b"\xff\xfe"
    _stdin(monkeypatch, line + b"\n")
    assert main([]) == 0
    out = capsysbinary.readouterr().out
    expected = ("0x " + hashlib.sha256(line).hexdigest()).encode("ascii")
    assert out == PROMPT.encode("ascii") + b'SHA256("\xff\xfe") = ' + expected + b"\n"


def test_message_argument_with_undecodable_bytes(capsysbinary):
    # argv bytes that are not valid UTF-8 arrive as surrogate escapes.
    assert main(["a\udcffb"]) == 0
    out = capsysbinary.readouterr().out
    expected = ("0x " + hashlib.sha256(b"a\xffb").hexdigest()).encode("ascii")
    assert out == b'SHA256("a\xffb") = ' + expected + b"\n"


@pytest.mark.parametrize(
    "entry",
    [
        "    hex: zz\n",
        "    message: abc\n    repeat: many\n",
        "    message: abc\n    repeat: -1\n",
        "    message: abc\n    repeat: 1.5\n",
    ],
    ids=["bad-hex", "repeat-not-int", "repeat-negative", "repeat-float"],
)
def test_check_rejects_undecodable_entries(tmp_path, capsys, entry):
    path = tmp_path / "undecodable.yaml"
    path.write_text(
        "vectors:\n"
        "  - sha256: " + "0" * 64 + "\n" + entry,
        encoding="utf-8",
    )
    assert main(["--check", str(path)]) == 1
    captured = capsys.readouterr()
    assert "Error loading vectors" in captured.err
    assert "[SUMMARY]" not in captured.out


def test_load_vectors_decodes_inputs():
    vectors = load_vectors(str(VECTORS_PATH))
    by_name = {entry["name"]: entry for entry in vectors}
    assert by_name["abc"]["data"] == b"abc"
    assert by_name["single zero byte"]["data"] == b"\x00"
