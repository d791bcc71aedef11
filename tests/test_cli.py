import argparse

import pytest

from lfsr_entropy import cli


@pytest.fixture
def data_file(tmp_path):
    path = tmp_path / "sample.bin"
    path.write_bytes(bytes((i * 37 + 11) & 0xFF for i in range(1024)))
    return path


def test_parse_range():
    assert cli.parse_range("0:16") == range(0, 16)
    assert cli.parse_range("0x10:0x20") == range(16, 32)
    assert cli.parse_range(":4") == range(0, 4)
    assert cli.parse_range("65530:") == range(65530, 65536)
    assert cli.parse_range("7") == range(7, 8)
    for bad in ("a:b", "5:2", "0:70000"):
        with pytest.raises(argparse.ArgumentTypeError):
            cli.parse_range(bad)


def test_search_command(data_file, capsys):
    rc = cli.main(["--data", str(data_file), "search", "--masks", "1:2", "--taps", "0:8", "--window", "64"])
    assert rc == 0
    out = capsys.readouterr().out
    assert out.startswith("Entropy(data)")
    assert "[+] mask=0x8001 tap=0x0000" in out
    assert "[*] Best:" in out


def test_search_compressed_command(data_file, capsys):
    rc = cli.main(["--data", str(data_file), "search", "--masks", "1:2", "--taps", "0:4", "--window", "64",
                   "--score", "compressed", "--compressor", "zlib"])
    assert rc == 0
    assert "compressed=" in capsys.readouterr().out


def test_missing_data_is_fatal(tmp_path, capsys):
    rc = cli.main(["--data", str(tmp_path / "nope.bin"), "search", "--masks", "0:1", "--taps", "0:1"])
    assert rc == 1
    assert "Error:" in capsys.readouterr().err


def test_fetch_flag_runs_fetch(tmp_path, monkeypatch, capsys):
    written = {}

    def fake_fetch(path, url, min_bits, timeout):
        written["path"] = path
        return b"\x00" * 1024

    monkeypatch.setattr(cli, "fetch_sample", fake_fetch)
    assert cli.main(["--fetch"]) == 0
    assert written["path"] == cli.DEFAULT_QUANTUM
    assert "1024 bytes written" in capsys.readouterr().out


def test_histogram_command(tmp_path, capsys):
    out = tmp_path / "h.png"
    rc = cli.main(["histogram", "--out", str(out), "--width", "4"])
    assert rc == 0
    assert out.exists()
    lines = capsys.readouterr().out.splitlines()
    # mask 0x8 only feeds the low bit back to the top: a rotation of period 4
    assert lines[0] == "0x08 4"


def test_search_accepts_data_after_subcommand(data_file, capsys):
    rc = cli.main(["search", "--data", str(data_file), "--masks", "1:2", "--taps", "0:2", "--window", "64"])
    assert rc == 0
    assert "[+] mask=0x8001 tap=0x0000" in capsys.readouterr().out


def test_search_without_data_keeps_root_default():
    args = cli.build_argparser().parse_args(["search"])
    assert args.data == cli.DEFAULT_DATA
