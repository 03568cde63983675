"""Tests for the ipacl command-line tool."""
import pytest

from ipacl.cli import main


@pytest.fixture()
def hosts_file(tmp_path):
    path = tmp_path / "hosts.txt"
    path.write_text("10.0.0.2\n::1\n10.0.0.10\n")
    return path


@pytest.fixture()
def nets_file(tmp_path):
    path = tmp_path / "nets.txt"
    path.write_text("10.0.0.0/8\n192.168.1.0/24\n")
    return path


class TestCheck:

    def test_permitted(self, hosts_file, capsys):
        assert main(["check", str(hosts_file), "10.0.0.2", "::1"]) == 0
        out = capsys.readouterr().out
        assert "10.0.0.2: permitted" in out
        assert "::1: permitted" in out

    def test_denied(self, hosts_file, capsys):
        assert main(["check", str(hosts_file), "10.0.0.3"]) == 1
        assert "10.0.0.3: denied" in capsys.readouterr().out

    def test_invalid_address(self, hosts_file, capsys):
        assert main(["check", str(hosts_file), "nope"]) == 1
        assert "invalid address" in capsys.readouterr().err

    def test_networks(self, nets_file):
        assert main(["check", str(nets_file), "10.9.8.7", "--networks"]) == 0
        assert main(["check", str(nets_file), "192.168.2.1", "--networks"]) == 1

    def test_malformed_file(self, tmp_path, capsys):
        path = tmp_path / "bad.txt"
        path.write_text("10.0.0.1\nbogus\n")
        assert main(["check", str(path), "10.0.0.1"]) == 2
        assert "invalid address" in capsys.readouterr().err

    def test_missing_file(self, tmp_path):
        assert main(["check", str(tmp_path / "missing.txt"), "10.0.0.1"]) == 2


class TestDump:

    def test_sorted(self, hosts_file, capsys):
        assert main(["dump", str(hosts_file)]) == 0
        assert capsys.readouterr().out == "10.0.0.10\n10.0.0.2\n::1\n"

    def test_networks_keep_order(self, nets_file, capsys):
        assert main(["dump", str(nets_file), "--networks"]) == 0
        assert capsys.readouterr().out == "10.0.0.0/8\n192.168.1.0/24\n"


class TestToJSON:

    def test_networks(self, nets_file, capsys):
        assert main(["to-json", str(nets_file), "--networks"]) == 0
        assert capsys.readouterr().out == '"10.0.0.0/8,192.168.1.0/24"\n'

    def test_hosts(self, hosts_file, capsys):
        assert main(["to-json", str(hosts_file)]) == 0
        out = capsys.readouterr().out.strip()
        assert set(out.strip('"').split(",")) == {"10.0.0.2", "::1", "10.0.0.10"}

    def test_binary_file(self, tmp_path, capsys):
        path = tmp_path / "bin.txt"
        path.write_bytes(b"\xff\xfe\x00")
        assert main(["dump", str(path)]) == 2
        assert "invalid allowlist" in capsys.readouterr().err
