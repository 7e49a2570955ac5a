"""Tests for the command-line front end."""

from main import main
from planner.state import decode_state, encode_state
from planner.tree import PALETTE, SubnetTree


def _run(capsys, *argv: str):
    code = main(list(argv))
    return code, capsys.readouterr().out


class TestWorkflow:
    """End-to-end plan editing through a state file."""

    def test_new_split_note_join(self, tmp_path, capsys) -> None:
        """A plan can be created, split, annotated and joined."""
        state = str(tmp_path / "plan.txt")

        code, out = _run(capsys, "new", "--network", "2001:db8::", "--prefix", "32",
                         "--state-file", state)
        assert code == 0
        assert "New plan: 2001:db8::/32" in out

        code, out = _run(capsys, "split", "2001:db8::/32", "--state-file", state)
        assert code == 0
        assert "16 subnets created" in out

        code, _ = _run(capsys, "note", "2001:db8:1000::/36", "Office", "--state-file", state)
        assert code == 0
        code, _ = _run(capsys, "color", "2001:db8:1000::/36", "0", "--state-file", state)
        assert code == 0

        with open(state) as fh:
            plan = decode_state(fh.read())
        node = plan.get_node("2001:db8:1000::/36")
        assert (node.note, node.color) == ("Office", PALETTE[0])

        code, out = _run(capsys, "join", "2001:db8:1000::/36", "--to", "32", "--state-file", state)
        assert code == 0
        assert "16 subnets removed" in out
        with open(state) as fh:
            assert len(decode_state(fh.read())) == 1

    def test_state_blob_is_printed(self, capsys) -> None:
        """Without a state file the new blob is printed."""
        blob = encode_state(SubnetTree("3fff::", 20))
        code, out = _run(capsys, "split", "3fff::/20", "--to", "22", "--state", blob)
        assert code == 0
        printed = out.strip().splitlines()[-1].split("State: ", 1)[1]
        assert len(decode_state(printed)) == 5

    def test_show_and_export(self, tmp_path, capsys) -> None:
        """show prints the table; export writes CSV."""
        plan = SubnetTree("3fff::", 20)
        plan.split("3fff::/20")
        blob = encode_state(plan)

        code, out = _run(capsys, "show", "--state", blob)
        assert code == 0
        assert "3fff:f00::/24" in out

        target = tmp_path / "plan.csv"
        code, out = _run(capsys, "export", "--output", str(target), "--state", blob)
        assert code == 0
        assert target.read_text(encoding="utf-8").startswith("Subnet,Contains,Note\n")


class TestErrors:
    """Planner errors become exit status 1."""

    def test_invalid_address(self, capsys) -> None:
        """A bad root address is reported, not raised."""
        code, out = _run(capsys, "new", "--network", "not-ipv6", "--prefix", "20")
        assert code == 1
        assert "ERROR: Invalid IPv6 address" in out

    def test_cannot_split_64(self, capsys) -> None:
        """Splitting a /64 is reported."""
        blob = encode_state(SubnetTree("2001:db8::", 64))
        code, out = _run(capsys, "split", "2001:db8::/64", "--state", blob)
        assert code == 1
        assert "ERROR" in out

    def test_bad_state_falls_back(self, capsys) -> None:
        """An undecodable state warns and continues from the default plan."""
        code, out = _run(capsys, "show", "--state", "garbage!")
        assert code == 0
        assert "WARNING" in out
        assert "3fff::/20" in out

    def test_non_ascii_state_falls_back(self, capsys) -> None:
        """A state string with stray non-ASCII text also falls back."""
        code, out = _run(capsys, "show", "--state", "#plan=é")
        assert code == 0
        assert "WARNING" in out
        assert "3fff::/20" in out
