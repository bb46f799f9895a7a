"""
Tests for the command-line interface.
"""

import pytest

from ..cli import main


class TestSimulateCommand:

    def test_prints_stats_table(self, capsys):
        main(["simulate", "-n", "2", "--players", "2", "--seed", "1", "--max-ticks", "50"])

        out = capsys.readouterr().out
        assert "Simulating 2 round(s) with 2 heuristic bot(s)" in out
        assert "Round 1:" in out
        assert "Round 2:" in out
        assert "Games played: 2" in out
        assert "Bot 2" in out

    def test_rejects_bad_round_count(self, capsys):
        with pytest.raises(SystemExit):
            main(["simulate", "-n", "0"])
        assert "--rounds" in capsys.readouterr().out

    def test_rejects_bad_player_count(self, capsys):
        with pytest.raises(SystemExit):
            main(["simulate", "--players", "12"])
        assert "player_count" in capsys.readouterr().out

    def test_no_command_prints_help(self):
        with pytest.raises(SystemExit):
            main([])
