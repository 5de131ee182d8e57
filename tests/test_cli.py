"""
Tests for the settle_tournament and check_settlement command-line tools.
"""
import sys

import pandas as pd
import pytest
from loguru import logger

from Backend import check_settlement, settle_tournament
from Backend.fee_schedule import FeeOverrides, resolve, save_overrides
from Backend.logging_setup import configure_logging
from Backend.records import Entrant
from Backend.settlement import settle


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    logger.remove()
    logger.add(sys.stderr, level="WARNING")
    logger.disable("Backend")


@pytest.fixture
def entrants_csv(tmp_path):
    path = tmp_path / "Entrants" / "600_10_18.csv"
    path.parent.mkdir()
    pd.DataFrame({
        "Member ID": ["105", "203", "311"],
        "Buy Ins": [1, 1, 1],
        "Final Chips": [40000, 25000, 10000],
    }).to_csv(path, index=False)
    return path


class TestSettleTournament:

    def test_tier_run_writes_sheet(self, entrants_csv, tmp_path, capsys):
        out = settle_tournament.run(["--csv", str(entrants_csv), "--entry-fee", "600"])

        assert out.resolve() == (tmp_path / "Settlements" / "600_10_18_settlement.csv").resolve()
        sheet = pd.read_csv(out, dtype={"Member ID": str})
        assert list(sheet["Member ID"]) == ["105", "203", "311"]
        assert list(sheet["Total"]) == [1000, 400, 100]
        assert list(sheet["Stake Bonus"]) == [100, 0, 0]
        assert "✅" in capsys.readouterr().out

    def test_overrides_file(self, entrants_csv, tmp_path):
        overrides = tmp_path / "admin_fees.csv"
        save_overrides(FeeOverrides({600: 0}), overrides)
        out = settle_tournament.run(["--csv", str(entrants_csv), "--entry-fee", "600",
                                     "--overrides", str(overrides), "--out", str(tmp_path / "o.csv")])
        assert pd.read_csv(out)["Total"].sum() == 1800

    def test_custom_run(self, entrants_csv, tmp_path):
        out = settle_tournament.run(["--csv", str(entrants_csv), "--custom", "--entry-fee", "1000",
                                     "--admin-fee", "100", "--activity-bonus", "300",
                                     "--out", str(tmp_path / "custom.csv")])
        assert pd.read_csv(out)["Total"].sum() == 2400

    def test_unknown_tier_exits(self, entrants_csv):
        with pytest.raises(SystemExit):
            settle_tournament.run(["--csv", str(entrants_csv), "--entry-fee", "999"])

    def test_missing_file_exits(self, tmp_path):
        with pytest.raises(SystemExit):
            settle_tournament.run(["--csv", str(tmp_path / "nope.csv"), "--entry-fee", "600"])


class TestCheckSettlement:

    def test_balanced_sheet_passes(self, entrants_csv, capsys):
        out = settle_tournament.run(["--csv", str(entrants_csv), "--entry-fee", "600"])
        check_settlement.main(["--entrants", str(entrants_csv), "--payout", str(out), "--entry-fee", "600"])
        assert "✅" in capsys.readouterr().out

    def test_tampered_sheet_fails(self, entrants_csv):
        out = settle_tournament.run(["--csv", str(entrants_csv), "--entry-fee", "600"])
        sheet = pd.read_csv(out, dtype={"Member ID": str})
        sheet.loc[1, "Total"] = 500
        sheet.to_csv(out, index=False)

        with pytest.raises(SystemExit) as exc:
            check_settlement.main(["--entrants", str(entrants_csv), "--payout", str(out), "--entry-fee", "600"])
        assert exc.value.code == 1

    def test_check_reports_missing_and_extra(self, entrants_csv):
        entrants = pd.read_csv(entrants_csv, dtype={"Member ID": str})
        payout = pd.DataFrame({"Member ID": ["105", "999"], "Total": [1000, 400]})
        bad = check_settlement.check(entrants, payout, resolve(600))
        whys = dict(bad)
        assert whys["203"] == "missing from payout sheet"
        assert whys["311"] == "missing from payout sheet"
        assert whys["999"] == "not an entrant"
        assert whys["TOTAL"] == "paid 1400 but net pool is 1500"

    def test_matching_total_is_not_flagged(self, entrants_csv):
        entrants = pd.read_csv(entrants_csv, dtype={"Member ID": str})
        payout = pd.DataFrame({"Member ID": ["105", "999"], "Total": [1000, 500]})
        whys = dict(check_settlement.check(entrants, payout, resolve(600)))
        assert "TOTAL" not in whys
        assert whys["999"] == "not an entrant"

    def test_only_total_wrong(self, entrants_csv):
        entrants = pd.read_csv(entrants_csv, dtype={"Member ID": str})
        payout = pd.DataFrame({"Member ID": ["105", "203", "311"], "Total": [1000, 400, 200]})
        bad = check_settlement.check(entrants, payout, resolve(600))
        assert bad == [("TOTAL", "paid 1600 but net pool is 1500")]


class TestLogging:

    @pytest.fixture
    def captured(self):
        messages = []
        sink = logger.add(messages.append, level="DEBUG", format="{message}")
        yield messages
        logger.remove(sink)

    def test_library_is_quiet_by_default(self, captured, scenario_b_schedule, scenario_b_entrants):
        settle(scenario_b_schedule, [Entrant("x", 1, 0), Entrant("y", 1, 0)])
        settle(scenario_b_schedule, scenario_b_entrants)
        assert captured == []

    def test_configure_logging_turns_it_on(self, scenario_b_schedule, scenario_b_entrants):
        configure_logging(verbose=True)
        messages = []
        logger.add(messages.append, level="DEBUG", format="{message}")
        settle(scenario_b_schedule, scenario_b_entrants)
        assert any("3 groups, gross 1500" in m for m in messages)

    def test_log_file_flag(self, entrants_csv, tmp_path):
        log = tmp_path / "logs" / "settle.log"
        settle_tournament.run(["--csv", str(entrants_csv), "--entry-fee", "600",
                               "--log-file", str(log)])
        logger.remove()
        text = log.read_text()
        assert "Read 3 entrants" in text
        assert "DEBUG" in text
