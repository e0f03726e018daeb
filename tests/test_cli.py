import io
import pytest
from decimal import Decimal
from unittest.mock import patch

import config
from main import main, run_command, run_session
from services import AccountManager


@pytest.fixture
def atm():
    return AccountManager()


class TestCommands:
    """Test the command dispatcher."""

    def test_register_and_withdraw(self, atm):
        assert run_command(atm, "register 12345678 1234 Sam Sepiol 300.30") == "Registered 12345678 for Sam Sepiol"
        assert run_command(atm, "withdraw 12345678 1234 20") == "Balance: $280.30"
        assert atm.check_balance(12345678, 1234) == Decimal("280.30")

    def test_quoted_owner_name(self, atm):
        run_command(atm, 'register 1 2 "Ada  Lovelace" 10')
        assert "Ada  Lovelace" in run_command(atm, "accounts")

    def test_deposit_and_balance(self, atm):
        run_command(atm, "register 1 2 Someone 10")
        assert run_command(atm, "deposit 1 2 5.5") == "Balance: $15.50"
        assert run_command(atm, "BALANCE 1 2") == "Balance: $15.50"

    def test_errors_are_rendered(self, atm):
        assert run_command(atm, "balance 1 2") == "error[key_not_found]: Account 1/2 not found"

        run_command(atm, "register 1 2 Someone 10")
        assert run_command(atm, "withdraw 1 2 -5").startswith("error[invalid_argument]")
        assert run_command(atm, "withdraw 1 2 50").startswith("error[insufficient_funds]")
        assert run_command(atm, "register 1 2 Someone 10").startswith("error[duplicate_key]")
        assert atm.check_balance(1, 2) == 10

    def test_usage_messages(self, atm):
        assert run_command(atm, "deposit 1 2").startswith("usage: deposit")
        assert run_command(atm, "balance one two") == "usage: account number and pin must be integers"
        assert run_command(atm, "register 1 2 100").startswith("usage: register")
        assert run_command(atm, "fly 1 2").startswith("unknown command")
        assert run_command(atm, 'register 1 2 "unterminated 10').startswith("error:")
        assert run_command(atm, "   ") == ""

    def test_ledger_command(self, atm, tmp_path):
        path = tmp_path / "out.txt"
        run_command(atm, "register 20221010 1010 Henry 200")
        run_command(atm, "deposit 20221010 1010 100")

        assert run_command(atm, f"ledger {path} 20221010 1010") == f"Ledger written to {path}"
        assert path.read_text() == "Deposit - Amount: $100.00, Updated Balance: $300.00\n"

    def test_unwritable_ledger_path_keeps_session(self, atm, tmp_path):
        out = io.StringIO()
        bad_path = tmp_path / "no" / "such" / "dir" / "ledger.txt"
        lines = [
            "register 1 2 Someone 10",
            f"ledger {bad_path} 1 2",
            "balance 1 2",
        ]

        executed = run_session(atm, lines, out)

        responses = out.getvalue().splitlines()
        assert executed == 3
        assert responses[1].startswith("error: ")
        assert responses[2] == "Balance: $10.00"
        assert not bad_path.exists()

    def test_ledger_default_path(self, atm, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        run_command(atm, "register 1 2 Someone 10")

        assert run_command(atm, "ledger 1 2") == "Ledger written to ledger.txt"
        assert (tmp_path / "ledger.txt").read_text() == ""

    def test_accounts_listing(self, atm):
        assert run_command(atm, "accounts") == "No accounts registered"
        run_command(atm, "register 1 2 First 10")
        run_command(atm, "register 3 4 Second -5")
        assert run_command(atm, "accounts") == "1: First $10.00\n3: Second $-5.00"


class TestSession:
    """Test whole sessions."""

    def test_session_stops_at_quit(self, atm):
        out = io.StringIO()
        lines = [
            "# comment",
            "register 12345678 1234 Sam Sepiol 300.30",
            "",
            "withdraw 12345678 1234 20",
            "quit",
            "deposit 12345678 1234 1000",
        ]

        executed = run_session(atm, lines, out)

        assert executed == 2
        assert out.getvalue().splitlines() == ["Registered 12345678 for Sam Sepiol", "Balance: $280.30"]
        assert atm.check_balance(12345678, 1234) == Decimal("280.30")

    @patch("main.configure_logging")
    def test_main_runs_script(self, mock_configure, tmp_path, capsys):
        ledger = tmp_path / "ledger.txt"
        script = tmp_path / "commands.txt"
        script.write_text(
            "register 20221010 1010 Henry 200.0\n"
            "deposit 20221010 1010 100.0\n"
            "withdraw 20221010 1010 50.0\n"
            f"ledger {ledger} 20221010 1010\n"
        )

        assert main(["--env", "testing", "--script", str(script)]) == 0

        mock_configure.assert_called_once()
        assert "Balance: $250.00" in capsys.readouterr().out
        assert ledger.read_text().splitlines() == [
            "Deposit - Amount: $100.00, Updated Balance: $300.00",
            "Withdrawal - Amount: $50.00, Updated Balance: $250.00",
        ]

    @patch("main.configure_logging")
    def test_main_log_level_override(self, mock_configure, tmp_path):
        script = tmp_path / "empty.txt"
        script.write_text("")

        main(["--env", "testing", "--log-level", "DEBUG", "--script", str(script)])

        settings = mock_configure.call_args[0][0]
        assert settings.log_level == "DEBUG"


class TestSettings:
    """Test configuration profiles."""

    def test_environment_profiles(self):
        assert isinstance(config.get_settings_for_environment("testing"), config.TestingSettings)
        assert config.get_settings_for_environment("testing").log_level == "WARNING"
        assert config.get_settings_for_environment("DEVELOPMENT").log_format == "text"
        assert type(config.get_settings_for_environment("staging")) is config.Settings

    def test_env_var_override(self, monkeypatch):
        monkeypatch.setenv("ATM_LOG_LEVEL", "ERROR")
        monkeypatch.setenv("ATM_DEFAULT_LEDGER_PATH", "out/ledger.txt")

        settings = config.Settings()

        assert settings.log_level == "ERROR"
        assert settings.default_ledger_path == "out/ledger.txt"
