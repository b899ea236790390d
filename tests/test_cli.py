"""
Tests for the Command-Line Interface
====================================
"""

import json

import pytest
from click.testing import CliRunner

from crcs.cli import main
from crcs.config import get_settings
from crcs.issuer import open_attribute, verify_credential
from crcs.session import SessionBinder
from crcs.signing import SchnorrScheme
from crcs.storage import load_credential, load_session


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def _issue(runner, tmp_path, *extra):
    out = tmp_path / "credential.json"
    result = runner.invoke(
        main, ["issue", "--age", "22", "--income", "600000", "--out", str(out), *extra],
    )
    return result, out


class TestIssueCommand:
    """crcs issue."""

    def test_writes_credential(self, runner, tmp_path):
        """Issue writes a verifiable credential and confirms on stdout."""
        result, out = _issue(runner, tmp_path)
        assert result.exit_code == 0, result.output
        assert "Credential issued" in result.output
        cred = load_credential(out)
        assert verify_credential(cred)
        assert open_attribute(cred, "age") == 22
        assert open_attribute(cred, "income") == 600_000

    def test_print_metrics(self, runner, tmp_path):
        """--print-metrics reports time and size."""
        result, out = _issue(runner, tmp_path, "--print-metrics")
        assert result.exit_code == 0
        assert "--- Metrics ---" in result.output
        assert f"{out.stat().st_size} bytes" in result.output

    def test_default_output_path(self, runner, tmp_path):
        """Without --out the credential lands in credential.json."""
        with runner.isolated_filesystem(temp_dir=tmp_path):
            result = runner.invoke(main, ["issue", "--age", "1", "--income", "2"])
            assert result.exit_code == 0
            load_credential("credential.json")

    def test_negative_age_rejected(self, runner, tmp_path):
        """Values outside u64 are usage errors."""
        result = runner.invoke(
            main, ["issue", "--age", "-1", "--income", "1", "--out", str(tmp_path / "c.json")],
        )
        assert result.exit_code == 2
        assert not (tmp_path / "c.json").exists()

    def test_schnorr_from_environment(self, runner, tmp_path, monkeypatch):
        """CRCS_SIGNATURE_ALGORITHM selects the signing scheme."""
        monkeypatch.setenv("CRCS_SIGNATURE_ALGORITHM", "schnorr-secp256k1")
        result, out = _issue(runner, tmp_path)
        assert result.exit_code == 0
        assert verify_credential(load_credential(out), SchnorrScheme())

    def test_write_failure_is_fatal(self, runner, tmp_path):
        """An unwritable output path exits 1 with a diagnostic."""
        out = tmp_path / "missing" / "credential.json"
        result = runner.invoke(
            main, ["issue", "--age", "1", "--income", "2", "--out", str(out)],
        )
        assert result.exit_code == 1
        assert "Error" in result.output
        assert not out.exists()


class TestSessionCommand:
    """crcs session."""

    def test_creates_session(self, runner, tmp_path):
        """Session embeds defaults and binds to the credential."""
        _, cred_path = _issue(runner, tmp_path)
        out = tmp_path / "session.json"
        result = runner.invoke(
            main, ["session", "--cred", str(cred_path), "--verifier", "BANK_A", "--out", str(out)],
        )
        assert result.exit_code == 0, result.output
        assert "Session created" in result.output
        assert "BANK_A" in result.output
        session = load_session(out)
        assert session.thresholds == {"age_min": 18, "income_min": 500_000}
        assert SessionBinder().verify_binding(load_credential(cred_path), session)

    def test_custom_thresholds(self, runner, tmp_path):
        """--min-age / --min-income override the defaults."""
        _, cred_path = _issue(runner, tmp_path)
        out = tmp_path / "session.json"
        result = runner.invoke(main, [
            "session", "--cred", str(cred_path), "--verifier", "INSURANCE_B",
            "--min-age", "21", "--min-income", "100", "--out", str(out), "--print-metrics",
        ])
        assert result.exit_code == 0
        assert "--- Metrics ---" in result.output
        doc = json.loads(out.read_text())
        assert doc["thresholds"] == {"age_min": 21, "income_min": 100}
        assert doc["verifier_id"] == "INSURANCE_B"

    def test_two_verifiers_unlinkable(self, runner, tmp_path):
        """Sessions for two verifiers share no SC values."""
        _, cred_path = _issue(runner, tmp_path)
        docs = []
        for verifier in ("BANK_A", "INSURANCE_B"):
            out = tmp_path / f"{verifier}.json"
            runner.invoke(
                main, ["session", "--cred", str(cred_path), "--verifier", verifier, "--out", str(out)],
            )
            docs.append(json.loads(out.read_text()))
        assert docs[0]["nonce"] != docs[1]["nonce"]
        assert docs[0]["public"]["age"]["SC"] != docs[1]["public"]["age"]["SC"]

    def test_missing_credential(self, runner, tmp_path):
        """A missing credential file is fatal and writes nothing."""
        out = tmp_path / "session.json"
        result = runner.invoke(main, [
            "session", "--cred", str(tmp_path / "nope.json"), "--verifier", "BANK_A",
            "--out", str(out),
        ])
        assert result.exit_code == 1
        assert not out.exists()

    def test_malformed_credential(self, runner, tmp_path):
        """A malformed credential file is fatal and writes nothing."""
        cred_path = tmp_path / "credential.json"
        cred_path.write_text('{"credential_id": 5}')
        out = tmp_path / "session.json"
        result = runner.invoke(main, [
            "session", "--cred", str(cred_path), "--verifier", "BANK_A", "--out", str(out),
        ])
        assert result.exit_code == 1
        assert not out.exists()


class TestVerifyCommand:
    """crcs verify."""

    def test_valid(self, runner, tmp_path):
        """A freshly issued credential verifies."""
        _, cred_path = _issue(runner, tmp_path)
        result = runner.invoke(main, ["verify", "--cred", str(cred_path)])
        assert result.exit_code == 0, result.output
        assert "is valid" in result.output

    def test_tampered(self, runner, tmp_path):
        """A modified commitment fails verification."""
        _, cred_path = _issue(runner, tmp_path)
        doc = json.loads(cred_path.read_text())
        doc["attributes"]["age"]["C"] = "1"
        cred_path.write_text(json.dumps(doc))
        result = runner.invoke(main, ["verify", "--cred", str(cred_path)])
        assert result.exit_code == 1


class TestConfigurationErrors:
    """Bad settings end in a diagnostic, never a traceback."""

    @pytest.mark.parametrize("command", ["issue", "session", "verify"])
    def test_bad_mimc_exponent(self, runner, tmp_path, monkeypatch, command):
        """An exponent that is not a permutation exits 1 on every command."""
        _, cred_path = _issue(runner, tmp_path)
        monkeypatch.setenv("CRCS_MIMC_EXPONENT", "2")
        get_settings.cache_clear()
        out = tmp_path / "out.json"
        args = {
            "issue": ["issue", "--age", "22", "--income", "1", "--out", str(out)],
            "session": ["session", "--cred", str(cred_path), "--verifier", "BANK_A",
                        "--out", str(out)],
            "verify": ["verify", "--cred", str(cred_path)],
        }[command]
        result = runner.invoke(main, args)
        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "permutation" in result.output
        assert not out.exists()

    def test_invalid_settings(self, runner, tmp_path, monkeypatch):
        """Settings that fail validation exit 1."""
        monkeypatch.setenv("CRCS_MIN_AGE", "-5")
        result = runner.invoke(
            main, ["issue", "--age", "1", "--income", "2", "--out", str(tmp_path / "c.json")],
        )
        assert result.exit_code == 1
        assert "invalid configuration" in result.output

    def test_oversized_commitment(self, runner, tmp_path):
        """A 5000-digit commitment fails verification without a traceback."""
        _, cred_path = _issue(runner, tmp_path)
        doc = json.loads(cred_path.read_text())
        doc["attributes"]["age"]["C"] = "9" * 5000
        cred_path.write_text(json.dumps(doc))

        result = runner.invoke(main, ["verify", "--cred", str(cred_path)])
        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
