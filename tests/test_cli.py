import json

from typer.testing import CliRunner

from neonatal_iwl.cli import app

runner = CliRunner()


def test_calculate_with_factors() -> None:
    result = runner.invoke(app, ["calculate", "--weight", "1200", "--factor", "radiantWarmer", "-f", "fever"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["band"] == "1001-1250 g"
    assert payload["baseline_rate"] == 55.0
    assert payload["applied_multiplier"] == 2.45
    assert payload["per_kg_per_day_rate"] == 134.75
    assert payload["total_ml_per_day"] == 161.7
    assert payload["applied_factors"] == ["radiantWarmer", "fever"]
    assert payload["trace"][-1] == "Total IWL: 134.75 mL/kg/day x 1.2 kg = 161.70 mL/day"


def test_calculate_reports_skipped_phototherapy() -> None:
    result = runner.invoke(app, ["calculate", "--weight", "2500", "--factor", "phototherapy"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["per_kg_per_day_rate"] == 17.5
    assert payload["skipped_factors"] == ["phototherapy"]


def test_calculate_rejects_invalid_weight() -> None:
    result = runner.invoke(app, ["calculate", "--weight", "200"])
    assert result.exit_code == 2
    assert "above 200 g" in result.output


def test_calculate_rejects_negative_weight() -> None:
    result = runner.invoke(app, ["calculate", "--weight=-5"])
    assert result.exit_code == 2
    assert "greater than 0 g" in result.output


def test_calculate_rejects_unknown_factor() -> None:
    result = runner.invoke(app, ["calculate", "--weight", "1200", "--factor", "incubator"])
    assert result.exit_code == 2
    assert "incubator" in result.output


def test_bands_and_factors_listing() -> None:
    bands = json.loads(runner.invoke(app, ["bands"]).stdout)
    assert [b["baseline_rate"] for b in bands] == [150.0, 65.0, 55.0, 35.0, 25.0, 17.5]
    assert bands[-1]["max_grams"] is None

    factors = json.loads(runner.invoke(app, ["factors"]).stdout)
    assert [f["id"] for f in factors] == ["radiantWarmer", "fever", "humidifiedEnv", "phototherapy"]
    assert factors[-1]["applicability"] == "weight <= 2000 g"


def test_invalid_log_level() -> None:
    result = runner.invoke(app, ["--log-level", "chatty", "bands"])
    assert result.exit_code == 2
