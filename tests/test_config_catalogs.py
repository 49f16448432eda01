"""Tests for configuration and catalog loading."""

import json

import pytest

from lvgrid.catalogs import DEFAULT_CABLES, get_profile, load_catalogs
from lvgrid.config import EngineConfig, load_config


def test_defaults():
    config = load_config()
    assert config == EngineConfig()
    assert config.current_divisor == pytest.approx(1.732 * 0.380)
    assert config.global_warning_kinds == frozenset({"reverse_flow"})
    assert not config.strict


def test_yaml_config_with_overrides(tmp_path):
    path = tmp_path / "engine.yaml"
    path.write_text(
        "line_voltage_kv: 0.22\n"
        "strict: true\n"
        "global_warning_kinds: [reverse_flow, thermal_overload]\n",
        encoding="utf-8",
    )
    config = load_config(path, overrides={"max_iterations": 3})
    assert config.line_voltage_kv == 0.22
    assert config.strict
    assert config.global_warning_kinds == frozenset({"reverse_flow", "thermal_overload"})
    assert config.max_iterations == 3


def test_json_config(tmp_path):
    path = tmp_path / "engine.json"
    path.write_text(json.dumps({"lighting_share": "subtree"}), encoding="utf-8")
    assert load_config(path).lighting_share == "subtree"


def test_empty_yaml_means_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == EngineConfig()


def test_config_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")

    listing = tmp_path / "list.yaml"
    listing.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(listing)

    with pytest.raises(ValueError):
        load_config(overrides={"day_load_factor": 1.5})

    broken = tmp_path / "broken.yaml"
    broken.write_text("a: [unclosed\n", encoding="utf-8")
    with pytest.raises(ValueError, match="invalid YAML"):
        load_config(broken)
    with pytest.raises(ValueError, match="invalid YAML"):
        load_catalogs(broken)


def test_default_catalog_bundle():
    bundle = load_catalogs()
    assert set(bundle.cables) == set(DEFAULT_CABLES)
    assert bundle.lighting["IP 100W"] == 0.10
    assert {"PRODIST", "ABNT"} <= set(bundle.tables)
    assert get_profile("Rural").cqt_max == 10.0
    assert get_profile("nope").cqt_max == 6.0


def test_catalog_file_replaces_and_merges(tmp_path):
    path = tmp_path / "catalogs.yaml"
    path.write_text(
        """
cables:
  "4x16mm² Cu":
    r: 1.15
    x: 0.09
    coef: 0.45
    ampacity: 100
lighting:
  LED 60W: 0.06
profiles:
  Tight:
    cqt_max: 3.5
tables:
  LOCAL:
    - {min: 1, max: 9999, A: 1.0, B: 1.5, C: 2.0, D: 3.0}
""",
        encoding="utf-8",
    )
    bundle = load_catalogs(path)

    assert list(bundle.cables) == ["4x16mm² Cu"]
    assert bundle.lighting == {"LED 60W": 0.06}
    assert get_profile("Tight", bundle.profiles).cqt_max == 3.5
    assert "Massivos" in bundle.profiles
    assert bundle.tables["LOCAL"].rows[0].B == 1.5
    assert "PRODIST" in bundle.tables
