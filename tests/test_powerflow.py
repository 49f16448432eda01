"""Tests for the calculate pipeline: currents, drops, solar effects and KPIs."""

import copy
import random

import pytest

from conftest import LARGE, MEDIUM, SMALL, make_point

from lvgrid import EngineConfig, calculate
from lvgrid.models import NormativeTable, Point

DIVISOR = 1.732 * 0.380


def single_span(meters, cable=SMALL, **loads):
    return [make_point("TRAFO"), make_point("A", "TRAFO", meters, cable=cable, **loads)]


def test_drop_coefficient_self_check(params, cables, ips):
    result = calculate("check", single_span(100, point_qty=1, point_kva=10.0), params, cables, ips)
    a = result.node("A")
    assert a.calculated_cqt == pytest.approx(3.8895)
    assert a.accumulated_cqt == pytest.approx(3.8895)
    assert a.calculated_load == pytest.approx(10.0 / DIVISOR)
    assert result.warnings == []


def test_residential_span_with_custom_table(params, ips):
    tables = {"TEN": {"name": "TEN", "rows": [{"min": 1, "max": 20, "A": 1.0, "B": 1.6, "C": 2.6, "D": 4.0}]}}
    standards = {k: NormativeTable.model_validate(v) for k, v in tables.items()}
    cables = {"TEST": {"r": 0.5, "x": 0.1, "coef": 0.09, "ampacity": 100}}

    result = calculate(
        "ten", single_span(50, cable="TEST", mono=10), {**params, "normative_table": "TEN"},
        cables, ips, standards=standards,
    )
    a = result.node("A")
    assert result.kpis.global_dmdi_factor == pytest.approx(1.6)
    assert result.kpis.total_load == pytest.approx(16.0)
    assert a.calculated_load == pytest.approx(24.31, abs=0.01)
    assert a.calculated_cqt == pytest.approx(0.36)
    assert result.warnings_of("thermal_overload") == []


def test_thermal_overload_warned_once_per_node(params, cables, ips):
    result = calculate("hot", single_span(10, point_qty=1, point_kva=60.0), params, cables, ips)
    overloads = result.warnings_of("thermal_overload")
    assert len(overloads) == 1
    assert overloads[0].node_id == "A"
    assert "A" in str(overloads[0])


def random_network(seed, size=40):
    rng = random.Random(seed)
    raw = [make_point("TRAFO")]
    for i in range(size):
        parent = raw[rng.randrange(len(raw))]["id"]
        raw.append(make_point(
            f"N{i}", parent, rng.uniform(5, 60),
            cable=rng.choice([SMALL, MEDIUM, LARGE]),
            mono=rng.randrange(0, 5),
            point_qty=1, point_kva=rng.uniform(0, 3),
            solar_kva=rng.choice([0.0, 0.0, 4.0, 8.0]),
        ))
    return raw


@pytest.mark.parametrize("seed", [1, 7, 42])
def test_drop_and_rise_never_decrease_downstream(seed, params, cables, ips):
    raw = random_network(seed)
    result = calculate("rand", raw, params, cables, ips)
    by_id = {n.id: n for n in result.nodes}
    for p in raw[1:]:
        node, parent = by_id[p["id"]], by_id[p["parent_id"]]
        assert node.accumulated_cqt >= parent.accumulated_cqt
        assert node.solar_voltage_rise >= parent.solar_voltage_rise


@pytest.mark.parametrize("seed", [3, 11])
def test_total_load_equals_sum_of_own_loads(seed, params, cables, ips):
    raw = random_network(seed, size=25)
    result = calculate("rand", raw, params, cables, ips)
    k = result.kpis
    assert k.total_load == pytest.approx(k.diversified_load + k.ip_load + k.point_load)
    trafo = result.node("TRAFO")
    assert trafo.accumulated_kva == pytest.approx(k.total_load)
    assert trafo.calculated_load == pytest.approx(k.total_load / DIVISOR)


def test_solar_netting_drives_qt_load_and_occupancy(params, cables, ips):
    raw = single_span(30, point_qty=1, point_kva=10.0, solar_kva=8.0, solar_qty=1)
    gross = calculate("gross", raw, params, cables, ips)
    netted = calculate("net", raw, {**params, "net_solar_in_thermal": True}, cables, ips)

    assert gross.kpis.qt_load == pytest.approx(gross.kpis.total_load)
    assert gross.kpis.trafo_occupation == pytest.approx(10.0 / 75.0 * 100)

    k = netted.kpis
    assert k.total_load == pytest.approx(10.0)
    assert k.qt_load == pytest.approx(6.0)
    assert netted.node("TRAFO").accumulated_kva == pytest.approx(k.qt_load)
    assert k.trafo_occupation == pytest.approx(6.0 / 75.0 * 100)


@pytest.mark.parametrize("seed", [5, 13])
def test_qt_load_equals_sum_of_own_loads_with_netting(seed, params, cables, ips):
    raw = random_network(seed, size=25)
    result = calculate("rand", raw, {**params, "net_solar_in_thermal": True}, cables, ips)
    assert result.node("TRAFO").accumulated_kva == pytest.approx(result.kpis.qt_load)
    assert result.kpis.qt_load <= result.kpis.total_load + 1e-9


def test_feeder_kpis(feeder, params, cables, ips):
    result = calculate("feeder", feeder, params, cables, ips)
    k = result.kpis

    assert k.global_dmdi_factor == pytest.approx(1.60)
    assert k.diversified_load == pytest.approx(32.0)
    assert k.ip_load == pytest.approx(0.39)
    assert k.point_load == pytest.approx(5.0)
    assert k.total_customers == 21
    assert k.trafo_occupation == pytest.approx(k.total_load / 75.0 * 100)
    assert k.max_cqt == pytest.approx(result.node("P4").accumulated_cqt)
    assert k.total_losses_w == pytest.approx(sum(n.thermal_loss_w for n in result.nodes))
    assert result.node("P2").accumulated_kva == pytest.approx(
        result.node("P2").calculated_load * DIVISOR
    )


def test_zero_rated_transformer_has_zero_occupation(feeder, params, cables, ips):
    result = calculate("none", feeder, {**params, "trafo_kva": 0}, cables, ips)
    assert result.kpis.trafo_occupation == 0.0
    assert result.kpis.total_load > 0


def test_losses_and_sustainability(params, cables, ips):
    result = calculate("loss", single_span(100, point_qty=1, point_kva=10.0), params, cables, ips)
    current = 10.0 / DIVISOR
    expected_w = 3 * 1.91 * 0.1 * current ** 2
    assert result.kpis.total_losses_w == pytest.approx(expected_w)

    s = result.sustainability
    kwh = expected_w / 1000 * 8760 * 0.25
    assert s.annual_energy_loss_kwh == pytest.approx(kwh)
    assert s.annual_financial_loss == pytest.approx(kwh * 0.85)
    assert s.annual_co2_kg == pytest.approx(kwh * 0.0817)
    assert s.projected_savings == pytest.approx(kwh * 0.85 * 0.35 * 10)
    assert s.co2_prevented_kg == pytest.approx(kwh * 0.0817 * 0.35 * 10)
    assert s.trees_equivalent == pytest.approx(s.co2_prevented_kg / (22 * 10))


def test_config_constants_flow_through(params, cables, ips):
    raw = single_span(100, point_qty=1, point_kva=10.0)
    base = calculate("a", raw, params, cables, ips)
    low_voltage = calculate("b", raw, params, cables, ips, config=EngineConfig(line_voltage_kv=0.220))
    assert low_voltage.node("A").calculated_load == pytest.approx(10.0 / (1.732 * 0.220))
    assert low_voltage.node("A").calculated_cqt == pytest.approx(base.node("A").calculated_cqt)


def test_reverse_flow_reported_once_per_network(solar_feeder, params, cables, ips):
    result = calculate("solar", solar_feeder, params, cables, ips)
    p1 = result.node("P1")

    assert p1.net_current_day == pytest.approx(-18.8 / DIVISOR)
    assert result.node("L1").net_current_day == pytest.approx(-9.7 / DIVISOR)

    g = result.gd_impact
    assert g.has_reverse_flow
    assert g.total_installed_kva == pytest.approx(20.0)
    assert g.reverse_flow_amps == pytest.approx(18.8 / DIVISOR)
    assert g.self_consumption_rate == pytest.approx(4.0 * 0.30 / 20.0 * 100)
    assert len(result.warnings_of("reverse_flow")) == 1
    assert result.warnings_of("solar_overvoltage") == []


def test_reverse_flow_per_node_when_not_global(solar_feeder, params, cables, ips):
    config = EngineConfig(global_warning_kinds=frozenset())
    result = calculate("solar", solar_feeder, params, cables, ips, config=config)
    assert sorted(w.node_id for w in result.warnings_of("reverse_flow")) == ["L1", "L2", "P1"]


def test_solar_rise_accumulates_from_source(solar_feeder, params, cables, ips):
    result = calculate("solar", solar_feeder, params, cables, ips)
    coef = cables[MEDIUM]["coef"]
    p1_rise = 18.8 * 0.3 * coef * 0.5
    assert result.node("P1").solar_voltage_rise == pytest.approx(p1_rise)
    assert result.node("L1").solar_voltage_rise == pytest.approx(p1_rise + 9.7 * 0.3 * coef * 0.5)
    assert result.gd_impact.max_voltage_rise == pytest.approx(result.node("L1").solar_voltage_rise)


def test_solar_overvoltage(params, cables, ips):
    result = calculate("pv", single_span(100, solar_kva=100.0, solar_qty=1), params, cables, ips)
    a = result.node("A")
    assert a.solar_voltage_rise == pytest.approx(100 * 0.7779 * 0.5)
    assert [w.node_id for w in result.warnings_of("solar_overvoltage")] == ["A"]


def test_no_solar_means_no_self_consumption(feeder, params, cables, ips):
    g = calculate("f", feeder, params, cables, ips).gd_impact
    assert g.total_installed_kva == 0.0
    assert g.self_consumption_rate == 0.0
    assert not g.has_reverse_flow


def test_lighting_share_modes(feeder, params, cables, ips):
    network = calculate("n", feeder, params, cables, ips)
    subtree = calculate("s", feeder, params, cables, ips, config=EngineConfig(lighting_share="subtree"))

    # P3 feeds no fixtures: the network mode still removes an even share of all lighting
    share = 0.39 / len(feeder) * 0.30 / DIVISOR
    assert subtree.node("P3").net_current_day - network.node("P3").net_current_day == pytest.approx(share)


def test_missing_source_gives_empty_result(params, cables, ips):
    raw = [make_point("A", "B", 10, mono=3), make_point("B", "A", 10, mono=2)]
    result = calculate("loop", raw, params, cables, ips)

    assert all(not n.connected for n in result.nodes)
    assert result.kpis.total_load == 0.0
    assert result.kpis.max_cqt == 0.0
    assert result.kpis.total_customers == 5
    assert {"missing_source", "cycle"} <= {w.kind for w in result.warnings}


def test_orphans_excluded_from_totals(feeder, params, cables, ips):
    base = calculate("f", feeder, params, cables, ips)
    raw = feeder + [make_point("X", "NOWHERE", 10, point_qty=1, point_kva=50.0)]
    result = calculate("f", raw, params, cables, ips)

    x = result.node("X")
    assert not x.connected
    assert x.calculated_load == 0.0
    assert result.kpis.total_load == pytest.approx(base.kpis.total_load)
    assert result.kpis.total_customers == base.kpis.total_customers + 1
    assert [w.node_id for w in result.warnings_of("orphan")] == ["X"]


def test_calculate_is_deterministic(feeder, params, cables, ips):
    first = calculate("d", feeder, params, cables, ips).to_dict()
    second = calculate("d", feeder, params, cables, ips).to_dict()
    assert first == second


def test_inputs_are_not_mutated(feeder, params, cables, ips):
    before = copy.deepcopy((feeder, params, cables, ips))
    points = [Point.model_validate(p) for p in feeder]

    result = calculate("m", feeder, params, cables, ips)
    result_from_models = calculate("m", points, params, cables, ips)

    assert (feeder, params, cables, ips) == before
    assert all(r.point is not p for r, p in zip(result_from_models.nodes, points))
    result.nodes[1].point.loads.mono = 99
    assert feeder[1]["loads"]["mono"] == 4


def test_frame_export(feeder, params, cables, ips):
    df = calculate("f", feeder, params, cables, ips).to_frame()
    assert list(df["id"]) == ["TRAFO", "P1", "P2", "P3", "P4"]
    assert {"loads_mono", "loads_ip_type", "accumulated_cqt", "net_current_day"} <= set(df.columns)
    assert df.loc[df["id"] == "P2", "loads_point_kva"].iloc[0] == 5.0
