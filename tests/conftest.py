"""Shared fixtures for engine tests."""

import pytest

from lvgrid.catalogs import DEFAULT_CABLES, IP_TYPES

SMALL = "2#16(25)mm² Al"
MEDIUM = "3x35+54.6mm² Al"
LARGE = "3x150+70mm² Al"


def make_point(node_id, parent_id="", meters=0.0, cable=MEDIUM, **loads):
    return {"id": node_id, "parent_id": parent_id, "meters": meters, "cable": cable, "loads": dict(loads)}


@pytest.fixture
def cables():
    return {k: v.model_dump() for k, v in DEFAULT_CABLES.items()}


@pytest.fixture
def ips():
    return dict(IP_TYPES)


@pytest.fixture
def params():
    return {
        "trafo_kva": 75.0,
        "profile": "Massivos",
        "class_type": "Manual",
        "manual_class": "B",
        "normative_table": "PRODIST",
    }


@pytest.fixture
def feeder():
    """
    TRAFO
     └─ P1 (40 m)
         ├─ P2 (35 m)
         │   └─ P4 (30 m)
         └─ P3 (25 m)
    """
    return [
        make_point("TRAFO"),
        make_point("P1", "TRAFO", 40, mono=4, bi=2, ip_type="IP 100W", ip_qty=1),
        make_point("P2", "P1", 35, mono=6, point_qty=1, point_kva=5.0, ip_type="IP 70W", ip_qty=2),
        make_point("P3", "P1", 25, tri=3),
        make_point("P4", "P2", 30, mono=5, ip_type="IP 150W", ip_qty=1),
    ]


@pytest.fixture
def solar_feeder():
    """P1 feeds two leaves whose rooftop solar exceeds their daytime demand."""
    return [
        make_point("TRAFO"),
        make_point("P1", "TRAFO", 30, point_qty=1, point_kva=2.0),
        make_point("L1", "P1", 30, point_qty=1, point_kva=1.0, solar_kva=10.0, solar_qty=1),
        make_point("L2", "P1", 30, point_qty=1, point_kva=1.0, solar_kva=10.0, solar_qty=1),
    ]
