"""
Default Catalogs
================

Built-in conductor, public-lighting and load-profile catalogs, and a loader
for caller catalog files (YAML or JSON) that override them section by section.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .config import read_mapping
from .models import Conductor, LoadProfile, NormativeTable
from .standards import BUILTIN_TABLES

DEFAULT_CABLES: Dict[str, Conductor] = {
    "2#16(25)mm² Al": Conductor(r=1.91, x=0.10, coef=0.7779, ampacity=85),
    "3x35+54.6mm² Al": Conductor(r=0.87, x=0.09, coef=0.2416, ampacity=135),
    "3x50+54.6mm² Al": Conductor(r=0.64, x=0.09, coef=0.1784, ampacity=165),
    "3x70+54.6mm² Al": Conductor(r=0.44, x=0.08, coef=0.1248, ampacity=205),
    "3x95+54.6mm² Al": Conductor(r=0.32, x=0.08, coef=0.0891, ampacity=250),
    "3x150+70mm² Al": Conductor(r=0.21, x=0.08, coef=0.0573, ampacity=330),
}

IP_TYPES: Dict[str, float] = {
    "Sem IP": 0.0,
    "IP 70W": 0.07,
    "IP 100W": 0.10,
    "IP 150W": 0.15,
    "IP 250W": 0.25,
    "IP 400W": 0.40,
}

PROFILES: Dict[str, LoadProfile] = {
    "Urbano Padrão": LoadProfile(cqt_max=5.0, load_max=100),
    "Rural": LoadProfile(cqt_max=10.0, load_max=100),
    "Massivos": LoadProfile(cqt_max=6.0, load_max=120),
}

DEFAULT_PROFILE = "Massivos"


def get_profile(name: str, profiles: Optional[Dict[str, LoadProfile]] = None) -> LoadProfile:
    """Profile by name; unknown names fall back to 'Massivos'."""
    registry = dict(PROFILES)
    if profiles:
        registry.update(profiles)
    return registry.get(name) or registry.get(DEFAULT_PROFILE) or PROFILES[DEFAULT_PROFILE]


@dataclass
class CatalogBundle:
    """
    Everything the engine looks up by key.

    Attributes:
        cables: Conductor key -> electrical data
        lighting: Fixture type -> unit kVA
        profiles: Profile name -> voltage-drop ceiling
        tables: Normative table name -> table
    """
    cables: Dict[str, Conductor] = field(default_factory=lambda: dict(DEFAULT_CABLES))
    lighting: Dict[str, float] = field(default_factory=lambda: dict(IP_TYPES))
    profiles: Dict[str, LoadProfile] = field(default_factory=lambda: dict(PROFILES))
    tables: Dict[str, NormativeTable] = field(default_factory=lambda: dict(BUILTIN_TABLES))


def catalogs_from_mapping(data: Dict[str, Any]) -> CatalogBundle:
    bundle = CatalogBundle()
    if "cables" in data:
        bundle.cables = {k: Conductor.model_validate(v) for k, v in data["cables"].items()}
    if "ips" in data or "lighting" in data:
        raw = data.get("lighting", data.get("ips")) or {}
        bundle.lighting = {k: float(v) for k, v in raw.items()}
    if "profiles" in data:
        bundle.profiles.update({k: LoadProfile.model_validate(v) for k, v in data["profiles"].items()})
    if "tables" in data:
        for name, rows in data["tables"].items():
            bundle.tables[name] = NormativeTable.model_validate({"name": name, "rows": rows})
    return bundle


def load_catalogs(path: Union[str, Path, None] = None) -> CatalogBundle:
    """
    Load a catalog bundle from a YAML or JSON file.

    Sections not present in the file keep their built-in defaults.
    'cables' and 'lighting' replace the defaults entirely; 'profiles' and
    'tables' are merged over them.
    """
    if path is None:
        return CatalogBundle()
    return catalogs_from_mapping(read_mapping(path))
