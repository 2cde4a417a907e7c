"""Registry of buildable maps.

New maps must be added to ``MAPS`` before the builder will process them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from mapgen.errors import ConfigurationError


@dataclass(frozen=True)
class MapDescriptor:
    """Name and asset classification of a buildable map."""

    name: str
    is_test: bool = False

    @property
    def classification(self) -> str:
        return "test" if self.is_test else "production"


_PRODUCTION_MAPS = (
    "africa",
    "asia",
    "australia",
    "achiran",
    "baikal",
    "baikalnukewars",
    "betweentwoseas",
    "blacksea",
    "britannia",
    "deglaciatedantarctica",
    "eastasia",
    "europe",
    "europeclassic",
    "falklandislands",
    "faroeislands",
    "fourislands",
    "gatewaytotheatlantic",
    "giantworldmap",
    "gulfofstlawrence",
    "halkidiki",
    "iceland",
    "italia",
    "japan",
    "lisbon",
    "manicouagan",
    "mars",
    "mena",
    "montreal",
    "newyorkcity",
    "northamerica",
    "oceania",
    "pangaea",
    "pluto",
    "southamerica",
    "straitofgibraltar",
    "surrounded",
    "svalmel",
    "world",
    "lemnos",
    "twolakes",
)

# Test fixtures keep small islands so generator edge cases stay observable.
_TEST_MAPS = (
    "big_plains",
    "half_land_half_ocean",
    "ocean_and_land",
    "plains",
    "giantworldmap",
)

MAPS: tuple[MapDescriptor, ...] = tuple(
    [MapDescriptor(name) for name in _PRODUCTION_MAPS]
    + [MapDescriptor(name, is_test=True) for name in _TEST_MAPS]
)


def list_maps() -> tuple[MapDescriptor, ...]:
    """Return every registered map in registry order."""
    return MAPS


def map_names() -> list[str]:
    """Return unique map names in registry order."""
    names: list[str] = []
    for descriptor in MAPS:
        if descriptor.name not in names:
            names.append(descriptor.name)
    return names


def is_valid(name: str) -> bool:
    """Return True when a map name is registered."""
    return any(descriptor.name == name for descriptor in MAPS)


def parse_selection(value: str | None) -> frozenset[str] | None:
    """Parse a comma-separated map list; None means every map."""
    if value is None or not value.strip():
        return None
    return frozenset(name.strip() for name in value.split(","))


def select_maps(selection: Iterable[str] | None) -> tuple[MapDescriptor, ...]:
    """Resolve a selection into descriptors, validating every name first."""
    if selection is None:
        return list_maps()
    selected = set(selection)
    for name in sorted(selected):
        if not is_valid(name):
            raise ConfigurationError(f"map {name!r} is not defined")
    return tuple(descriptor for descriptor in MAPS if descriptor.name in selected)
