from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from landscape.domain.errors import UnknownPricingKeyError

# Phoenix, AZ sales tax. Applied to invoices only; quotes are pre-tax ranges.
PHOENIX_TAX_RATE = 0.086

# Flat fee per site visit after the first. Not scaled by zone.
VISIT_FEE = 50

QUOTE_LOW_MULTIPLIER = 0.85
QUOTE_HIGH_MULTIPLIER = 1.15


class ProjectType(str, Enum):
    maintenance = "maintenance"
    installation = "installation"
    repair = "repair"


class Zone(str, Enum):
    residential = "residential"
    commercial = "commercial"


@dataclass(frozen=True)
class ProjectRate:
    hourly_rate: float
    material_rate: float


@dataclass(frozen=True)
class PricingTables:
    rates: Mapping[ProjectType, ProjectRate]
    zone_multipliers: Mapping[Zone, float]
    visit_fee: float = VISIT_FEE

    def rate_for(self, project_type: ProjectType | str) -> ProjectRate:
        try:
            return self.rates[ProjectType(project_type)]
        except (KeyError, ValueError) as exc:
            raise UnknownPricingKeyError("project_type", project_type) from exc

    def multiplier_for(self, zone: Zone | str) -> float:
        try:
            return self.zone_multipliers[Zone(zone)]
        except (KeyError, ValueError) as exc:
            raise UnknownPricingKeyError("zone", zone) from exc

    def as_dict(self) -> dict:
        return {
            "rates": {
                project_type.value: {
                    "hourly_rate": rate.hourly_rate,
                    "material_rate": rate.material_rate,
                }
                for project_type, rate in self.rates.items()
            },
            "zone_multipliers": {zone.value: value for zone, value in self.zone_multipliers.items()},
            "visit_fee": self.visit_fee,
        }


def build_tables(
    rates: Mapping[ProjectType, ProjectRate],
    zone_multipliers: Mapping[Zone, float],
    visit_fee: float = VISIT_FEE,
) -> PricingTables:
    return PricingTables(
        rates=MappingProxyType(dict(rates)),
        zone_multipliers=MappingProxyType(dict(zone_multipliers)),
        visit_fee=visit_fee,
    )


DEFAULT_TABLES = build_tables(
    rates={
        ProjectType.maintenance: ProjectRate(hourly_rate=45, material_rate=2),
        ProjectType.installation: ProjectRate(hourly_rate=60, material_rate=5),
        ProjectType.repair: ProjectRate(hourly_rate=75, material_rate=8),
    },
    zone_multipliers={
        Zone.residential: 1.0,
        Zone.commercial: 1.3,
    },
)
