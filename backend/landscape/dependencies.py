from functools import lru_cache

from landscape.domain.pricing.rates import DEFAULT_TABLES, PricingTables
from landscape.infra.db import get_db_session  # noqa: F401


@lru_cache
def get_pricing_tables() -> PricingTables:
    return DEFAULT_TABLES
