from landscape.domain.pricing.models import ValidationResult

HOURS_MIN = 0
HOURS_MAX = 200
SQFT_MIN = 0
SQFT_MAX = 100_000
VISITS_MIN = 1
VISITS_MAX = 50


def validate_pricing_inputs(hours: float, sqft: float, visits: float) -> ValidationResult:
    """Range-check raw form values before any price is computed.

    Every rule is evaluated so the caller can show all problems at once.
    Bounds are inclusive; NaN fails every rule.
    """
    errors: list[str] = []
    if not HOURS_MIN <= hours <= HOURS_MAX:
        errors.append(f"Hours must be between {HOURS_MIN} and {HOURS_MAX}")
    if not SQFT_MIN <= sqft <= SQFT_MAX:
        errors.append(f"Square feet must be between {SQFT_MIN} and {SQFT_MAX}")
    if not VISITS_MIN <= visits <= VISITS_MAX:
        errors.append(f"Visits must be between {VISITS_MIN} and {VISITS_MAX}")
    return ValidationResult(valid=not errors, errors=errors)
