from dataclasses import dataclass
from typing import List


@dataclass
class DomainError(Exception):
    detail: str
    title: str = "Domain Error"
    type: str = "https://landscape-ops.example/problems/domain-error"
    errors: List[dict] | None = None


class UnknownPricingKeyError(LookupError):
    """Raised when a project type or zone has no entry in the pricing tables.

    This is a contract violation by the caller (the HTTP layer rejects unknown
    enum values before they reach the calculator), so it is never converted
    into a user-facing validation message.
    """

    def __init__(self, table: str, key: object) -> None:
        super().__init__(f"No {table} entry for {key!r}")
        self.table = table
        self.key = key
