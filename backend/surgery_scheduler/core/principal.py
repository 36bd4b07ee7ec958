"""
Principal identity tokens.

The identity substrate (bearer tokens, wallet keys, ...) lives outside the
core; here a principal is only a comparable, hashable value.
"""

from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class Principal:
    """Opaque identity used for authorization and as a map key."""

    value: str

    def __post_init__(self):
        if not isinstance(self.value, str) or not self.value:
            raise ValueError("Principal value must be a non-empty string")

    def __str__(self) -> str:
        return self.value


# Identity the core itself uses when holding read grants on sealed values
CORE_PRINCIPAL = Principal("surgery-scheduler-core")
