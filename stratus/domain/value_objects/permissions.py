from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional


class Authorization(Enum):
    READ = "READ"
    WRITE = "WRITE"
    EXECUTE = "EXECUTE"


@dataclass(frozen=True)
class Permissions:
    """
    Value Object mapping each authorization to the roles granted it.

    An account is restricted as soon as any authorization lists a role.
    """
    roles: Mapping[Authorization, frozenset[str]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __post_init__(self):
        normalized = {
            Authorization(auth): frozenset(r.strip() for r in roles if r and r.strip())
            for auth, roles in dict(self.roles).items()
        }
        object.__setattr__(
            self,
            "roles",
            MappingProxyType({a: r for a, r in normalized.items() if r}),
        )

    @property
    def is_restricted(self) -> bool:
        return any(self.roles.values())

    def roles_for(self, authorization: Authorization) -> frozenset[str]:
        return self.roles.get(authorization, frozenset())

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "Permissions":
        """Build from a config mapping such as ``{"READ": ["dev"], "WRITE": []}``."""
        if not data:
            return cls()
        roles: dict[Authorization, frozenset[str]] = {}
        for key, values in data.items():
            try:
                auth = Authorization(str(key).upper())
            except ValueError:
                raise ValueError(f"Unknown authorization: {key}")
            if isinstance(values, str):
                values = [values]
            roles[auth] = frozenset(values or ())
        return cls(roles)

    def to_dict(self) -> dict[str, list[str]]:
        return {auth.value: sorted(roles) for auth, roles in self.roles.items()}

    def __hash__(self) -> int:
        return hash(frozenset(self.roles.items()))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Permissions):
            return NotImplemented
        return dict(self.roles) == dict(other.roles)


Permissions.EMPTY = Permissions()
