from __future__ import annotations

from dataclasses import dataclass

SUPPORTED_ROLES = ("api",)


@dataclass(frozen=True)
class RuntimeRole:
    name: str


def validate_role(role: str) -> RuntimeRole:
    if role in SUPPORTED_ROLES:
        return RuntimeRole(name=role)

    supported = ", ".join(SUPPORTED_ROLES)
    raise ValueError(
        f"Unsupported role '{role}'. Supported roles: {supported}. "
        "Note: wallet signing and the registry itself are external services."
    )
