# src/nml_resolver/core/physics.py
"""Versão de física do modelo terrestre (`clm4_5`, `clm5_0`) com ordenação."""

from __future__ import annotations

import re
from dataclasses import dataclass

from nml_resolver.core.exceptions import ValidationError

_PHYS_RE = re.compile(r"^clm(\d+)_(\d+)$")


@dataclass(frozen=True, order=True)
class PhysicsVersion:
    major: int
    minor: int

    @classmethod
    def parse(cls, text: str) -> "PhysicsVersion":
        m = _PHYS_RE.match(str(text).strip().lower())
        if not m:
            raise ValidationError(
                message=f"Invalid physics version: {text}",
                details={"variable": "phys", "value": text},
                hint="Use a version like clm4_5 or clm5_0",
            )
        return cls(int(m.group(1)), int(m.group(2)))

    def as_string(self) -> str:
        return f"clm{self.major}_{self.minor}"

    def as_long(self) -> int:
        return self.major * 1000 + self.minor

    def __str__(self) -> str:
        return self.as_string()


CLM4_5 = PhysicsVersion(4, 5)
CLM5_0 = PhysicsVersion(5, 0)
