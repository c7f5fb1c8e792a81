"""Core data model for dependency resolution."""

from __future__ import annotations

from dataclasses import dataclass

WILDCARD = "*"


@dataclass(frozen=True)
class Dependency:
    """A named dependency together with the raw version constraint it was declared with.

    Equality and hashing are structural over both fields, so ``left-pad@^1.0.0`` and ``left-pad@^2.0.0`` are
    distinct dependencies.
    """

    name: str
    constraint: str = WILDCARD

    def __post_init__(self) -> None:
        """Validate the fields."""
        if not isinstance(self.name, str) or not self.name:
            msg = "name must be a non-empty string"
            raise TypeError(msg)
        if not isinstance(self.constraint, str):
            msg = "constraint must be a string"
            raise TypeError(msg)

    def __str__(self) -> str:
        """Return string representation of the dependency."""
        return f"{self.name}@{self.constraint}"

    def to_obj(self) -> dict[str, str]:
        """Convert dependency to dictionary representation."""
        return {"name": self.name, "constraint": self.constraint}
