"""Persistence payload models."""

from .schemas import (
    ActiveActionSnapshot,
    SkillStateSnapshot,
    EngineSnapshot,
    RegistrationSnapshot,
    RegistrySnapshot,
)

__all__ = [
    "ActiveActionSnapshot",
    "SkillStateSnapshot",
    "EngineSnapshot",
    "RegistrationSnapshot",
    "RegistrySnapshot",
]
