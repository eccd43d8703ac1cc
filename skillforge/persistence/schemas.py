"""
Pydantic Schemas for Persistence - Save payload contract.

These models define the opaque blobs handed to the host's storage
transport. Field names serialize in camelCase so payloads stay
compatible with existing saves.

Engine payload:
    {config, state, isInitialized}

Registry payload:
    {skills: {id: {state, isUnlocked}}, unlockOrder: [ids...]}

Loading validates through these models; a ValidationError means the
payload is corrupt and the caller falls back to initial state.
"""

from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Engine
# =============================================================================

class ActiveActionSnapshot(BaseModel):
    """An in-flight action."""
    action_id: str = Field(alias="actionId")
    start_time: int = Field(alias="startTime")
    end_time: int = Field(alias="endTime")
    repeats: int = Field(1, ge=1)
    current_repeat: int = Field(0, ge=0, alias="currentRepeat")
    context: dict[str, Any] = Field(default_factory=dict)

    model_config = {"populate_by_name": True}


class SkillStateSnapshot(BaseModel):
    """Progress of one skill."""
    level: int = Field(1, ge=1)
    experience: int = Field(0, ge=0)
    experience_to_next: int = Field(alias="experienceToNext", gt=0)
    total_experience_gained: int = Field(0, ge=0, alias="totalExperienceGained")
    actions_completed: int = Field(0, ge=0, alias="actionsCompleted")
    time_spent: int = Field(0, ge=0, alias="timeSpent")
    unlocked_actions: list[str] = Field(default_factory=list, alias="unlockedActions")
    active_action: Optional[ActiveActionSnapshot] = Field(None, alias="activeAction")
    skill_state: Any = Field(None, alias="skillSpecificState")

    model_config = {"populate_by_name": True}


class EngineSnapshot(BaseModel):
    """Everything one engine saves."""
    config: dict[str, Any] = Field(default_factory=dict, description="Definition snapshot")
    state: SkillStateSnapshot
    is_initialized: bool = Field(False, alias="isInitialized")

    model_config = {"populate_by_name": True}


# =============================================================================
# Registry
# =============================================================================

class RegistrationSnapshot(BaseModel):
    """One registered skill."""
    state: Optional[dict[str, Any]] = Field(None, description="Engine payload, validated per engine")
    is_unlocked: bool = Field(False, alias="isUnlocked")

    model_config = {"populate_by_name": True}


class RegistrySnapshot(BaseModel):
    """Every registered skill plus display order."""
    skills: dict[str, RegistrationSnapshot] = Field(default_factory=dict)
    unlock_order: list[str] = Field(default_factory=list, alias="unlockOrder")

    model_config = {"populate_by_name": True}
