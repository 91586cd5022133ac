from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from permission_to_rest.abilities.models import ALL, Action


class AbilityDeclaration(BaseModel):
    """One rule as written in a permissions file."""

    permission: Literal["can", "cannot"]
    action: Action
    subject: str = ALL
    where: dict[str, Any] | list[dict[str, Any]] | None = None
    blacklist: list[str] | None = None

    @field_validator("permission", mode="before")
    @classmethod
    def lower_permission(cls, v: Any) -> Any:
        return v.lower() if isinstance(v, str) else v

    @field_validator("action", mode="before")
    @classmethod
    def upper_action(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @field_validator("subject")
    @classmethod
    def validate_subject(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("subject cannot be empty or whitespace")
        return v

    @field_validator("where")
    @classmethod
    def validate_where(cls, v: Any) -> Any:
        if isinstance(v, list) and not v:
            raise ValueError("where list must contain at least one alternative")
        return v

    @model_validator(mode="after")
    def blacklist_only_for_can(self) -> AbilityDeclaration:
        if self.permission == "cannot" and self.blacklist:
            raise ValueError("blacklist is only meaningful for 'can' rules")
        return self


class PermissionConfig(BaseModel):
    subjects: dict[str, str] = Field(default_factory=dict)
    abilities: list[AbilityDeclaration] = Field(default_factory=list)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"
