from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..core.enums import AccessLevel, Module


class ModulePermissionIn(BaseModel):
    model_config = ConfigDict(extra="forbid", alias_generator=to_camel)

    module: Module
    my_level: AccessLevel
    all_level: AccessLevel


class PermissionUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", alias_generator=to_camel)

    user_id: int = Field(..., gt=0)
    permissions: List[ModulePermissionIn]

    @field_validator("permissions")
    @classmethod
    def unique_modules(cls, v: List[ModulePermissionIn]) -> List[ModulePermissionIn]:
        modules = [p.module for p in v]
        if len(modules) != len(set(modules)):
            raise ValueError("Each module may appear only once")
        return v
