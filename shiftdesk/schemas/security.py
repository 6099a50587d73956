from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from shiftdesk.models.security import ActorStatus


class CapabilityOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    guard_name: str


class RoleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class RoleDetailOut(RoleOut):
    capabilities: list[CapabilityOut]


class ActorOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    status: ActorStatus
    must_change_password: bool
    roles: list[RoleOut]


class LoginIn(BaseModel):
    email: str
    password: str


class PasswordChangeIn(BaseModel):
    password: str = Field(min_length=8)
    password_confirmation: str

    @model_validator(mode="after")
    def _confirmed(self) -> PasswordChangeIn:
        if self.password != self.password_confirmation:
            raise ValueError("The password confirmation does not match.")
        return self


class RoleIn(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class SyncCapabilitiesIn(BaseModel):
    capability_ids: list[int] = Field(default_factory=list)


class SyncRolesIn(BaseModel):
    role_ids: list[int] = Field(default_factory=list)
