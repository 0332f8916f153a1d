# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User profile models returned by the user directory."""

from pydantic import BaseModel, ConfigDict


class UserProfile(BaseModel):
    """Read-only profile of a user as seen by the relationship service."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    name: str = ""
    email: str = ""
    phone: str = ""
    role: str


class UserSummary(BaseModel):
    """Display fields of a user, without role information."""

    id: str
    name: str
    email: str
    phone: str

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "UserSummary":
        return cls(
            id=profile.id,
            name=profile.name,
            email=profile.email,
            phone=profile.phone,
        )
