"""
Request and response models for the preferences HTTP API.
"""

from pydantic import BaseModel, field_validator
from typing import List, Optional

from ..core.schema import Pref

MAX_SCOPE_LEN = 32


class PrefSetRequest(BaseModel):
    user: str = ""
    channel: str = ""
    broker: str = ""
    plugin: str = ""
    key: str
    value: str

    @field_validator('key')
    @classmethod
    def key_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('key cannot be empty')
        return v

    @field_validator('user', 'channel', 'broker', 'plugin', 'key')
    @classmethod
    def scope_must_fit_column(cls, v):
        if len(v) > MAX_SCOPE_LEN:
            raise ValueError(f'must be at most {MAX_SCOPE_LEN} characters')
        return v


class PrefResponse(BaseModel):
    user: str
    channel: str
    broker: str
    plugin: str
    key: str
    value: str
    found: bool
    error: Optional[str] = None

    @classmethod
    def from_pref(cls, pref: Pref) -> "PrefResponse":
        return cls(
            user=pref.user,
            channel=pref.channel,
            broker=pref.broker,
            plugin=pref.plugin,
            key=pref.key,
            value=pref.value,
            found=pref.found,
            error=str(pref.error) if pref.error else None,
        )


class PrefListResponse(BaseModel):
    prefs: List[PrefResponse]
    table: List[List[str]]


class HealthResponse(BaseModel):
    status: str
    version: str
    db_health: bool
    pref_count: int


class ErrorResponse(BaseModel):
    error_type: str
    message: str
