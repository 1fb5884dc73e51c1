"""
Pydantic schemas for the status API.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class DynamicLinkModel(BaseModel):
    source_index: int
    pad_name: str
    media_type: Optional[str] = None
    target: Optional[str] = None
    linked: bool = False
    reason: Optional[str] = None


class PipelineStatusModel(BaseModel):
    profile: str = "default"
    layout: str = ""
    streaming: bool = False
    rtmp_target: Optional[str] = Field(default=None, alias="rtmpTarget")
    sources: List[str] = Field(default_factory=list)
    state: str = "NULL"
    elements: List[str] = Field(default_factory=list)
    static_links: List[str] = Field(default_factory=list, alias="staticLinks")
    dynamic_links: List[DynamicLinkModel] = Field(default_factory=list, alias="dynamicLinks")
    outcome: Optional[str] = None
    last_error: Optional[str] = Field(default=None, alias="lastError")
    model_config = ConfigDict(populate_by_name=True)


class HealthModel(BaseModel):
    status: str = "ok"
    state: str = "NULL"
    profile: str = "default"
