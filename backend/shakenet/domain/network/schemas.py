"""Pydantic schemas for the network graph and meet requests."""

from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class GraphRequest(BaseModel):
	model_config = ConfigDict(populate_by_name=True)

	user_id: str = Field(..., alias="userId", min_length=1, description="Caller's own user id")


class GraphNodePayload(BaseModel):
	id: str
	x: float
	y: float


class GraphEdgePayload(BaseModel):
	source: str
	target: str


class NetworkGraphResponse(BaseModel):
	nodes: List[GraphNodePayload] = Field(default_factory=list)
	edges: List[GraphEdgePayload] = Field(default_factory=list)


class MeetSendRequest(BaseModel):
	model_config = ConfigDict(populate_by_name=True)

	to_user_id: str = Field(..., alias="toUserId", min_length=1)
	message: str = Field(default="meet!!", min_length=1)


class MeetSummary(BaseModel):
	model_config = ConfigDict(populate_by_name=True)

	from_user_id: str = Field(..., alias="fromUserId")
	to_user_id: str = Field(..., alias="toUserId")
	message: str
	distance: int
	sent_at: datetime = Field(..., alias="sentAt")
