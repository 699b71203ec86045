from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ApiError(BaseModel):
	model_config = ConfigDict(extra="forbid")

	code: str
	message: str
	status: Optional[int] = None
	evidence: List[str] = Field(default_factory=list)
	validation_messages: Optional[Dict[str, List[str]]] = None


class ApiEnvelope(BaseModel):
	model_config = ConfigDict(extra="allow")

	ok: bool
	generated_at: str
	request_id: Optional[str] = None
	data: Optional[Dict[str, Any]] = None
	error: Optional[ApiError] = None


class ContactInput(BaseModel):
	model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

	name: str = Field(..., min_length=1, max_length=120, description="Display name.")
	age: int = Field(..., ge=0, le=150)
	email: Optional[str] = Field(default=None, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
