"""
Application settings loaded from environment variables (or a ``.env`` file).

``CONTENT_VALIDATION`` is a JSON object mapping endpoint names to input filter
names, e.g. ``{"create_contact": "contacts.input_filter"}``.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Dict, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.backend import constants


class Settings(BaseSettings):
	model_config = SettingsConfigDict(
		env_file=".env",
		env_file_encoding="utf-8",
		extra="ignore",
		case_sensitive=False,
	)

	log_level: str = Field(default="INFO", description="INFO or DEBUG")
	content_validation: Dict[str, str] = Field(
		default_factory=lambda: dict(constants.DEFAULT_CONTENT_VALIDATION),
		description="Endpoint name -> input filter name",
	)
	cors_allow_origins: List[str] = Field(default_factory=lambda: list(constants.DEFAULT_CORS_ALLOW_ORIGINS))
	trusted_hosts: List[str] = Field(default_factory=lambda: list(constants.DEFAULT_TRUSTED_HOSTS))

	@field_validator("log_level")
	@classmethod
	def validate_log_level(cls, value: str) -> str:
		level = value.strip().upper()
		if level not in {"DEBUG", "INFO"}:
			raise ValueError(f"Invalid LOG_LEVEL: {value}. Must be DEBUG or INFO")
		return level

	@field_validator("content_validation")
	@classmethod
	def validate_content_validation(cls, value: Dict[str, str]) -> Dict[str, str]:
		cleaned: Dict[str, str] = {}
		for endpoint, filter_name in value.items():
			endpoint = endpoint.strip()
			filter_name = filter_name.strip()
			if not endpoint or not filter_name:
				raise ValueError("content_validation entries need a non-empty endpoint and input filter name")
			cleaned[endpoint] = filter_name
		return cleaned


@lru_cache
def get_settings() -> Settings:
	return Settings()
