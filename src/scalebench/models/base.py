# Copyright (c) Syntropy Systems
"""Base model for persisted scalebench records."""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, ConfigDict, JsonValue
from typing_extensions import TypeAlias

# Free-form values such as machine facts
JSONValue: TypeAlias = JsonValue


class ScalebenchBaseModel(BaseModel):
    """Reports written by older versions may carry fields we no longer read."""

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="ignore")
