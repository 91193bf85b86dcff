from typing import List

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from workmode_tui.core.models import Trigger
from workmode_tui.paths import DEFAULT_STATE_DIR, expand_home


class GeneralConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    state_dir: str = DEFAULT_STATE_DIR
    max_parallel: int = Field(default=0, ge=0)

    @field_validator("state_dir")
    @classmethod
    def expand_state_dir(cls, v: str) -> str:
        """Expand ``~/`` and fall back to the default for an empty value."""
        return expand_home(v or DEFAULT_STATE_DIR)


class WorkmodeConfig(BaseModel):
    """The workmode TOML config: ``[general]`` plus ``[[trigger]]`` tables."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)
    general: GeneralConfig = Field(default_factory=GeneralConfig)
    # TOML uses [[trigger]], `config show --json` uses "triggers"
    triggers: List[Trigger] = Field(default_factory=list, validation_alias=AliasChoices("trigger", "triggers"))

    @field_validator("triggers")
    @classmethod
    def unique_trigger_names(cls, v: List[Trigger]) -> List[Trigger]:
        seen: set[str] = set()
        for trigger in v:
            if trigger.name in seen:
                raise ValueError(f"Duplicate trigger name: {trigger.name}")
            seen.add(trigger.name)
        return v

    @property
    def state_dir(self) -> str:
        return self.general.state_dir
