# redoc/ai/schemas.py
"""
Pydantic schema for the document plan returned by the planning use-case.

The model answers with camelCase keys; fields accept both the alias and the
Python name. Unknown enum values fall back to the field default instead of
failing validation, since a slightly-off plan is still usable.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

Intent = Literal["feat", "fix", "refactor", "chore", "docs", "perf", "test", "style", "unknown"]
DiagramType = Literal["sequence", "flowchart", "er", "state", "architecture"]
TableType = Literal["comparison", "tradeoffs", "steps", "options"]
Complexity = Literal["minimal", "standard", "detailed"]

_INTENTS = {"feat", "fix", "refactor", "chore", "docs", "perf", "test", "style", "unknown"}
_DIAGRAM_TYPES = {"sequence", "flowchart", "er", "state", "architecture"}
_TABLE_TYPES = {"comparison", "tradeoffs", "steps", "options"}
_COMPLEXITIES = {"minimal", "standard", "detailed"}

DEFAULT_SECTIONS = ["Summary", "Notes"]


def _lower_or_none(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip().lower()
    return text or None


class ImpactedFile(BaseModel):
    """A file outside (or inside) the diff likely affected by the change."""

    model_config = ConfigDict(extra="ignore")

    file: str = Field(..., description="Path of the impacted file")
    reason: str = Field(default="", description="Why this file is likely impacted")


class DocumentPlan(BaseModel):
    """Structured decision describing what the final document should contain."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    intent: Intent = Field(default="unknown", description="Conventional-commit style intent")
    intent_rationale: str = Field(default="", alias="intentRationale")

    impacted_files: list[ImpactedFile] = Field(default_factory=list, alias="impactedFiles")

    should_generate_diagram: bool = Field(default=False, alias="shouldGenerateDiagram")
    diagram_rationale: str | None = Field(default=None, alias="diagramRationale")
    diagram_type: DiagramType | None = Field(default=None, alias="diagramType")
    diagram_focus: str | None = Field(default=None, alias="diagramFocus")

    should_generate_table: bool = Field(default=False, alias="shouldGenerateTable")
    table_rationale: str | None = Field(default=None, alias="tableRationale")
    table_type: TableType | None = Field(default=None, alias="tableType")
    table_focus: str | None = Field(default=None, alias="tableFocus")

    key_insights: list[str] = Field(default_factory=list, alias="keyInsights")
    sections: list[str] = Field(default_factory=lambda: list(DEFAULT_SECTIONS))
    complexity: Complexity = Field(default="standard")

    skip_generation: bool = Field(default=False, alias="skipGeneration")
    skip_reason: str | None = Field(default=None, alias="skipReason")

    @field_validator("intent", mode="before")
    @classmethod
    def _coerce_intent(cls, value: Any) -> str:
        text = _lower_or_none(value)
        return text if text in _INTENTS else "unknown"

    @field_validator("diagram_type", mode="before")
    @classmethod
    def _coerce_diagram_type(cls, value: Any) -> str | None:
        text = _lower_or_none(value)
        return text if text in _DIAGRAM_TYPES else None

    @field_validator("table_type", mode="before")
    @classmethod
    def _coerce_table_type(cls, value: Any) -> str | None:
        text = _lower_or_none(value)
        return text if text in _TABLE_TYPES else None

    @field_validator("complexity", mode="before")
    @classmethod
    def _coerce_complexity(cls, value: Any) -> str:
        text = _lower_or_none(value)
        return text if text in _COMPLEXITIES else "standard"

    @field_validator(
        "should_generate_diagram", "should_generate_table", "skip_generation", mode="before"
    )
    @classmethod
    def _none_is_false(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("intent_rationale", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("impacted_files", mode="before")
    @classmethod
    def _coerce_impacted_files(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            # Bare paths are accepted as files with no reason
            return [{"file": item} if isinstance(item, str) else item for item in value]
        return value

    @field_validator("key_insights", mode="before")
    @classmethod
    def _none_is_empty_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("sections", mode="before")
    @classmethod
    def _default_sections(cls, value: Any) -> Any:
        if value is None or value == []:
            return list(DEFAULT_SECTIONS)
        return value
