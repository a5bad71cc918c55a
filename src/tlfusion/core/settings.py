"""Settings loaded from a YAML file and overridden by CLI flags."""

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from tlfusion.core.errors import ValidationError


class Settings(BaseModel):
    """Runtime configuration for imports and hashing."""

    strict_timestamps: bool = Field(
        default=False,
        description="Fail on unparseable timestamps instead of substituting now",
    )
    mapping_file: Path | None = Field(
        default=None,
        description="YAML file extending the CSV column candidates",
    )
    hash_algorithm: str = Field(
        default="sha256",
        description="hashlib algorithm used for event digests",
    )
    output_format: Literal["json", "jsonl", "human"] = Field(
        default="json",
        description="Default CLI output format",
    )

    model_config = {"extra": "forbid"}

    def merged(self, **overrides: Any) -> "Settings":
        """Return a copy with non-None overrides applied."""
        updates = {k: v for k, v in overrides.items() if v is not None}
        return self.model_copy(update=updates)


def load_settings(path: Path | None) -> Settings:
    """Load settings from a YAML file.

    Args:
        path: Settings file, or None for defaults

    Returns:
        Validated Settings

    Raises:
        ValidationError: If the file is not valid YAML or has unknown keys
    """
    if path is None:
        return Settings()

    path = Path(path)
    if not path.exists():
        raise ValidationError(f"Settings file not found: {path}", field="config")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ValidationError(f"Settings YAML parse error: {e}", field="config")

    if not isinstance(data, dict):
        raise ValidationError("Settings file must contain a mapping", field="config")

    mapping_file = data.get("mapping_file")
    if mapping_file and not Path(mapping_file).is_absolute():
        data["mapping_file"] = path.parent / mapping_file

    try:
        return Settings(**data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid settings: {e}", field="config")
