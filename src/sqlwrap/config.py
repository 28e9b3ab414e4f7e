"""Run configuration: which database to load and where statements live."""

from __future__ import annotations

import fnmatch
import json
from pathlib import Path
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class Config(BaseModel):
    """Settings for one run.

    ``include_tables`` and ``exclude_tables`` hold shell-style patterns
    matched against table names. An empty include list includes every table;
    a table matching any exclude pattern is skipped.
    """

    model_config = ConfigDict(extra="forbid")

    dsn: str = Field(..., min_length=1, description="Data source name passed to the driver")
    driver: str = Field("sqlite", description="Driver name, see sqlwrap.drivers")
    include_tables: list[str] = Field(default_factory=list, description="Table name patterns to load")
    exclude_tables: list[str] = Field(default_factory=list, description="Table name patterns to skip")
    statement_dir: Optional[Path] = Field(None, description="Directory of statement files")

    @field_validator("include_tables", "exclude_tables", mode="before")
    @classmethod
    def single_pattern_as_list(cls, v: Any) -> Any:
        """Accept a single pattern string."""
        if isinstance(v, str):
            return [v]
        return v

    @field_validator("statement_dir")
    @classmethod
    def resolve_statement_dir(cls, v: Optional[Path], info: ValidationInfo) -> Optional[Path]:
        """Resolve a relative directory against the config file's directory."""
        base_dir = (info.context or {}).get("base_dir")
        if v is not None and base_dir is not None and not v.is_absolute():
            return Path(base_dir) / v
        return v

    @classmethod
    def from_dict(cls, data: dict[str, Any], base_dir: Path | None = None) -> Config:
        """Create a config from a dictionary.

        Args:
            data: Config values.
            base_dir: Directory that a relative ``statement_dir`` is
                resolved against.

        Raises:
            pydantic.ValidationError: On unknown keys, a missing ``dsn`` or
                wrongly typed values (a ValueError subclass).
        """
        return cls.model_validate(data, context={"base_dir": base_dir})

    @classmethod
    def from_json_file(cls, path: Path | str) -> Config:
        """Load a config from a JSON file.

        A relative ``statement_dir`` is taken relative to the file.
        """
        path = Path(path)
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        return cls.model_validate(data, context={"base_dir": path.parent})

    def table_filter(self) -> Callable[[str], bool]:
        """Return a predicate telling whether a table should be loaded."""
        include = list(self.include_tables)
        exclude = list(self.exclude_tables)

        def accept(name: str) -> bool:
            if include and not any(fnmatch.fnmatchcase(name, p) for p in include):
                return False
            return not any(fnmatch.fnmatchcase(name, p) for p in exclude)

        return accept
