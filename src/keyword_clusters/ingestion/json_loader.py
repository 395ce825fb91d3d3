"""JSON file loader and validator for keyword files."""

import json
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from keyword_clusters.clustering.types import Keyword
from keyword_clusters.exceptions import InvalidInputError


class KeywordData(BaseModel):
    id: str | None = None
    text: str = Field(min_length=1)
    serp_urls: list[str] = []
    serp_titles: list[str] = []
    search_volume: int | None = Field(None, ge=0)
    difficulty: float | None = None
    # Suppliers attach extra metrics (cpc, intent, ...) we ignore
    model_config = ConfigDict(extra="allow")

    def to_keyword(self) -> Keyword:
        return Keyword(
            id=self.id,
            text=self.text,
            serp_urls=tuple(self.serp_urls),
            serp_titles=tuple(self.serp_titles),
            search_volume=self.search_volume,
            difficulty=self.difficulty,
        )


class KeywordFileData(BaseModel):
    keywords: list[KeywordData]
    metadata: dict | None = None


def parse_keywords(raw_data: object) -> list[Keyword]:
    """Validate decoded JSON and convert it to ``Keyword`` values.

    Accepts either ``{"keywords": [...]}`` or a bare list of keyword objects.

    Raises:
        InvalidInputError: If the data fails validation.
    """
    if isinstance(raw_data, list):
        raw_data = {"keywords": raw_data}

    try:
        file_data = KeywordFileData.model_validate(raw_data)
    except ValidationError as e:
        raise InvalidInputError(f"Invalid keyword data: {e}") from e

    return [k.to_keyword() for k in file_data.keywords]


def load_keyword_file(file_path: Path) -> list[Keyword]:
    """Read and validate a JSON keyword file.

    Raises:
        InvalidInputError: If the file contains invalid JSON or fails validation.
    """
    try:
        with open(file_path, encoding="utf-8") as f:
            raw_data = json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidInputError(f"Invalid JSON in {file_path}: {e}") from e

    return parse_keywords(raw_data)
