"""Node, taxonomy, and generation result types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class LLMConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    definition: Optional[str] = None
    exclude: Optional[str] = None


class PopupData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    description: str = ""
    questions: List[str] = Field(default_factory=list)


class Node(BaseModel):
    """A topic card.

    ``children_ids`` is always the flattened union of ``children_pages``,
    except for seeded nodes, which carry a flat list and no pages.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    title: str
    hook: str = ""
    children_ids: List[str] = Field(default_factory=list, alias="childrenIds")
    children_pages: List[List[str]] = Field(default_factory=list, alias="childrenPages")
    is_static: bool = False
    llm_config: Optional[LLMConfig] = None
    popup_data: Optional[PopupData] = None

    @property
    def has_children(self) -> bool:
        return bool(self.children_pages) or bool(self.children_ids)

    def pages(self) -> List[List[str]]:
        if self.children_pages:
            return self.children_pages
        if self.children_ids:
            return [self.children_ids]
        return []

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class TaxonomyRoot(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    title: str
    hook: str = ""
    description: Optional[str] = None
    questions: Optional[List[str]] = None
    children: List[Node] = Field(default_factory=list)
    popup_data: Optional[PopupData] = None


class TaxonomyData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    roots: List[TaxonomyRoot] = Field(default_factory=list)


class GeneratedChild(BaseModel):
    """One child as returned by the generate endpoint."""

    model_config = ConfigDict(extra="ignore")

    title: str = Field(min_length=1)
    hook: str = ""
    llm_config: Optional[LLMConfig] = None
    popup_data: Optional[PopupData] = None


class GenerateResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    children: List[GeneratedChild]


@dataclass
class Ok:
    children: List[GeneratedChild] = field(default_factory=list)


@dataclass
class Err:
    reason: str


GenerationResult = Union[Ok, Err]


@dataclass
class PageInfo:
    current: int
    total: int
    has_children: bool
