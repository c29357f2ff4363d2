"""Inspection tree: the canonical, field-submitted document shape.

An inspection holds topics; a topic either groups its details under items
(``ItemizedTopic``) or carries them directly (``DirectDetailTopic``, flagged
by ``direct_details``). Details may carry non-conformity records.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from enum import StrEnum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, model_validator

from inspection_desk.models.base import DocumentBase


class InspectionStatus(StrEnum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELED = "canceled"


class InternalStatus(StrEnum):
    """Dashboard badge derived from an inspection's status and delivery."""

    PENDING = "pendente"
    EDITED = "editada"
    DELIVERED = "entregue"


class DetailType(StrEnum):
    TEXT = "text"
    NUMBER = "number"
    SELECT = "select"
    BOOLEAN = "boolean"
    MEASURE = "measure"
    IMAGE = "image"
    VIDEO = "video"


class Severity(StrEnum):
    LOW = "Baixa"
    MEDIUM = "Média"
    HIGH = "Alta"
    CRITICAL = "Crítica"


class NonConformityStatus(StrEnum):
    PENDING = "pendente"
    IN_PROGRESS = "em_andamento"
    RESOLVED = "resolvida"


class TopicKind(StrEnum):
    ITEMIZED = "itemized"
    DIRECT = "direct"


def topic_kind(topic: Any) -> TopicKind:
    """Classify a topic given as a model or a raw mapping."""
    if isinstance(topic, Mapping):
        flag = topic.get("direct_details")
    else:
        flag = getattr(topic, "direct_details", False)
    return TopicKind.DIRECT if flag else TopicKind.ITEMIZED


def _topic_tag(topic: Any) -> str:
    return topic_kind(topic).value


def _drop_nulls(model: type[BaseModel], data: Any) -> Any:
    """Let explicit nulls fall back to the field default where the default is not None."""
    if not isinstance(data, Mapping):
        return data
    fields = model.model_fields
    return {
        key: value
        for key, value in data.items()
        if value is not None or key not in fields or fields[key].default is None
    }


class _TreeNode(BaseModel):
    # Field apps add their own keys; keep them through a pull
    model_config = ConfigDict(extra="allow")

    @model_validator(mode="before")
    @classmethod
    def _null_to_default(cls, data: Any) -> Any:
        return _drop_nulls(cls, data)


class MediaRef(_TreeNode):
    url: str = ""
    type: str = ""
    name: str | None = None


class NonConformity(_TreeNode):
    description: str = ""
    severity: Severity = Severity.LOW
    status: NonConformityStatus = NonConformityStatus.PENDING
    corrective_action: str = ""
    deadline: str | None = None
    media: list[MediaRef] = Field(default_factory=list)


class Detail(_TreeNode):
    name: str = ""
    type: DetailType = DetailType.TEXT
    value: Any = None
    observation: str = ""
    is_damaged: bool = False
    media: list[MediaRef] = Field(default_factory=list)
    non_conformities: list[NonConformity] = Field(default_factory=list)


class Item(_TreeNode):
    name: str = ""
    description: str = ""
    observation: str = ""
    details: list[Detail] = Field(default_factory=list)


class _TopicBase(_TreeNode):
    name: str = ""
    description: str = ""
    observation: str = ""
    media: list[MediaRef] = Field(default_factory=list)


class ItemizedTopic(_TopicBase):
    direct_details: bool = False
    items: list[Item] = Field(default_factory=list)

    @property
    def kind(self) -> TopicKind:
        return TopicKind.ITEMIZED

    @property
    def detail_count(self) -> int:
        return sum(len(item.details) for item in self.items)


class DirectDetailTopic(_TopicBase):
    direct_details: bool = True
    details: list[Detail] = Field(default_factory=list)

    @property
    def kind(self) -> TopicKind:
        return TopicKind.DIRECT

    @property
    def detail_count(self) -> int:
        return len(self.details)


Topic = Annotated[
    Annotated[ItemizedTopic, Tag(TopicKind.ITEMIZED.value)]
    | Annotated[DirectDetailTopic, Tag(TopicKind.DIRECT.value)],
    Discriminator(_topic_tag),
]


class InspectionStatistics(BaseModel):
    total_topics: int = 0
    total_items: int = 0
    total_details: int = 0
    last_updated: datetime | None = None


class InspectionTree(DocumentBase):
    """Content shared by the canonical record, the working copy and releases."""

    model_config = ConfigDict(extra="allow")

    # Canonical records may lack timestamps; never invent them on read
    created_at: datetime | None = None
    updated_at: datetime | None = None
    title: str = ""
    area: str | float | None = None
    observation: str = ""
    status: InspectionStatus = InspectionStatus.PENDING
    topics: list[Topic] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _null_to_default(cls, data: Any) -> Any:
        return _drop_nulls(cls, data)

    def statistics(self) -> InspectionStatistics:
        """Count topics, items and details across both topic shapes."""
        total_items = 0
        total_details = 0
        for topic in self.topics:
            if isinstance(topic, ItemizedTopic):
                total_items += len(topic.items)
            total_details += topic.detail_count
        return InspectionStatistics(
            total_topics=len(self.topics),
            total_items=total_items,
            total_details=total_details,
            last_updated=self.updated_at,
        )


class Inspection(InspectionTree):
    """The canonical inspection record owned by the field app."""

    inspection_edit_blocked: bool = False
    delivered: bool = False
    delivered_at: datetime | None = None
    delivered_release_id: str | None = None
    completed_at: datetime | None = None
    last_editor: str | None = None

    @property
    def internal_status(self) -> InternalStatus:
        if self.delivered_at is not None:
            return InternalStatus.DELIVERED
        if self.status != InspectionStatus.PENDING:
            return InternalStatus.EDITED
        return InternalStatus.PENDING
