"""Structural diff between two inspection snapshots.

``compare_snapshots(base, target)`` walks the tree by position: scalar header
fields, then each topic (name, observation, media count, items), then each
item (name, detail count). ``old`` always comes from ``base`` and ``new`` from
``target``. Topics and items are aligned by index, not by name, so inserting a
topic in front shifts every following comparison.

The walk accepts models or plain JSON mappings and never raises: missing or
malformed fields are read as empty strings or empty collections.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Mapping
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict

from inspection_desk.models.inspection import TopicKind, topic_kind

_SCALAR_FIELDS = (
    ("title", "Título"),
    ("area", "Área"),
    ("observation", "Observações"),
    ("status", "Status"),
)
_EMPTY = "(vazio)"
_NO_NAME = "(sem nome)"
_NO_OBSERVATION = "(sem observações)"


class DifferenceType(StrEnum):
    FIELD = "field"
    COUNT = "count"
    ADDED = "added"
    REMOVED = "removed"
    GENERAL = "general"


class Difference(BaseModel):
    """Where two snapshots diverge; ``old``/``new`` are display values."""

    model_config = ConfigDict(frozen=True)

    type: DifferenceType
    field: str
    path: str
    old: str | int
    new: str | int


def _node(value: Any) -> Mapping[str, Any] | None:
    if value is None:
        return None
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, Mapping):
        return value
    return {}


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, StrEnum):
        return value.value
    return str(value)


def _sequence(node: Mapping[str, Any], key: str) -> list[Any]:
    value = node.get(key)
    return list(value) if isinstance(value, list | tuple) else []


def _availability(node: Mapping[str, Any] | None) -> str:
    return "Dados disponíveis" if node is not None else "Sem dados"


def compare_snapshots(base: Any, target: Any) -> list[Difference]:
    """List the differences going from ``base`` to ``target``."""
    old_root = _node(base)
    new_root = _node(target)
    if old_root is None and new_root is None:
        return []
    if old_root is None or new_root is None:
        return [
            Difference(
                type=DifferenceType.GENERAL,
                field="Disponibilidade de dados",
                path="root",
                old=_availability(old_root),
                new=_availability(new_root),
            )
        ]

    differences: list[Difference] = []
    for key, label in _SCALAR_FIELDS:
        old_value = _text(old_root.get(key))
        new_value = _text(new_root.get(key))
        if old_value != new_value:
            differences.append(
                Difference(
                    type=DifferenceType.FIELD,
                    field=label,
                    path=key,
                    old=old_value or _EMPTY,
                    new=new_value or _EMPTY,
                )
            )

    old_topics = _sequence(old_root, "topics")
    new_topics = _sequence(new_root, "topics")
    if len(old_topics) != len(new_topics):
        differences.append(
            Difference(
                type=DifferenceType.COUNT,
                field="Número de Tópicos",
                path="topics.length",
                old=len(old_topics),
                new=len(new_topics),
            )
        )

    for index in range(max(len(old_topics), len(new_topics))):
        old_topic = _node(old_topics[index]) if index < len(old_topics) else None
        new_topic = _node(new_topics[index]) if index < len(new_topics) else None
        differences.extend(_compare_topic(index, old_topic, new_topic))
    return differences


def _presence_change(
    old: Mapping[str, Any] | None, *, field: str, name: str, path: str
) -> Difference:
    if old is None:
        return Difference(
            type=DifferenceType.ADDED,
            field=field,
            path=path,
            old="Não existia",
            new=f"Adicionado: {name}",
        )
    return Difference(
        type=DifferenceType.REMOVED,
        field=field,
        path=path,
        old=f"Existia: {name}",
        new="Removido",
    )


def _compare_topic(
    index: int,
    old: Mapping[str, Any] | None,
    new: Mapping[str, Any] | None,
) -> list[Difference]:
    if old is None and new is None:
        return []
    path = f"topics[{index}]"
    fallback = f"Tópico {index + 1}"
    if old is None or new is None:
        present = old if old is not None else new
        name = _text(present.get("name")) or fallback
        return [_presence_change(old, field=f'Tópico "{name}"', name=name, path=path)]

    differences: list[Difference] = []
    old_name = _text(old.get("name"))
    new_name = _text(new.get("name"))
    topic_name = new_name or old_name or fallback

    if old_name != new_name:
        differences.append(
            Difference(
                type=DifferenceType.FIELD,
                field=f"Nome do {topic_name}",
                path=f"{path}.name",
                old=old_name or _NO_NAME,
                new=new_name or _NO_NAME,
            )
        )

    old_observation = _text(old.get("observation")).strip()
    new_observation = _text(new.get("observation")).strip()
    if old_observation != new_observation:
        differences.append(
            Difference(
                type=DifferenceType.FIELD,
                field=f'Observações de "{topic_name}"',
                path=f"{path}.observation",
                old=old_observation or _NO_OBSERVATION,
                new=new_observation or _NO_OBSERVATION,
            )
        )

    old_media = _sequence(old, "media")
    new_media = _sequence(new, "media")
    if len(old_media) != len(new_media):
        differences.append(
            Difference(
                type=DifferenceType.COUNT,
                field=f'Mídia de "{topic_name}"',
                path=f"{path}.media.length",
                old=f"{len(old_media)} arquivo(s)",
                new=f"{len(new_media)} arquivo(s)",
            )
        )

    old_kind = topic_kind(old)
    new_kind = topic_kind(new)
    if old_kind != new_kind:
        differences.append(
            Difference(
                type=DifferenceType.FIELD,
                field=f'Estrutura de "{topic_name}"',
                path=f"{path}.direct_details",
                old=_kind_label(old_kind),
                new=_kind_label(new_kind),
            )
        )

    old_items = _sequence(old, "items")
    new_items = _sequence(new, "items")
    if len(old_items) != len(new_items):
        differences.append(
            Difference(
                type=DifferenceType.COUNT,
                field=f'Itens de "{topic_name}"',
                path=f"{path}.items.length",
                old=f"{len(old_items)} item(s)",
                new=f"{len(new_items)} item(s)",
            )
        )

    for item_index in range(max(len(old_items), len(new_items))):
        old_item = _node(old_items[item_index]) if item_index < len(old_items) else None
        new_item = _node(new_items[item_index]) if item_index < len(new_items) else None
        differences.extend(
            _compare_item(f"{path}.items[{item_index}]", item_index, topic_name, old_item, new_item)
        )

    # Direct-detail topics have no item level to walk
    if old.get("items") is None and new.get("items") is None:
        old_details = _sequence(old, "details")
        new_details = _sequence(new, "details")
        if len(old_details) != len(new_details):
            differences.append(
                Difference(
                    type=DifferenceType.COUNT,
                    field=f'Detalhes diretos de "{topic_name}"',
                    path=f"{path}.details.length",
                    old=f"{len(old_details)} detalhe(s)",
                    new=f"{len(new_details)} detalhe(s)",
                )
            )
    return differences


def _compare_item(
    path: str,
    index: int,
    topic_name: str,
    old: Mapping[str, Any] | None,
    new: Mapping[str, Any] | None,
) -> list[Difference]:
    if old is None and new is None:
        return []
    fallback = f"Item {index + 1}"
    if old is None or new is None:
        present = old if old is not None else new
        name = _text(present.get("name")) or fallback
        return [
            _presence_change(
                old, field=f'Item "{name}" em "{topic_name}"', name=name, path=path
            )
        ]

    differences: list[Difference] = []
    old_name = _text(old.get("name"))
    new_name = _text(new.get("name"))
    item_name = new_name or old_name or fallback
    if old_name != new_name:
        differences.append(
            Difference(
                type=DifferenceType.FIELD,
                field=f'Nome do item "{item_name}" em "{topic_name}"',
                path=f"{path}.name",
                old=old_name or _NO_NAME,
                new=new_name or _NO_NAME,
            )
        )

    old_details = _sequence(old, "details")
    new_details = _sequence(new, "details")
    if len(old_details) != len(new_details):
        differences.append(
            Difference(
                type=DifferenceType.COUNT,
                field=f'Detalhes de "{item_name}" em "{topic_name}"',
                path=f"{path}.details.length",
                old=f"{len(old_details)} detalhe(s)",
                new=f"{len(new_details)} detalhe(s)",
            )
        )
    return differences


def _kind_label(kind: TopicKind) -> str:
    return "Detalhes diretos" if kind == TopicKind.DIRECT else "Itens"


def count_by_type(differences: list[Difference]) -> dict[str, int]:
    """Tally differences per type for summary badges."""
    return dict(Counter(difference.type.value for difference in differences))
