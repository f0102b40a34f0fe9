"""
Language Edit Batches

The admin UI submits edits as loosely shaped dicts:

    {
        "removed_items": ["Old text", ...],
        "changed_items": {
            "Hello": {"is_new": true, "en_US": "Hello", "tr_TR": "Merhaba"},
            "Bye": {"new_default_text": "Goodbye", "removed_targets": ["tr_TR"]},
        },
        "remove_all": false,
    }

parse_batch() validates such a payload once and turns every changed item
into a tuple of typed operations, so the coordinator never branches on
raw key presence. Nothing is mutated while parsing; any problem raises
ValidationError.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple, Union

from langdesk.config import TEXT_MAX_LENGTH
from langdesk.core.exceptions import ValidationError

RESERVED_PROPS = ("is_new", "new_default_text", "removed_targets")


@dataclass(frozen=True)
class CommitTranslation:
    """A translation text submitted for one locale (may be empty)."""
    locale: str
    text: str


@dataclass(frozen=True)
class RemoveTargets:
    """Translations to drop for the listed locales."""
    locales: Tuple[str, ...]


@dataclass(frozen=True)
class Rename:
    """New source text for the item."""
    new_text: str


@dataclass(frozen=True)
class MarkNew:
    """The item was introduced in this batch."""


EditOp = Union[CommitTranslation, RemoveTargets, Rename, MarkNew]


@dataclass(frozen=True)
class ChangedItem:
    source: str
    ops: Tuple[EditOp, ...] = ()

    @property
    def is_new(self) -> bool:
        return any(isinstance(op, MarkNew) for op in self.ops)

    @property
    def new_default_text(self) -> Optional[str]:
        for op in self.ops:
            if isinstance(op, Rename):
                return op.new_text
        return None

    @property
    def removed_targets(self) -> Set[str]:
        locales: Set[str] = set()
        for op in self.ops:
            if isinstance(op, RemoveTargets):
                locales.update(op.locales)
        return locales

    @property
    def targets(self) -> Dict[str, str]:
        return {op.locale: op.text for op in self.ops if isinstance(op, CommitTranslation)}

    @property
    def carries_translation(self) -> bool:
        """True if any accepted locale has a submitted value, even an empty one."""
        return any(isinstance(op, CommitTranslation) for op in self.ops)

    def target_for(self, locale: str) -> Optional[str]:
        return self.targets.get(locale)


@dataclass(frozen=True)
class LanguageBatch:
    removed_items: Tuple[str, ...] = ()
    changed_items: Tuple[ChangedItem, ...] = ()
    remove_all: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.remove_all and not self.removed_items and not self.changed_items


def _parse_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str) and value.strip().lower() in ("", "0", "false", "1", "true"):
        return value.strip().lower() in ("1", "true")
    raise ValidationError(f"'{field}' must be a boolean", code="invalid_boolean", details={"field": field})


def sanitize_text(value: Any, field: str) -> str:
    """Strip backslashes and enforce TEXT_MAX_LENGTH."""
    if not isinstance(value, str):
        raise ValidationError(f"'{field}' must be a string", code="invalid_text", details={"field": field})
    text = value.replace("\\", "")
    if len(text) > TEXT_MAX_LENGTH:
        raise ValidationError(
            f"'{field}' is longer than {TEXT_MAX_LENGTH} characters",
            code="text_too_long",
            details={"field": field, "max_length": TEXT_MAX_LENGTH},
        )
    return text


def _parse_locale_list(value: Any, field: str, accepted: Iterable[str]) -> Tuple[str, ...]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValidationError(f"'{field}' must be a list of locales", code="invalid_locales", details={"field": field})
    accepted_set = set(accepted)
    unknown = [v for v in value if v not in accepted_set]
    if unknown:
        raise ValidationError(
            f"Unknown locale(s) in '{field}': {', '.join(unknown)}",
            code="unknown_locale",
            details={"field": field, "locales": unknown},
        )
    return tuple(dict.fromkeys(value))


def parse_changed_item(source: str, props: Any, accepted_locales: List[str]) -> ChangedItem:
    """Turn one changed_items entry into a ChangedItem."""
    source = sanitize_text(source, "changed_items")
    if not source:
        raise ValidationError("Changed item without source text", code="empty_source")
    if not isinstance(props, Mapping):
        raise ValidationError(
            f"Properties of '{source}' must be an object",
            code="invalid_item",
            details={"source": source},
        )

    ops: List[EditOp] = []
    for key, value in props.items():
        if key == "is_new":
            if _parse_bool(value, "is_new"):
                ops.append(MarkNew())
        elif key == "new_default_text":
            if value is None:
                continue
            new_text = sanitize_text(value, "new_default_text")
            if new_text:
                ops.append(Rename(new_text))
        elif key == "removed_targets":
            locales = _parse_locale_list(value, "removed_targets", accepted_locales)
            if locales:
                ops.append(RemoveTargets(locales))
        elif key in accepted_locales:
            ops.append(CommitTranslation(key, sanitize_text(value, key)))
        else:
            raise ValidationError(
                f"Unknown locale '{key}' for '{source}'",
                code="unknown_locale",
                details={"source": source, "locale": key},
            )
    return ChangedItem(source=source, ops=tuple(ops))


def parse_batch(payload: Any, accepted_locales: List[str]) -> LanguageBatch:
    """
    Validate a language edit payload.

    Args:
        payload: Decoded JSON body from the admin UI
        accepted_locales: Locales allowed as property keys

    Returns:
        LanguageBatch

    Raises:
        ValidationError: On any malformed field or unknown locale
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        raise ValidationError("Request body must be an object", code="invalid_payload")

    remove_all = _parse_bool(payload.get("remove_all"), "remove_all")

    removed_raw = payload.get("removed_items") or []
    if not isinstance(removed_raw, list) or not all(isinstance(item, str) for item in removed_raw):
        raise ValidationError("'removed_items' must be a list of strings", code="invalid_removed_items")

    changed_raw = payload.get("changed_items") or {}
    if not isinstance(changed_raw, Mapping):
        raise ValidationError("'changed_items' must be an object", code="invalid_changed_items")

    changed = tuple(
        parse_changed_item(source, props, accepted_locales)
        for source, props in changed_raw.items()
    )
    return LanguageBatch(
        removed_items=tuple(removed_raw),
        changed_items=changed,
        remove_all=remove_all,
    )
