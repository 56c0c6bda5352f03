"""Structural edits on lesson documents.

A draft is never patched in place.  Each edit deep-copies the document, changes
exactly one addressed location and hands back the copy, so whatever still holds
the previous draft keeps seeing the previous content.

Paths address a location from the document root, either as a sequence of keys
and list indices or as a dotted string::

    ("student_book_content", "new_words", 3, "english")
    "teachers_guide_content.drills.verbs_drill.sentences.0"
"""

import copy
from typing import Any, Sequence, Union

from pydantic import ValidationError

from linguagen.exceptions import DocumentPathError, DocumentSchemaError
from linguagen.schemas.lesson import LessonDocument

Path = Union[str, Sequence[Union[str, int]]]


def validate_document(data: Any) -> dict:
    """Check an object graph against the lesson schema and return it unchanged."""
    try:
        LessonDocument.model_validate(data)
    except ValidationError as e:
        raise DocumentSchemaError(f"Lesson does not match the lesson schema: {e}") from e
    return data


def parse_path(path: Path) -> list:
    if isinstance(path, str):
        parts = [p for p in path.split(".") if p]
        return [int(p) if p.lstrip("-").isdigit() else p for p in parts]
    return list(path)


def _step(node: Any, part: Union[str, int], where: list) -> Any:
    if isinstance(node, dict):
        if not isinstance(part, str) or part not in node:
            raise DocumentPathError(f"No field {part!r} at {_fmt(where)}")
        return node[part]
    if isinstance(node, list):
        if not isinstance(part, int) or not 0 <= part < len(node):
            raise DocumentPathError(f"No item {part!r} at {_fmt(where)}")
        return node[part]
    raise DocumentPathError(f"{_fmt(where)} is a leaf value")


def _fmt(parts: list) -> str:
    return ".".join(str(p) for p in parts) or "<root>"


def _resolve(doc: dict, parts: list) -> Any:
    node = doc
    for i, part in enumerate(parts):
        node = _step(node, part, parts[:i])
    return node


def _json_type(value: Any) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, str):
        return "string"
    if value is None:
        return "null"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def get_value(doc: dict, path: Path) -> Any:
    return _resolve(doc, parse_path(path))


def set_field(doc: dict, path: Path, value: Any) -> dict:
    """Replace one leaf value (a string or a number).

    The new value must have the same JSON type as the one it replaces, so text
    stays text and durations stay integers.
    """
    parts = parse_path(path)
    if not parts:
        raise DocumentPathError("An edit needs a path below the document root")
    edited = copy.deepcopy(doc)
    parent = _resolve(edited, parts[:-1])
    current = _step(parent, parts[-1], parts[:-1])

    if isinstance(current, (dict, list)):
        raise DocumentPathError(f"{_fmt(parts)} is not a leaf field; use replace_item")
    if current is not None and _json_type(current) != _json_type(value):
        raise DocumentPathError(
            f"{_fmt(parts)} holds a {_json_type(current)}, got a {_json_type(value)}"
        )
    parent[parts[-1]] = value
    return validate_document(edited)


def _target_list(edited: dict, parts: list) -> list:
    target = _resolve(edited, parts)
    if not isinstance(target, list):
        raise DocumentPathError(f"{_fmt(parts)} is not a list")
    return target


def replace_item(doc: dict, path: Path, index: int, item: Any) -> dict:
    """Replace the element at ``index`` of the list found at ``path``."""
    parts = parse_path(path)
    edited = copy.deepcopy(doc)
    target = _target_list(edited, parts)
    if not 0 <= index < len(target):
        raise DocumentPathError(f"No item {index} at {_fmt(parts)}")
    target[index] = copy.deepcopy(item)
    return validate_document(edited)


def insert_item(doc: dict, path: Path, index: int, item: Any) -> dict:
    """Insert ``item`` before ``index``; an index equal to the length appends."""
    parts = parse_path(path)
    edited = copy.deepcopy(doc)
    target = _target_list(edited, parts)
    if not 0 <= index <= len(target):
        raise DocumentPathError(f"Cannot insert at {index} in {_fmt(parts)}")
    target.insert(index, copy.deepcopy(item))
    return validate_document(edited)


def remove_item(doc: dict, path: Path, index: int) -> dict:
    parts = parse_path(path)
    edited = copy.deepcopy(doc)
    target = _target_list(edited, parts)
    if not 0 <= index < len(target):
        raise DocumentPathError(f"No item {index} at {_fmt(parts)}")
    del target[index]
    return validate_document(edited)
