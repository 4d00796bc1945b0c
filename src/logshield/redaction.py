"""
Sensitive-field redaction for log payloads

Values stored under a sensitive key are partially masked so operators can
still tell values apart without reading them in full. Traversal is
cycle-safe and may be capped at a maximum depth.
"""

import dataclasses
from collections.abc import Mapping
from typing import Any, Dict, Iterable, NamedTuple, Optional, Set

# Replaces containers nested deeper than the configured maximum depth
TOO_DEEP = "[Object: too deep]"


class MaskResult(NamedTuple):
    """Masked text together with the parts left visible"""

    result: str
    head: str
    tail: str


def mask_value(text: str) -> MaskResult:
    """Mask a string, keeping at most two characters at each end

    >>> mask_value("secret123").result
    'se*****23'
    """
    length = len(text)

    if length < 4:
        return MaskResult("*" * max(length, 1), "*", "")

    if length == 4:
        head, tail = text[0], text[3]
        return MaskResult(f"{head}**{tail}", head, tail)

    head, tail = text[:2], text[-2:]
    return MaskResult(f"{head}{'*' * (length - 4)}{tail}", head, tail)


def _mask_scalar(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    return mask_value(value if isinstance(value, str) else str(value)).result


def _is_container(value: Any) -> bool:
    return isinstance(value, (Mapping, list, tuple)) or (
        dataclasses.is_dataclass(value) and not isinstance(value, type)
    )


class Redactor:
    """Rebuild payloads with sensitive fields masked

    The set of sensitive field names is held by reference, so additions made
    by the owner after construction are seen by later calls.

    Args:
        sensitive_fields: Field names whose values are masked
        max_depth: Containers nested deeper than this are replaced with
            ``TOO_DEEP``; ``None`` disables the cap
    """

    def __init__(
        self,
        sensitive_fields: Optional[Set[str]] = None,
        max_depth: Optional[int] = None,
    ):
        self.sensitive_fields: Set[str] = (
            sensitive_fields if sensitive_fields is not None else set()
        )
        self.max_depth = max_depth

    def redact(self, value: Any, sensitive_fields: Optional[Set[str]] = None) -> Any:
        """Return a redacted copy of ``value``

        Scalars outside sensitive keys are returned unchanged. The identity
        cache lives for a single call: aliased and cyclic references resolve
        to the same output object.
        """
        fields = self.sensitive_fields if sensitive_fields is None else sensitive_fields
        if not _is_container(value):
            return value
        return self._process(value, fields, {}, 0)

    def _process(
        self, value: Any, fields: Set[str], cache: Dict[int, Any], depth: int
    ) -> Any:
        if not _is_container(value):
            return value

        cached = cache.get(id(value))
        if cached is not None:
            return cached

        if self.max_depth is not None and depth > self.max_depth:
            return TOO_DEEP

        if isinstance(value, tuple):
            # Immutable: a cycle can only pass through a mutable container,
            # which is cached before its children are visited.
            result = tuple(self._process(item, fields, cache, depth + 1) for item in value)
            if hasattr(value, "_fields"):
                result = type(value)(*result)
            cache[id(value)] = result
            return result

        if isinstance(value, list):
            out_list: list = []
            cache[id(value)] = out_list
            out_list.extend(self._process(item, fields, cache, depth + 1) for item in value)
            return out_list

        if isinstance(value, Mapping):
            items: Iterable = value.items()
        else:
            items = (
                (f.name, getattr(value, f.name)) for f in dataclasses.fields(value)
            )

        out: Dict[Any, Any] = {}
        cache[id(value)] = out
        for key, item in items:
            if isinstance(key, str) and key in fields and not _is_container(item):
                out[key] = _mask_scalar(item)
            else:
                out[key] = self._process(item, fields, cache, depth + 1)
        return out


def redact(
    value: Any, sensitive_fields: Iterable[str], max_depth: Optional[int] = None
) -> Any:
    """Redact ``value`` once with a throwaway Redactor"""
    return Redactor(set(sensitive_fields), max_depth=max_depth).redact(value)
