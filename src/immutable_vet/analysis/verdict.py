"""Immutability verdicts."""

from __future__ import annotations

from enum import Enum


class Verdict(Enum):
    """Classification of a type.

    The three template verdicts are given to pointers to generated immutable
    types. They count as immutable but carry extra obligations: the type must
    be referenced through the pointer and constructed by generated code.
    """

    NOT_IMMUTABLE = "not_immutable"
    IMMUTABLE = "immutable"
    TEMPLATE_LIST = "template_list"
    TEMPLATE_MAP = "template_map"
    TEMPLATE_STRUCT = "template_struct"

    @property
    def is_immutable(self) -> bool:
        return self is not Verdict.NOT_IMMUTABLE

    @property
    def is_list_or_map(self) -> bool:
        return self in (Verdict.TEMPLATE_LIST, Verdict.TEMPLATE_MAP)
