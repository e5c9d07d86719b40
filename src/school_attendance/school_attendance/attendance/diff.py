from __future__ import annotations

from typing import Sequence, TypeVar

from .model import StudentMark, TeacherMark

M = TypeVar("M", StudentMark, TeacherMark)


def _changed(before: M, after: M) -> bool:
    if before.status != after.status:
        return True
    after_notes = getattr(after, "notes", None)
    # Omitted notes keep what is stored.
    if after_notes is None:
        return False
    return (getattr(before, "notes", None) or "") != after_notes


def diff_changes(original: Sequence[M], working: Sequence[M]) -> list[M]:
    """Entries of ``working`` whose status or notes differ from ``original``.

    Entries without a counterpart in ``original`` count as changed. Order
    follows ``working``.
    """

    baseline = {m.key: m for m in original}
    return [m for m in working if m.key not in baseline or _changed(baseline[m.key], m)]
