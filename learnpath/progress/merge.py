"""Reconcile a guest progress record with an identified user's record."""

from .models import ProgressEntry, ProgressRecord


def merge_entry(remote: ProgressEntry, guest: ProgressEntry) -> ProgressEntry:
    """Pick the winning entry when both records track the same item.

    Completion beats incompletion regardless of recency. When both are
    incomplete the strictly later activity wins and ties keep `remote`.
    When both are completed `remote` is kept.
    """
    if guest.completed and not remote.completed:
        return guest
    if remote.completed:
        return remote
    if guest.last_activity_at > remote.last_activity_at:
        return guest
    return remote


def merge(remote: ProgressRecord | None, guest: ProgressRecord | None) -> ProgressRecord:
    """Merge `guest` into `remote` and return a new record.

    Keys only present in `remote` pass through unchanged and neither input is
    mutated. The merge is idempotent: merging the same guest record into the
    result again yields the result.
    """
    merged: ProgressRecord = dict(remote or {})
    for item_id, guest_entry in (guest or {}).items():
        remote_entry = merged.get(item_id)
        merged[item_id] = guest_entry if remote_entry is None else merge_entry(remote_entry, guest_entry)
    return merged


def changed_entries(original: ProgressRecord | None, merged: ProgressRecord) -> ProgressRecord:
    """Return the entries of `merged` that are new or differ from `original`.

    Entries are compared on watched time, completion and last activity.
    """
    original = original or {}
    return {item_id: entry for item_id, entry in merged.items() if original.get(item_id) != entry}
