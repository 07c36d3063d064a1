"""
Validation logic for moments.

Moments are validated before they reach the history so the log never
records an edit the store would reject.
"""

from collections import Counter

from src.network_model import ModelIntegrityError, ModelStore, Moment

from .models import ValidationIssue


def validate_disjoint(moment: Moment) -> list[ValidationIssue]:
    """
    Validate that no asset is both put and deleted.

    Args:
        moment: The moment to check

    Returns:
        One issue per overlapping id
    """
    put_ids = {asset.id for asset in moment.put_assets}
    return [
        ValidationIssue(
            asset_id=asset_id,
            message=f"Asset '{asset_id}' is both put and deleted"
        )
        for asset_id in sorted(put_ids.intersection(moment.delete_assets))
    ]


def validate_unique_ids(moment: Moment) -> list[ValidationIssue]:
    """Validate that each id appears at most once per list."""
    issues: list[ValidationIssue] = []

    put_counts = Counter(asset.id for asset in moment.put_assets)
    for asset_id, count in sorted(put_counts.items()):
        if count > 1:
            issues.append(ValidationIssue(
                asset_id=asset_id,
                message=f"Asset '{asset_id}' is put {count} times"
            ))

    delete_counts = Counter(moment.delete_assets)
    for asset_id, count in sorted(delete_counts.items()):
        if count > 1:
            issues.append(ValidationIssue(
                asset_id=asset_id,
                message=f"Asset '{asset_id}' is deleted {count} times"
            ))

    return issues


def validate_not_empty(moment: Moment) -> ValidationIssue | None:
    if moment.is_empty:
        return ValidationIssue(message="Moment has no changes")
    return None


def validate_against_store(store: ModelStore, moment: Moment) -> ValidationIssue | None:
    """
    Dry-run the moment on a scratch copy of the store.

    Returns:
        ValidationIssue if the store would reject it, None otherwise
    """
    scratch = ModelStore(version=store.get_model_version())
    scratch.restore_to_base(store.capture_model_snapshot())
    try:
        scratch.materialize(moment)
    except ModelIntegrityError as e:
        return ValidationIssue(asset_id=e.asset_id, message=e.message)
    return None


def validate_moment(
    moment: Moment,
    store: ModelStore | None = None,
) -> list[ValidationIssue]:
    """
    Validate a moment, optionally against the live store.

    Structural checks run first; the store dry-run only runs when they pass.

    Args:
        moment: The moment to validate
        store: Live store to dry-run against (skipped when None)

    Returns:
        List of issues (empty if valid)
    """
    issues: list[ValidationIssue] = []

    issue = validate_not_empty(moment)
    if issue:
        issues.append(issue)

    issues.extend(validate_disjoint(moment))
    issues.extend(validate_unique_ids(moment))

    if not issues and store is not None:
        issue = validate_against_store(store, moment)
        if issue:
            issues.append(issue)

    return issues
