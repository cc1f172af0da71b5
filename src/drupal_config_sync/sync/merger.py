"""Field merge rules for the sync engine.

A configurable field is described by two files: the entity-type-wide
storage (``field.storage.*``) and the per-bundle instance
(``field.field.*``).  ``merge_field`` combines them with fixed
precedence:

* ``type`` -- instance type, else storage type, else ``""``.
* ``cardinality`` -- storage only (instances never declare it), else 1.
* ``settings`` -- storage settings updated by instance settings; the
  instance wins on key conflicts.  The merge is shallow.
* ``label``, ``required``, ``description`` -- instance only.

Base fields have no storage file; ``merge_base_field_override`` turns a
per-bundle override into a descriptor with single cardinality.

Both functions are pure and independent of file I/O.
"""

from __future__ import annotations

from drupal_config_sync.sync.models import (
    BaseFieldOverrideFragment,
    FieldDescriptor,
    FieldInstanceFragment,
    FieldStorageFragment,
)


def merge_field(
    storage: FieldStorageFragment | None,
    instance: FieldInstanceFragment,
) -> FieldDescriptor:
    """Merge a field instance with its (optional) storage definition.

    Args:
        storage: The field storage for ``instance.name``, or ``None`` if
            the export has no storage file for it.
        instance: The field instance bound to a bundle.

    Returns:
        The merged ``FieldDescriptor``.

    Raises:
        ValueError: If the instance has an empty field name.
    """
    if not instance.name:
        raise ValueError("Field instance has no field name")

    settings: dict = {}
    if storage is not None:
        settings.update(storage.settings)
    settings.update(instance.settings)

    return FieldDescriptor(
        name=instance.name,
        label=instance.label,
        type=instance.type or (storage.type if storage else "") or "",
        required=instance.required,
        cardinality=(storage.cardinality if storage else 0) or 1,
        description=instance.description,
        settings=settings,
    )


def merge_base_field_override(
    override: BaseFieldOverrideFragment,
) -> FieldDescriptor:
    """Build a descriptor for a base field overridden on one bundle.

    Raises:
        ValueError: If the override has an empty field name.
    """
    if not override.name:
        raise ValueError("Base field override has no field name")
    return FieldDescriptor(
        name=override.name,
        label=override.label,
        type=override.type,
        required=override.required,
        cardinality=1,
        description=override.description,
        settings=dict(override.settings),
    )


def merge_bundle_fields(
    storages: dict[str, FieldStorageFragment],
    instances: list[FieldInstanceFragment],
    overrides: list[BaseFieldOverrideFragment] | None = None,
) -> dict[str, FieldDescriptor]:
    """Build the complete field map of one bundle.

    Configurable fields (instances) take precedence over base field
    overrides with the same name.  Fields present only in *storages* are
    not included.

    Args:
        storages: Field name to storage for the bundle's entity type.
        instances: Instances bound to the bundle.
        overrides: Base field overrides for the bundle.

    Returns:
        Field name to merged descriptor.
    """
    fields: dict[str, FieldDescriptor] = {}
    for override in overrides or []:
        fields[override.name] = merge_base_field_override(override)
    for instance in instances:
        fields[instance.name] = merge_field(
            storages.get(instance.name), instance
        )
    return fields
