"""Pydantic models for the configuration sync engine.

Defines the typed records that flow between sync modules:

- ``Bundle``: A bundle definition projected from its YAML document.
- ``FieldStorageFragment``: Entity-type-wide field storage definition.
- ``FieldInstanceFragment``: Per-bundle field binding.
- ``BaseFieldOverrideFragment``: Per-bundle override of a base field.
- ``FieldDescriptor``: Merged view of one field on one bundle.
- ``BundleRecord``: A bundle with its merged fields (index entry).
- ``SkippedFile``: A file ignored during a sync pass, with the reason.
- ``SyncSummary``: Bundle and field counts of an index.
- ``SyncReport``: Outcome of a full sync pass.

All models are frozen (immutable).  Defaults are applied when a record is
built from YAML, so no downstream code sees ``None`` for text, flags or
cardinality.
"""

from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, Field

CARDINALITY_UNLIMITED = -1


class Bundle(BaseModel):
    """A bundle definition.

    Attributes:
        id: Bundle machine name, unique per entity type.
        label: Human-readable name.
        description: Bundle description.
        source: Media source plugin id (media bundles only).
    """

    id: str
    label: str = ""
    description: str = ""
    source: str = ""

    model_config = {"frozen": True}


class FieldStorageFragment(BaseModel):
    """Field storage definition shared by every bundle using the field.

    Attributes:
        name: Field machine name.
        type: Field type plugin id (``string``, ``text_long``, ...).
        cardinality: ``1`` single value, ``-1`` unlimited, ``n`` fixed.
        settings: Storage settings.
    """

    name: str
    type: str = ""
    cardinality: int = 1
    settings: Dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}


class FieldInstanceFragment(BaseModel):
    """Binding of a field storage to one bundle.

    Attributes:
        name: Field machine name.
        label: Field label on this bundle.
        type: Field type as declared by the instance (may be empty).
        required: Whether a value is required.
        description: Help text.
        settings: Instance settings.
    """

    name: str
    label: str = ""
    type: str = ""
    required: bool = False
    description: str = ""
    settings: Dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}


class BaseFieldOverrideFragment(FieldInstanceFragment):
    """Per-bundle override of a base field (``title``, ``status``, ...)."""


class FieldDescriptor(BaseModel):
    """Merged description of one field on one bundle."""

    name: str
    label: str = ""
    type: str = ""
    required: bool = False
    cardinality: int = 1
    description: str = ""
    settings: Dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}

    @property
    def is_unlimited(self) -> bool:
        """True when the field accepts any number of values."""
        return self.cardinality == CARDINALITY_UNLIMITED


class BundleRecord(BaseModel):
    """Index entry for one bundle.

    Attributes:
        id: Bundle machine name.
        label: Human-readable name.
        description: Bundle description.
        fields: Field name to merged descriptor.
    """

    id: str
    label: str = ""
    description: str = ""
    fields: Dict[str, FieldDescriptor] = Field(default_factory=dict)

    model_config = {"frozen": True}


# entity type -> bundle id -> record
EntityIndex = Dict[str, Dict[str, BundleRecord]]


class SkippedFile(BaseModel):
    """A file ignored during a sync pass.

    Attributes:
        filename: Name of the file within the config directory.
        reason: Why the file was skipped.
    """

    filename: str
    reason: str

    model_config = {"frozen": True}


class SyncSummary(BaseModel):
    """Bundle and field counts for an index.

    Attributes:
        bundles_by_entity_type: Entity type to number of bundles.
        total_bundles: Number of bundles across all entity types.
        total_fields: Number of fields across all bundles.
    """

    bundles_by_entity_type: Dict[str, int] = Field(default_factory=dict)
    total_bundles: int = 0
    total_fields: int = 0

    model_config = {"frozen": True}


class SyncReport(BaseModel):
    """Aggregate outcome of one synchronization pass.

    Attributes:
        directory: The config directory that was read.
        index: The resulting entity index.
        skipped: Files ignored during the pass.
        started_at: ISO 8601 timestamp when the pass started.
        completed_at: ISO 8601 timestamp when the pass completed.
    """

    directory: str
    index: EntityIndex = Field(default_factory=dict)
    skipped: list[SkippedFile] = []
    started_at: str
    completed_at: str | None = None

    model_config = {"frozen": True}

    @property
    def bundle_count(self) -> int:
        """Number of bundles indexed."""
        return sum(len(bundles) for bundles in self.index.values())

    @property
    def field_count(self) -> int:
        """Number of fields indexed across all bundles."""
        return sum(
            len(bundle.fields)
            for bundles in self.index.values()
            for bundle in bundles.values()
        )
