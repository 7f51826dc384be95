from .plan_volumes import (
    DEFAULT_SINGLE_NAME,
    PARTITION_MODES,
    PartitionMode,
    VolumePlanEntry,
    plan_volumes,
)

__all__ = [
    "plan_volumes",
    "VolumePlanEntry",
    "PartitionMode",
    "PARTITION_MODES",
    "DEFAULT_SINGLE_NAME",
]
