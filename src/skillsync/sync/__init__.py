"""
Sync module -- reconcile versions, assemble skills, write tool directories.
"""

from .assembler import MANIFEST_FILENAME, SUPPORTED_SUBFOLDERS, SkillAssembler, is_syncable
from .engine import SyncEngine
from .models import (
    CollectedSkill,
    ReconcileResult,
    SkillFile,
    SyncReport,
    VersionUpdate,
    WriteReport,
)
from .reconciler import VersionReconciler, find_updates
from .writer import TargetWriter, is_overridden

__all__ = [
    "MANIFEST_FILENAME",
    "SUPPORTED_SUBFOLDERS",
    "SkillAssembler",
    "is_syncable",
    "SyncEngine",
    "CollectedSkill",
    "ReconcileResult",
    "SkillFile",
    "SyncReport",
    "VersionUpdate",
    "WriteReport",
    "VersionReconciler",
    "find_updates",
    "TargetWriter",
    "is_overridden",
]
