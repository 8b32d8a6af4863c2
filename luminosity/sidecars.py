"""
JPEG sidecar files recorded alongside RAW originals, and their cleanup.
"""

import os
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Sequence

from .logging_setup import EventLogger, get_logger

logger = get_logger(__name__)

SIDECAR_COLUMNS = """
SELECT      image.id_local AS id,
            root.absolutePath,
            folder.pathFromRoot,
            file.baseName,
            file.extension,
            file.sidecarExtensions
"""

SIDECAR_FROM = """
FROM        AgLibraryFile           AS file
INNER JOIN  Adobe_images            AS image
ON          file.id_local = image.rootFile
INNER JOIN  AgLibraryFolder         AS folder
ON          file.folder = folder.id_local
INNER JOIN  AgLibraryRootFolder     AS root
ON          folder.rootFolder = root.id_local
WHERE       file.sidecarExtensions  = 'JPG'
AND         image.fileFormat        = 'RAW'
"""


@dataclass
class SidecarFileRecord:
    photo_id: int
    root_path: str
    file_path: str
    file_name: str
    extension: str
    sidecar_extension: str

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> 'SidecarFileRecord':
        photo_id, root_path, file_path, file_name, extension, sidecar_extension = row
        return cls(
            photo_id=photo_id,
            root_path=root_path or "",
            file_path=file_path or "",
            file_name=file_name or "",
            extension=extension or "",
            sidecar_extension=sidecar_extension or "",
        )

    @property
    def sidecar_path(self) -> str:
        return f"{self.root_path}{self.file_path}{self.file_name}.{self.sidecar_extension}"

    @property
    def original_path(self) -> str:
        return f"{self.root_path}{self.file_path}{self.file_name}.{self.extension}"


@dataclass
class SidecarFileStats:
    """
    Summary of a catalog's sidecars: how many exist on disk and their
    total size, plus how many sidecars or originals are missing.
    """
    count: int = 0
    missing_sidecar_count: int = 0
    missing_original_count: int = 0
    total_size_bytes: int = 0


@dataclass
class SidecarDeleteResult:
    total: int = 0
    deleted: int = 0
    skipped: int = 0
    missing: int = 0
    errors: int = 0


def get_sidecar_file_stats(records: Iterable[SidecarFileRecord]) -> SidecarFileStats:
    """Check each sidecar and its original on disk."""
    stats = SidecarFileStats()
    for record in records:
        if not os.path.exists(record.original_path):
            stats.missing_original_count += 1

        try:
            size = os.path.getsize(record.sidecar_path)
        except FileNotFoundError:
            stats.missing_sidecar_count += 1
            continue
        except OSError as e:
            logger.warning(f"Cannot stat sidecar {record.sidecar_path}: {str(e)}")
            continue
        stats.count += 1
        stats.total_size_bytes += size
    return stats


def delete_sidecars(records: Iterable[SidecarFileRecord],
                    delete_missing_originals: bool = False,
                    events: Optional[EventLogger] = None) -> SidecarDeleteResult:
    """
    Delete sidecar files from disk. A sidecar whose original is missing
    is only deleted when delete_missing_originals is set. Failures are
    logged and counted; the loop always runs to the end.
    """
    events = events or EventLogger(logger)
    result = SidecarDeleteResult()

    for record in records:
        result.total += 1
        sidecar = record.sidecar_path

        if not os.path.exists(sidecar):
            events.warning("Missing sidecar; skipping", action="delete", status="skip", path=sidecar)
            result.missing += 1
            continue

        if not os.path.exists(record.original_path):
            if not delete_missing_originals:
                events.info("Missing original for sidecar; skipping", action="delete",
                            status="missing_original", path=sidecar)
                result.skipped += 1
                continue
            events.warning("Missing original for sidecar; deleting", action="delete",
                           status="missing_original", path=sidecar)

        try:
            os.remove(sidecar)
        except OSError as e:
            events.error("Error deleting sidecar", action="delete", status="error",
                         path=sidecar, error=e)
            result.errors += 1
            continue

        events.debug("Deleted sidecar", action="delete", status="ok", path=sidecar)
        result.deleted += 1

    return result
