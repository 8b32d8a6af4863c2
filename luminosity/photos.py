"""
Per-photo summary records assembled from the catalog's image, file,
EXIF and IPTC tables.
"""

import datetime
import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional, Sequence

from .apex import format_fnumber, shutter_speed_to_exposure_time
from .logging_setup import get_logger

logger = get_logger(__name__)

PHOTO_RECORD_SELECT = """
SELECT    image.id_local,
          image.id_global,
          rootFolder.absolutePath || folder.pathFromRoot || rootFile.baseName || '.' || rootFile.extension AS fullName,
          coalesce(Lens.value, 'Unknown') AS lens,
          coalesce(Camera.value, 'Unknown') AS camera,
          image.fileFormat,
          image.fileHeight,
          image.fileWidth,
          image.orientation,
          image.captureTime,
          image.rating,
          image.colorLabels,
          image.pick,
          exif.dateDay,
          exif.dateMonth,
          exif.dateYear,
          exif.flashFired,
          exif.isoSpeedRating,
          exif.shutterSpeed,
          exif.focalLength,
          exif.aperture,
          exif.hasGPS,
          exif.gpsLatitude,
          exif.gpsLongitude,
          iptc.caption,
          iptc.copyright,
          coalesce(Creator.value, 'Unknown') AS creator
"""

PHOTO_RECORD_FROM = """
FROM      Adobe_images              image
JOIN      AgLibraryFile             rootFile   ON   rootFile.id_local = image.rootFile
JOIN      AgLibraryFolder           folder     ON     folder.id_local = rootFile.folder
JOIN      AgLibraryRootFolder       rootFolder ON rootFolder.id_local = folder.rootFolder
LEFT JOIN AgLibraryIPTC             iptc       ON      image.id_local = iptc.image
LEFT JOIN AgHarvestedExifMetadata   exif       ON      image.id_local = exif.image
LEFT JOIN AgInternedExifLens        Lens       ON       Lens.id_local = exif.lensRef
LEFT JOIN AgInternedExifCameraModel Camera     ON     Camera.id_local = exif.cameraModelRef
LEFT JOIN AgInternedIptcCreator     Creator    ON    Creator.id_local = iptc.image
"""

PHOTO_RECORD_ORDER_BY = "ORDER BY fullName"

_TIME_FORMATS = (
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%d",
)


def parse_time(value: Optional[str]) -> Optional[datetime.datetime]:
    """
    Parse a catalog capture time. Lightroom stores ISO 8601 text, with
    or without fractional seconds and a UTC offset.

    Raises:
        ValueError: If the value is not a recognised timestamp
    """
    if value is None or value == "":
        return None
    try:
        return datetime.datetime.fromisoformat(value)
    except ValueError:
        pass
    for fmt in _TIME_FORMATS:
        try:
            return datetime.datetime.strptime(value, fmt)
        except ValueError:
            continue
    raise ValueError(f"Unrecognised capture time: {value!r}")


def _to_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


@dataclass
class PhotoRecord:
    """
    The most commonly used information about one photo. Records carry
    no reference to their catalog; preview lookups take the catalog's
    previews explicitly.
    """
    id: int
    id_global: str
    full_name: str
    lens: Optional[str] = None
    camera: Optional[str] = None

    # Image table
    file_format: Optional[str] = None
    file_height: Optional[int] = None
    file_width: Optional[int] = None
    orientation: Optional[str] = None
    capture_time: Optional[datetime.datetime] = None
    rating: Optional[str] = None
    color_labels: Optional[str] = None
    pick: Optional[int] = None

    # Exif
    date_day: Optional[int] = None
    date_month: Optional[int] = None
    date_year: Optional[int] = None
    flash_fired: Optional[bool] = None
    iso: Optional[str] = None
    shutter_speed: Optional[float] = None
    exposure_time: Optional[str] = None
    focal_length: Optional[str] = None
    aperture: Optional[float] = None
    fnumber: Optional[str] = None
    has_gps: bool = False
    lat: Optional[float] = None
    lon: Optional[float] = None

    # Iptc
    caption: Optional[str] = None
    copyright: Optional[str] = None
    creator: Optional[str] = None

    @property
    def base_name(self) -> str:
        """File name of the original without directory or extension."""
        return os.path.splitext(os.path.basename(self.full_name or ""))[0]

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> 'PhotoRecord':
        (photo_id, id_global, full_name, lens, camera,
         file_format, file_height, file_width, orientation, capture_time,
         rating, color_labels, pick,
         date_day, date_month, date_year, flash_fired, iso, shutter_speed,
         focal_length, aperture, has_gps, lat, lon,
         caption, copyright, creator) = row

        record = cls(
            id=photo_id,
            id_global=id_global,
            full_name=full_name,
            lens=lens,
            camera=camera,
            file_format=file_format,
            file_height=file_height,
            file_width=file_width,
            orientation=orientation,
            rating=None if rating is None else str(rating),
            color_labels=color_labels,
            pick=pick,
            date_day=date_day,
            date_month=date_month,
            date_year=date_year,
            flash_fired=None if flash_fired is None else bool(flash_fired),
            iso=None if iso is None else str(iso),
            focal_length=None if focal_length is None else str(focal_length),
            has_gps=bool(has_gps),
            lat=lat,
            lon=lon,
            caption=caption,
            copyright=copyright,
            creator=creator,
        )

        try:
            record.capture_time = parse_time(capture_time)
        except ValueError as e:
            logger.warning(f"Photo {photo_id}: {str(e)}")

        record.shutter_speed = _to_float(shutter_speed)
        if record.shutter_speed is not None:
            record.exposure_time = shutter_speed_to_exposure_time(record.shutter_speed)

        record.aperture = _to_float(aperture)
        if record.aperture is not None:
            record.fnumber = format_fnumber(record.aperture)

        return record

    def to_dict(self) -> Dict[str, Any]:
        result = {f.name: getattr(self, f.name) for f in fields(self)}
        if self.capture_time is not None:
            result['capture_time'] = self.capture_time.isoformat()
        return result
