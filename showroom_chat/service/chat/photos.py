import logging
import re
import uuid
from typing import Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError

from showroom_chat.model.chat.conversation import CatalogSubject

logger = logging.getLogger(__name__)

UUID_RE = re.compile(r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}")


class SubjectCatalog(Protocol):
    def find_subject(self, subject_id: str) -> Optional[CatalogSubject]: ...


def extract_subject_ids(text: str) -> list[str]:
    """Canonical lowercase ids embedded in the text, first occurrence order, no repeats."""
    ids: list[str] = []
    for m in UUID_RE.finditer(text or ""):
        try:
            value = str(uuid.UUID(m.group(0)))
        except ValueError:
            continue
        if value not in ids:
            ids.append(value)
    return ids


class PhotoEnricher:
    def __init__(self, catalog: SubjectCatalog):
        self.catalog = catalog

    def enrich(self, *texts: Optional[str]) -> Optional[list[str]]:
        """
        Collect the photos of every catalog vehicle mentioned in the texts.

        Texts are scanned in order, ids in order of appearance; each URL is
        kept once. Returns None when nothing resolves.
        """
        photos: list[str] = []
        seen_ids: set[str] = set()
        for text in texts:
            if not text:
                continue
            for subject_id in extract_subject_ids(text):
                if subject_id in seen_ids:
                    continue
                seen_ids.add(subject_id)
                for url in self._photos_for(subject_id):
                    if url not in photos:
                        photos.append(url)
        return photos or None

    def _photos_for(self, subject_id: str) -> list[str]:
        try:
            subject = self.catalog.find_subject(subject_id)
        except SQLAlchemyError:
            logger.exception("photo lookup failed vehicle_id=%s", subject_id)
            return []
        if subject is None:
            return []
        logger.debug("photos found vehicle_id=%s count=%s", subject_id, len(subject.photo_urls))
        return subject.photo_urls
