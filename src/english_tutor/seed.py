"""Seed the document store with the bundled chapters."""
from english_tutor.content import CHAPTERS_COLLECTION, load_bundled_chapters
from english_tutor.db import list_documents
from english_tutor.importer import batch_upload


def is_seeded(db_path: str) -> bool:
    """Check whether the store already holds any chapters."""
    return len(list_documents(db_path, CHAPTERS_COLLECTION)) > 0


def seed_sample_chapters(db_path: str) -> int:
    """Upload the three starter chapters."""
    return batch_upload(db_path, load_bundled_chapters("sample_chapters.json"))


def seed_extra_chapters(db_path: str) -> int:
    """Upload the advanced grammar and business English chapters."""
    return batch_upload(db_path, load_bundled_chapters("extra_chapters.json"))


def seed_all(db_path: str) -> None:
    """Run all seed functions in order."""
    if is_seeded(db_path):
        return
    seed_sample_chapters(db_path)
    seed_extra_chapters(db_path)
