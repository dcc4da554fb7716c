# tests/test_seed.py
from english_tutor.content import list_chapters
from english_tutor.seed import is_seeded, seed_all, seed_extra_chapters, seed_sample_chapters


def test_is_seeded(ready_db):
    assert not is_seeded(ready_db)
    seed_sample_chapters(ready_db)
    assert is_seeded(ready_db)


def test_seed_sample_chapters(ready_db):
    assert seed_sample_chapters(ready_db) == 3
    chapters = list_chapters(ready_db)
    assert [c.id for c in chapters] == ["chapter-1", "chapter-2", "chapter-3"]
    assert chapters[2].is_premium


def test_seed_extra_chapters(ready_db):
    assert seed_extra_chapters(ready_db) == 2


def test_seed_all(ready_db):
    seed_all(ready_db)
    chapters = list_chapters(ready_db)
    assert [c.id for c in chapters] == [f"chapter-{i}" for i in range(1, 6)]
    question_types = {q.type for c in chapters for q in c.questions}
    assert question_types == {"multiple-choice", "fill-in-blank", "drag-drop", "matching", "reading-passage"}


def test_seed_all_is_idempotent(ready_db):
    seed_all(ready_db)
    seed_all(ready_db)
    assert len(list_chapters(ready_db)) == 5
