import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from image_store.db.models import Image
from image_store.infrastructure.persistence.sqlalchemy.repositories.image_repository_sql import SqlImageRepository
from image_store.exceptions import PersistenceError


@pytest.fixture
def session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as s:
        yield s


def _create(repo, path="/uploads/images/gallery/2026-10-Oct/a.png", image_type="gallery", uploaded_to=42, actor_id=1):
    return repo.create(
        name=path.rsplit("/", 1)[-1],
        image_type=image_type,
        path=path,
        url="http://localhost:8000" + path,
        uploaded_to=uploaded_to,
        actor_id=actor_id,
    )


def test_create_sets_audit_fields(session):
    repo = SqlImageRepository(session)
    rec = _create(repo)
    assert rec.id is not None
    assert rec.created_by == 1 and rec.updated_by == 1
    assert rec.created_at == rec.updated_at
    assert repo.get_by_id(rec.id) == rec


def test_get_missing_returns_none(session):
    repo = SqlImageRepository(session)
    assert repo.get_by_id(999) is None
    assert repo.find_first_by_type("drawio") is None


def test_find_first_by_type(session):
    repo = SqlImageRepository(session)
    _create(repo, path="/uploads/images/gallery/2026-10-Oct/a.png")
    first = _create(repo, path="/uploads/images/drawio/2026-10-Oct/d1.png", image_type="drawio")
    _create(repo, path="/uploads/images/drawio/2026-10-Oct/d2.png", image_type="drawio")
    assert repo.find_first_by_type("drawio").id == first.id


def test_update_touches_updated_fields_only(session):
    repo = SqlImageRepository(session)
    rec = _create(repo, actor_id=1)
    updated = repo.update(rec.id, actor_id=7)
    assert updated.updated_by == 7
    assert updated.created_by == 1
    assert updated.path == rec.path
    assert updated.updated_at >= rec.updated_at
    assert repo.update(999, actor_id=7) is None


def test_delete_is_idempotent(session):
    repo = SqlImageRepository(session)
    rec = _create(repo)
    assert repo.delete(rec.id) is True
    assert repo.get_by_id(rec.id) is None
    assert repo.delete(rec.id) is False


def test_path_is_unique(session):
    repo = SqlImageRepository(session)
    rec = _create(repo)
    assert repo.path_exists(rec.path)
    with pytest.raises(PersistenceError):
        _create(repo)
    # session is usable again after the rollback
    assert repo.get_by_id(rec.id) is not None


def test_list_by_type_pages_and_filters(session):
    repo = SqlImageRepository(session)
    for i in range(5):
        _create(repo, path=f"/uploads/images/gallery/2026-10-Oct/{i}.png", uploaded_to=42 if i < 3 else 7)
    _create(repo, path="/uploads/images/drawio/2026-10-Oct/d.png", image_type="drawio")

    page, has_more = repo.list_by_type("gallery", page=0, count=2)
    assert len(page) == 2 and has_more is True

    page, has_more = repo.list_by_type("gallery", page=2, count=2)
    assert len(page) == 1 and has_more is False

    page, has_more = repo.list_by_type("gallery", uploaded_to=42)
    assert {r.uploaded_to for r in page} == {42}
    assert len(page) == 3 and has_more is False


def test_rows_map_to_images_table(session):
    repo = SqlImageRepository(session)
    rec = _create(repo)
    row = session.get(Image, rec.id)
    assert row.url == "http://localhost:8000" + rec.path
    assert row.type == "gallery"


def test_timestamps_round_trip_as_naive_utc(session):
    repo = SqlImageRepository(session)
    rec = _create(repo)
    updated = repo.update(rec.id, actor_id=2)

    session.expire_all()
    stored = repo.get_by_id(rec.id)

    assert stored.created_at == rec.created_at
    assert stored.updated_at == updated.updated_at
    assert stored.created_at.tzinfo is None and stored.updated_at.tzinfo is None
