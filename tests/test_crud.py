# tests/test_crud.py
from coach_scraper import crud, models
from coach_scraper.scraper.records import ImageRef, NormalizedRecord
from coach_scraper.services import persist_record


def make_record(external_id="42", **overrides):
    data = dict(
        external_id=external_id, title="2005 Liberty H3-45", year=2005, make="Liberty",
        model="H345", price=650000.0, source_url=f"https://host/detail.html?id={external_id}",
        images=[ImageRef("https://host/a.jpg", 0), ImageRef("https://host/b.jpg", 1)],
        features=["Aqua Hot", "Satellite TV"],
    )
    data.update(overrides)
    return NormalizedRecord(**data)


def test_persist_record_writes_all_parts(db):
    coach = persist_record(db, make_record())
    stored = crud.get_coach(db, coach.id)
    assert stored.external_id == "42"
    assert stored.featured_image == "https://host/a.jpg"
    assert stored.status == "available"
    assert stored.is_featured is False
    assert stored.is_new_arrival is True
    assert [(i.image_url, i.is_featured, i.position) for i in stored.images] == [
        ("https://host/a.jpg", True, 0),
        ("https://host/b.jpg", False, 1),
    ]
    assert sorted(f.name for f in stored.features) == ["Aqua Hot", "Satellite TV"]


def test_delete_images_and_features(db):
    coach = persist_record(db, make_record())
    assert crud.delete_images_for(db, coach.id) == 2
    assert crud.delete_features_for(db, coach.id) == 2
    assert db.query(models.CoachImage).count() == 0
    assert db.query(models.CoachFeature).count() == 0


def test_deleting_coach_cascades(db):
    coach = persist_record(db, make_record())
    db.delete(crud.get_coach(db, coach.id))
    db.commit()
    assert db.query(models.CoachImage).count() == 0
    assert db.query(models.CoachFeature).count() == 0


def test_list_filters_and_sorting(db):
    persist_record(db, make_record("1", year=2005, price=650000.0, make="Liberty"))
    persist_record(db, make_record("2", year=2010, price=900000.0, make="Marathon", title="2010 Marathon"))
    persist_record(db, make_record("3", year=1999, price=300000.0, make="Featherlite", title="1999 Featherlite"))

    res = crud.list_coaches(db, filters={"min_price": 400000})
    assert res["total"] == 2
    assert [c.external_id for c in res["items"]] == ["2", "1"]

    res = crud.list_coaches(db, filters={"search": "marathon"}, sort_by="price_low_high")
    assert [c.external_id for c in res["items"]] == ["2"]

    res = crud.list_coaches(db, sort_by="price_low_high", limit=2)
    assert res["total"] == 3
    assert [c.external_id for c in res["items"]] == ["3", "1"]

    assert crud.distinct_makes(db) == ["Featherlite", "Liberty", "Marathon"]
    assert crud.distinct_years(db) == [2010, 2005, 1999]
    assert crud.get_coach_by_external_id(db, "3").make == "Featherlite"


def test_postgres_scheme_gets_psycopg2_dialect():
    from coach_scraper.db import normalize_url
    assert normalize_url("postgres://u:p@host/db") == "postgresql+psycopg2://u:p@host/db"
    assert normalize_url("postgresql://u:p@host/db") == "postgresql://u:p@host/db"
    assert normalize_url("sqlite://") == "sqlite://"
