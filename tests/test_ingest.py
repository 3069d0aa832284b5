from scripts.intune_export.ingest import ingest_apps

from conftest import android_app, ios_app


def _inventory():
    return [
        ios_app("i1", "284882215"),
        android_app("a1", "com.einnovation.temu"),
        {"@odata.type": "#microsoft.graph.win32LobApp", "id": "w1"},
        {"@odata.type": "#microsoft.graph.webApp", "id": "w2", "appUrl": "https://example.com"},
    ]


def test_unsupported_platforms_are_skipped(db):
    counts = ingest_apps(db, _inventory())

    assert counts == {"inserted": 2, "existing": 0, "skipped": 2}
    keys = [r["platformAppKey"] for r in db.all_rows()]
    assert keys == ["ios-284882215", "android-com.einnovation.temu"]


def test_ingestion_is_idempotent(db):
    ingest_apps(db, _inventory())
    first = db.all_rows()

    counts = ingest_apps(db, _inventory())

    assert counts["inserted"] == 0
    assert counts["existing"] == 2
    assert db.all_rows() == first


def test_duplicate_key_within_one_inventory(db):
    apps = [ios_app("i1", "42"), ios_app("i2", "42")]
    counts = ingest_apps(db, apps)

    assert counts == {"inserted": 1, "existing": 1, "skipped": 0}
    assert db.find_by_key("ios-42")[0]["intuneAppId"] == "i1"


def test_insert_error_skips_record_and_continues(db):
    ingest_apps(db, [ios_app("i1", "42")])
    # same inventory id now resolves to a different key: UNIQUE(intuneAppId) fails
    counts = ingest_apps(db, [ios_app("i1", "43"), ios_app("i3", "44")])

    assert counts == {"inserted": 1, "existing": 0, "skipped": 1}
    assert db.find_by_key("ios-43") == []
    assert len(db.find_by_key("ios-44")) == 1


def test_malformed_field_types_are_skipped(db):
    apps = [
        {"@odata.type": "#microsoft.graph.iosStoreApp", "id": "bad1", "appStoreUrl": 12345},
        {"@odata.type": 7, "id": "bad2"},
        "not-a-record",
        android_app("a1", "com.ok"),
    ]

    counts = ingest_apps(db, apps)

    assert counts == {"inserted": 1, "existing": 0, "skipped": 3}
    assert [r["platformAppKey"] for r in db.all_rows()] == ["android-com.ok"]
