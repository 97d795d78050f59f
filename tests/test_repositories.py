import json
from concurrent.futures import ThreadPoolExecutor

import pytest
from pydantic import ValidationError

from nextup.dashboard import build_dashboard
from nextup.db import SQLiteStore
from nextup.entities import ALL_ENTITIES, ASSIGNMENTS, COURSES, EVENTS, PROJECTS, RESERVED_NAME_SUFFIXES
from nextup.generate_openapi import generate_openapi
from nextup.repositories import EntityRepository, ListQuery
from nextup.schemas import AssignmentCreate, AssignmentUpdate, CourseCreate, EventCreate, EventUpdate, ProjectCreate
from nextup.session import Session, initials
from nextup.storage import InMemoryStore


@pytest.fixture
def store():
    return InMemoryStore()


class TestEntityRepository:
    def test_storage_keys(self):
        assert [spec.storage_key("alice") for spec in ALL_ENTITIES] == [
            "alice-assignments",
            "alice-projects",
            "alice-college-projects",
            "alice-placements",
            "alice-certificates",
            "alice-courses",
            "alice-important",
            "alice-events",
        ]

    def test_reads_records_written_by_other_clients(self, store):
        store.set_item(
            "alice-assignments",
            json.dumps([{"id": "1", "description": "Essay", "dueDate": "2025-01-01", "tags": ["english"], "completed": False}]),
        )
        records = EntityRepository(store, "alice", ASSIGNMENTS).all()
        assert len(records) == 1
        assert records[0].id == "1"
        assert records[0].tags == ["english"]

    def test_invalid_entries_are_skipped_but_kept(self, store, caplog):
        store.set_item(
            "alice-projects",
            json.dumps([{"id": "bad", "description": ""}, {"id": "ok", "description": "P", "dueDate": "2025-01-01"}]),
        )
        repo = EntityRepository(store, "alice", PROJECTS)

        with caplog.at_level("WARNING", logger="nextup.repositories"):
            assert [p.id for p in repo.all()] == ["ok"]
        assert "Skipping invalid record" in caplog.text

        repo.create(ProjectCreate(description="New", due_date="2025-02-01"))
        assert [r["id"] for r in json.loads(store.get_item("alice-projects"))][:2] == ["bad", "ok"]

    def test_non_list_value_is_treated_as_empty(self, store):
        store.set_item("alice-courses", '{"oops": true}')
        repo = EntityRepository(store, "alice", COURSES)
        assert repo.all() == []
        repo.create(CourseCreate(title="T", platform="X"))
        assert len(json.loads(store.get_item("alice-courses"))) == 1

    def test_out_of_band_status_edit_reads_derived_flag(self, store):
        store.set_item(
            "alice-projects",
            json.dumps([{"id": "1", "description": "P", "dueDate": "2025-01-01", "status": "Completed", "completed": False}]),
        )
        repo = EntityRepository(store, "alice", PROJECTS)
        assert repo.get("1").completed is True

    def test_delete_unknown_id_leaves_list_unchanged(self, store):
        repo = EntityRepository(store, "alice", ASSIGNMENTS)
        repo.create(AssignmentCreate(description="A", due_date="2025-01-01"))
        before = store.get_item("alice-assignments")

        assert repo.delete("missing") is False
        assert repo.delete("missing") is False
        assert store.get_item("alice-assignments") == before

    def test_update_only_touches_sent_fields(self, store):
        repo = EntityRepository(store, "alice", ASSIGNMENTS)
        created = repo.create(AssignmentCreate(description="A", due_date="2025-01-01", tags="x,y", notes="n"))

        updated = repo.update(created.id, AssignmentUpdate.model_validate({"completed": True}))
        assert updated.completed is True
        assert updated.tags == ["x", "y"]
        assert updated.notes == "n"
        assert repo.update("missing", AssignmentUpdate()) is None

    def test_invalid_merge_raises_and_keeps_record(self, store):
        repo = EntityRepository(store, "alice", EVENTS)
        event = repo.create(EventCreate(title="E", start_date="2025-01-01", end_date="2025-01-02"))
        with pytest.raises(ValidationError):
            repo.update(event.id, EventUpdate(start_date="2025-02-01"))
        assert repo.get(event.id).start_date.day == 1

    def test_list_filters(self, store):
        repo = EntityRepository(store, "alice", ASSIGNMENTS)
        repo.create(AssignmentCreate(description="Lab report", due_date="2025-01-02", tags=["physics"]))
        repo.create(AssignmentCreate(description="Essay", due_date="2025-01-01", completed=True))

        assert [a.description for a in repo.list(ListQuery(search="PHYS"))] == ["Lab report"]
        assert [a.description for a in repo.list(ListQuery(completed=True))] == ["Essay"]
        assert [a.description for a in repo.list()] == ["Lab report", "Essay"]

    def test_toggle_requires_support(self, store):
        repo = EntityRepository(store, "alice", PROJECTS)
        project = repo.create(ProjectCreate(description="P", due_date="2025-01-01"))
        with pytest.raises(ValueError):
            repo.toggle(project.id)

    def test_namespaces_are_disjoint(self, store):
        EntityRepository(store, "alice", ASSIGNMENTS).create(AssignmentCreate(description="A", due_date="2025-01-01"))
        assert EntityRepository(store, "bob", ASSIGNMENTS).all() == []
        assert store.get_item("bob-assignments") is None


class TestConcurrentWrites:
    @pytest.fixture(params=["memory", "sqlite"])
    def backend(self, request, tmp_path):
        if request.param == "memory":
            return InMemoryStore()
        return SQLiteStore(str(tmp_path / "nextup.db"))

    def test_threaded_creates_keep_every_record(self, backend):
        def add_batch(worker):
            repo = EntityRepository(backend, "alice", ASSIGNMENTS)
            for n in range(25):
                repo.create(AssignmentCreate(description=f"w{worker}-{n}", due_date="2025-01-01"))

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(add_batch, range(8)))

        stored = json.loads(backend.get_item("alice-assignments"))
        assert len(stored) == 200
        assert len({r["id"] for r in stored}) == 200

    def test_threaded_deletes_and_updates(self, backend):
        repo = EntityRepository(backend, "alice", ASSIGNMENTS)
        ids = [repo.create(AssignmentCreate(description=f"a{n}", due_date="2025-01-01")).id for n in range(40)]

        def change(pair):
            index, item_id = pair
            worker_repo = EntityRepository(backend, "alice", ASSIGNMENTS)
            if index % 2:
                worker_repo.delete(item_id)
            else:
                worker_repo.update(item_id, AssignmentUpdate(completed=True))

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(change, enumerate(ids)))

        remaining = repo.all()
        assert [a.id for a in remaining] == ids[::2]
        assert all(a.completed for a in remaining)


class TestSession:
    def test_login_logout(self, store):
        session = Session(store)
        assert session.current_user() is None
        assert session.login("  Alice  ") == "Alice"
        assert store.get_item("loggedInUserName") == "Alice"
        session.logout()
        assert session.current_user() is None

    def test_blank_login_rejected(self, store):
        with pytest.raises(ValueError):
            Session(store).login("   ")

    def test_names_whose_keys_overlap_are_rejected(self, store):
        assert RESERVED_NAME_SUFFIXES == ("-college",)
        with pytest.raises(ValueError):
            Session(store).login("alice-college")
        assert Session(store).current_user() is None
        assert Session(store).login("alice-college-2") == "alice-college-2"

    @pytest.mark.parametrize(
        "name,expected",
        [("Alice Mary Smith", "AS"), ("alice", "A"), ("", ""), (None, "")],
    )
    def test_initials(self, name, expected):
        assert initials(name) == expected


class TestDashboard:
    def test_empty_user(self, store):
        overview = build_dashboard(store, "nobody")
        assert overview.user_name == "nobody"
        assert all(stat.value == 0 for stat in overview.stats)
        assert len(overview.stats) == 8


class TestOpenAPI:
    def test_schema_written_with_every_tag(self, tmp_path):
        path = generate_openapi(str(tmp_path / "interfaces" / "openapi.json"))
        with open(path, encoding="utf-8") as f:
            schema = json.load(f)
        tag_names = {t["name"] for t in schema["tags"]}
        assert {"health", "session", "dashboard"} <= tag_names
        assert {spec.slug for spec in ALL_ENTITIES} <= tag_names
        assert "/api/v1/college-projects/{item_id}/toggle" not in schema["paths"]
        assert "/api/v1/courses/{item_id}/toggle" in schema["paths"]
