"""Tests for pa_admin — CSV parsing, DDL outcomes and seeding."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import ProgrammingError

from src.pa_admin.application.service import AdminService, parse_planets_csv
from src.pa_admin.infrastructure.ddl import execute_ddl
from src.pa_common.enums import DdlOutcome, StoreErrorKind
from src.pa_common.errors import InvalidPlanetCsvError, StoreError
from tests.unit.store_fakes import FakePgError, serialization_failure


def _ddl_error(sqlstate: str) -> ProgrammingError:
    return ProgrammingError("CREATE", None, FakePgError(f"pg {sqlstate}", sqlstate))


def _conn(side_effect=None) -> MagicMock:
    conn = MagicMock()
    conn.exec_driver_sql = AsyncMock(side_effect=side_effect)
    conn.dialect.identifier_preparer.quote = lambda name: f'"{name}"'
    return conn


class TestParsePlanetsCsv:
    def test_parses_rows(self, tmp_path) -> None:
        path = tmp_path / "planets.csv"
        path.write_text("Mars,1000\nVenus, 500\n", encoding="utf-8")
        assert parse_planets_csv(path) == [("Mars", 1000), ("Venus", 500)]

    def test_skips_blank_lines(self, tmp_path) -> None:
        path = tmp_path / "planets.csv"
        path.write_text("Mars,1000\n\n  ,  \nVenus,500\n", encoding="utf-8")
        assert [name for name, _ in parse_planets_csv(path)] == ["Mars", "Venus"]

    def test_quoted_name_with_comma(self, tmp_path) -> None:
        path = tmp_path / "planets.csv"
        path.write_text('"Kepler, b",42\n', encoding="utf-8")
        assert parse_planets_csv(path) == [("Kepler, b", 42)]

    def test_missing_value(self, tmp_path) -> None:
        path = tmp_path / "planets.csv"
        path.write_text("Mars,1000\nVenus\n", encoding="utf-8")
        with pytest.raises(InvalidPlanetCsvError, match="line 2"):
            parse_planets_csv(path)

    def test_non_integer_value(self, tmp_path) -> None:
        path = tmp_path / "planets.csv"
        path.write_text("Mars,lots\n", encoding="utf-8")
        with pytest.raises(InvalidPlanetCsvError, match="not an integer"):
            parse_planets_csv(path)

    def test_negative_value(self, tmp_path) -> None:
        path = tmp_path / "planets.csv"
        path.write_text("Mars,-1\n", encoding="utf-8")
        with pytest.raises(InvalidPlanetCsvError):
            parse_planets_csv(path)

    def test_empty_name(self, tmp_path) -> None:
        path = tmp_path / "planets.csv"
        path.write_text(" ,10\n", encoding="utf-8")
        with pytest.raises(InvalidPlanetCsvError, match="empty planet name"):
            parse_planets_csv(path)

    def test_empty_file(self, tmp_path) -> None:
        path = tmp_path / "planets.csv"
        path.write_text("", encoding="utf-8")
        assert parse_planets_csv(path) == []


class TestExecuteDdl:
    async def test_created(self) -> None:
        conn = _conn()
        assert await execute_ddl(conn, "CREATE TABLE t (id INT)") == DdlOutcome.CREATED

    async def test_already_exists(self) -> None:
        conn = _conn(side_effect=_ddl_error("42P07"))
        assert await execute_ddl(conn, "CREATE TABLE t (id INT)") == DdlOutcome.ALREADY_EXISTS

    async def test_other_failure_raises(self) -> None:
        conn = _conn(side_effect=_ddl_error("42601"))  # syntax_error
        with pytest.raises(StoreError) as exc_info:
            await execute_ddl(conn, "CREATE TABLE t (")
        assert exc_info.value.kind == StoreErrorKind.UNKNOWN


class TestCreateDatabase:
    async def test_quotes_identifier(self) -> None:
        conn = _conn()
        outcome = await AdminService(repo=AsyncMock()).create_database(conn, "my-db")
        assert outcome == DdlOutcome.CREATED
        conn.exec_driver_sql.assert_awaited_once_with('CREATE DATABASE "my-db"')

    async def test_existing_database(self) -> None:
        conn = _conn(side_effect=_ddl_error("42P04"))
        outcome = await AdminService(repo=AsyncMock()).create_database(conn, "planets")
        assert outcome == DdlOutcome.ALREADY_EXISTS

    async def test_create_tables_in_order(self) -> None:
        conn = _conn()
        outcomes = await AdminService(repo=AsyncMock()).create_tables(conn)
        assert list(outcomes) == ["planets", "players", "transactions"]
        assert all(o == DdlOutcome.CREATED for o in outcomes.values())
        assert conn.exec_driver_sql.await_count == 3

    async def test_create_tables_idempotent(self) -> None:
        conn = _conn(side_effect=[None, _ddl_error("42P07"), _ddl_error("42P07")])
        outcomes = await AdminService(repo=AsyncMock()).create_tables(conn)
        assert outcomes == {
            "planets": DdlOutcome.CREATED,
            "players": DdlOutcome.ALREADY_EXISTS,
            "transactions": DdlOutcome.ALREADY_EXISTS,
        }


class TestInsertPlanets:
    async def test_insert_planet(self, store, repo) -> None:
        db = store.session()
        planet = await AdminService(repo).insert_planet(db, "Mars", 1000)
        assert db.commits == 1
        stored = store.planets[planet.planet_id]
        assert stored.planet_name == "Mars"
        assert stored.planet_value == 1000
        assert stored.shares_available == 100_000_000_000

    async def test_batch_one_transaction(self, store, repo) -> None:
        db = store.session()
        count = await AdminService(repo).batch_insert_planets(
            db, [("Mars", 1000), ("Venus", 500), ("Pluto", 1)]
        )
        assert count == 3
        assert db.commits == 1
        assert sorted(p.planet_name for p in store.planets.values()) == ["Mars", "Pluto", "Venus"]

    async def test_failed_commit_rolls_back(self, store, repo) -> None:
        db = store.session()
        db.fail_next_commit = True
        with pytest.raises(StoreError):
            await AdminService(repo).batch_insert_planets(db, [("Mars", 1000)])
        assert db.rollbacks == 1
        assert store.planets == {}

    async def test_non_store_error_rolls_back(self) -> None:
        db = AsyncMock()
        repo = AsyncMock()
        repo.insert_planets.side_effect = RuntimeError("bug")
        with pytest.raises(RuntimeError):
            await AdminService(repo).insert_planet(db, "Mars", 1)
        db.rollback.assert_awaited_once()


class TestBatchInsertPlayers:
    async def test_batches(self, store, repo) -> None:
        db = store.session()
        total = await AdminService(repo).batch_insert_players(db, batch_count=3, batch_size=4)
        assert total == 12
        assert db.commits == 3
        assert len(store.players) == 12
        for player in store.players.values():
            assert player.planet_dollars == 1_000_000
            assert player.player_name.startswith("Player-")

    async def test_zero_batches(self, store, repo) -> None:
        db = store.session()
        assert await AdminService(repo).batch_insert_players(db, batch_count=0) == 0
        assert db.commits == 0

    async def test_collision_regenerated(self, store, repo) -> None:
        store.add_player("dup", dollars=1)
        ids = iter(["dup", "x1", "x2"])
        db = store.session()
        with patch(
            "src.pa_admin.application.service.generate_player_id",
            side_effect=lambda: next(ids),
        ):
            total = await AdminService(repo).batch_insert_players(db, batch_count=1, batch_size=2)
        assert total == 2
        assert set(store.players) == {"dup", "x1", "x2"}
        # the pre-existing player is untouched
        assert store.players["dup"].planet_dollars == 1

    async def test_conflict_surfaces_as_store_error(self) -> None:
        db = AsyncMock()
        db.commit.side_effect = serialization_failure()
        repo = AsyncMock()
        repo.insert_players.return_value = 2
        with pytest.raises(StoreError) as exc_info:
            await AdminService(repo).batch_insert_players(db, batch_count=1, batch_size=2)
        assert exc_info.value.is_transient
        db.rollback.assert_awaited_once()
