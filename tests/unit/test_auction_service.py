"""Tests for AuctionApplicationService — settlement units and the web purchase flow."""

from unittest.mock import AsyncMock

import pytest

from config.settings import settings
from src.pa_auction.application.service import AuctionApplicationService
from src.pa_auction.domain.models import Planet, Player
from src.pa_common.enums import PricingPolicy, SettlementStatus, StoreErrorKind
from src.pa_common.errors import PlanetNotFoundError, PlayerNotFoundError, StoreError
from tests.unit.store_fakes import serialization_failure


def _service(repo) -> AuctionApplicationService:
    return AuctionApplicationService(
        repo=repo, pricing_policy=PricingPolicy.MATCH_TIME, sample_percent=10
    )


class TestSettleRandom:
    async def test_settled_unit_commits(self, store, repo) -> None:
        store.add_planet(1, value=100, shares=10)
        store.add_player("a", dollars=1000)
        db = store.session()

        outcome = await _service(repo).settle_random(db)

        assert outcome.status == SettlementStatus.SETTLED
        assert db.commits == 1
        assert store.planets[1].shares_available == 9
        assert store.players["a"].planet_dollars == 990
        assert len(store.transactions) == 1

    async def test_no_match_rolls_back(self, store, repo) -> None:
        store.add_player("a", dollars=1000)
        db = store.session()

        outcome = await _service(repo).settle_random(db)

        assert outcome.status == SettlementStatus.NO_PLANET
        assert db.commits == 0
        assert db.rollbacks == 1

    async def test_sold_out_planet_leaves_rows_unchanged(self, store, repo) -> None:
        store.add_planet(1, value=100, shares=0)
        store.add_player("a", dollars=1000)
        db = store.session()

        outcome = await _service(repo).settle_random(db)

        assert outcome.status == SettlementStatus.NO_PLANET
        assert db.commits == 0
        assert store.planets[1].shares_available == 0
        assert store.planets[1].planet_value == 100
        assert store.players["a"].planet_dollars == 1000
        assert store.transactions == []

    async def test_conflict_raises_transient_store_error(self, store, repo) -> None:
        store.add_planet(1, value=100, shares=10)
        store.add_player("a", dollars=1000)
        db = store.session()
        db.fail_next_commit = True

        with pytest.raises(StoreError) as exc_info:
            await _service(repo).settle_random(db)

        assert exc_info.value.kind == StoreErrorKind.TRANSIENT_CONFLICT
        assert db.rollbacks >= 1
        assert store.planets[1].shares_available == 10
        assert store.players["a"].planet_dollars == 1000
        assert store.transactions == []

    async def test_rejected_settlement_rolls_back(self) -> None:
        mock_repo = AsyncMock()
        db = AsyncMock()
        mock_repo.sample_planet_with_shares.return_value = Planet(1, "Mars", 100, 10)
        mock_repo.sample_player_with_balance.return_value = Player("a", "Ann", 1000)
        mock_repo.decrement_shares.return_value = None

        outcome = await _service(mock_repo).settle_random(db)

        assert outcome.status == SettlementStatus.SHARES_EXHAUSTED
        db.commit.assert_not_awaited()
        db.rollback.assert_awaited_once()


class TestPurchaseShare:
    async def test_creates_player_then_buys(self, store, repo) -> None:
        store.add_planet(1, value=100, shares=10, name="Mars")
        db = store.session()

        result = await _service(repo).purchase_share(db, "Ann")

        assert result.settled
        assert result.player_id in store.players
        assert store.players[result.player_id].player_name == "Ann"
        assert result.amount == 10
        assert result.message.startswith("1 Share of Mars sold to Ann for 10 Planet Dollars.")
        # player insert + settlement
        assert db.commits == 2

    async def test_existing_player(self, store, repo) -> None:
        store.add_planet(1, value=100, shares=10)
        store.add_player("a", dollars=1000, name="Ann")

        result = await _service(repo).purchase_share(store.session(), "Ann", "a")

        assert result.settled
        assert result.player_id == "a"
        assert result.planet_dollars == 990
        assert len(store.players) == 1

    async def test_insufficient_funds_message(self, store, repo) -> None:
        store.add_planet(1, value=1000, shares=10, name="Mars")
        store.add_player("a", dollars=50, name="Ann")

        result = await _service(repo).purchase_share(store.session(), "Ann", "a")

        assert not result.settled
        assert result.status == "INSUFFICIENT_FUNDS"
        assert result.message == "50 Planet Dollars is not enough to purchase a share of Mars"

    async def test_no_planet_message(self, store, repo) -> None:
        store.add_player("a", dollars=50)

        result = await _service(repo).purchase_share(store.session(), "Ann", "a")

        assert result.status == "NO_PLANET"
        assert result.message == "Failed to acquire a valid Planet share. Please retry."

    async def test_unknown_player(self, store, repo) -> None:
        store.add_planet(1, value=100, shares=10)
        with pytest.raises(PlayerNotFoundError):
            await _service(repo).purchase_share(store.session(), "Ann", "ghost")

    async def test_store_failure_is_classified(self, store, repo) -> None:
        store.add_planet(1, value=100, shares=10)
        store.add_player("a", dollars=1000)
        db = store.session()
        db.fail_next_commit = True

        with pytest.raises(StoreError) as exc_info:
            await _service(repo).purchase_share(db, "Ann", "a")
        assert exc_info.value.http_status == 503


class TestLookups:
    async def test_get_player(self, store, repo) -> None:
        store.add_player("a", dollars=1000000, name="Ann")
        resp = await _service(repo).get_player(store.session(), "a")
        assert resp.planet_dollars == 1000000
        assert resp.planet_dollars_display == "1,000,000"

    async def test_get_player_not_found(self, store, repo) -> None:
        with pytest.raises(PlayerNotFoundError):
            await _service(repo).get_player(store.session(), "ghost")

    async def test_get_planet(self, store, repo) -> None:
        store.add_planet(7, value=100, shares=10, name="Mars")
        resp = await _service(repo).get_planet(store.session(), 7)
        assert resp.planet_name == "Mars"
        assert resp.cost_per_share == 10

    async def test_get_sold_out_planet(self, store, repo) -> None:
        store.add_planet(7, value=100, shares=0)
        resp = await _service(repo).get_planet(store.session(), 7)
        assert resp.cost_per_share is None

    async def test_get_planet_not_found(self, store, repo) -> None:
        with pytest.raises(PlanetNotFoundError):
            await _service(repo).get_planet(store.session(), 404)

    async def test_lookup_store_failure(self) -> None:
        mock_repo = AsyncMock()
        mock_repo.get_player.side_effect = serialization_failure()
        with pytest.raises(StoreError):
            await _service(mock_repo).get_player(AsyncMock(), "a")


class TestSettingsDefaults:
    async def test_pricing_policy_from_settings(self, monkeypatch) -> None:

        monkeypatch.setattr(settings, "PRICING_POLICY", "COMMIT_TIME")
        mock_repo = AsyncMock()
        mock_repo.sample_planet_with_shares.return_value = Planet(1, "Mars", 100, 10)
        mock_repo.sample_player_with_balance.return_value = Player("a", "Ann", 1000)
        mock_repo.get_planet_for_update.return_value = Planet(1, "Mars", 100, 5)
        mock_repo.decrement_shares.return_value = Planet(1, "Mars", 100, 4)
        mock_repo.debit_player.return_value = Player("a", "Ann", 980)

        outcome = await AuctionApplicationService(repo=mock_repo).settle_random(AsyncMock())

        mock_repo.get_planet_for_update.assert_awaited_once()
        assert outcome.amount == 20
