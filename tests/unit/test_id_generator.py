"""Tests for pa_common.id_generator."""

import pytest

from src.pa_common.id_generator import (
    SnowflakeIdGenerator,
    generate_planet_id,
    generate_player_id,
)


class TestSnowflakeIdGenerator:
    def test_returns_positive_int(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        result = gen.next_id()
        assert isinstance(result, int)
        assert result > 0

    def test_fits_bigint(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1023)
        assert gen.next_id() < 2**63

    def test_unique_ids(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        ids = {gen.next_id() for _ in range(1000)}
        assert len(ids) == 1000

    def test_monotonically_increasing(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        prev = gen.next_id()
        for _ in range(100):
            current = gen.next_id()
            assert current > prev
            prev = current

    def test_machine_id_out_of_range(self) -> None:
        with pytest.raises(ValueError):
            SnowflakeIdGenerator(machine_id=1024)


class TestModuleGenerators:
    def test_planet_ids_unique_and_non_zero(self) -> None:
        ids = {generate_planet_id() for _ in range(500)}
        assert len(ids) == 500
        assert 0 not in ids

    def test_player_id_is_uuid_hex(self) -> None:
        player_id = generate_player_id()
        assert len(player_id) == 32
        int(player_id, 16)  # hex, no dashes

