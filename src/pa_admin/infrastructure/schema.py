"""DDL for the auction database.

Single source for both the createPlanetsDatabase command and the Alembic
migrations. Table statements are plain CREATE TABLE (no IF NOT EXISTS):
"already exists" is reported by the store and turned into
DdlOutcome.ALREADY_EXISTS by execute_ddl.
"""

CREATE_PLANETS_TABLE = """
    CREATE TABLE planets (
        planet_id           BIGINT          NOT NULL PRIMARY KEY,
        planet_name         VARCHAR(1024),
        planet_value        BIGINT,
        shares_available    BIGINT,
        CONSTRAINT ck_planets_shares_gte_0 CHECK (shares_available >= 0)
    )
"""

CREATE_PLAYERS_TABLE = """
    CREATE TABLE players (
        player_id           TEXT            NOT NULL PRIMARY KEY,
        player_name         VARCHAR(1024),
        planet_dollars      BIGINT,
        CONSTRAINT ck_players_dollars_gte_0 CHECK (planet_dollars >= 0)
    )
"""

# Append-only ledger; time_stamp is stamped by the server, not the client
CREATE_TRANSACTIONS_TABLE = """
    CREATE TABLE transactions (
        planet_id           BIGINT          NOT NULL,
        player_id           TEXT            NOT NULL,
        amount              BIGINT,
        time_stamp          TIMESTAMPTZ     NOT NULL DEFAULT clock_timestamp(),
        PRIMARY KEY (planet_id, player_id, time_stamp)
    )
"""

# Creation order
TABLES: dict[str, str] = {
    "planets": CREATE_PLANETS_TABLE,
    "players": CREATE_PLAYERS_TABLE,
    "transactions": CREATE_TRANSACTIONS_TABLE,
}


def create_database_sql(quoted_database_id: str) -> str:
    """`quoted_database_id` must already be quoted by the dialect's identifier preparer."""
    return f"CREATE DATABASE {quoted_database_id}"
