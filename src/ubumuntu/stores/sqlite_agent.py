# src/ubumuntu/stores/sqlite_agent.py
"""SQLite agent configuration store."""

import sqlite3
from pathlib import Path

from ubumuntu.exceptions import AgentNotFoundError, PermissionDeniedError
from ubumuntu.models import AgentConfig
from ubumuntu.stores.base import AgentStore


class SQLiteAgentStore(AgentStore):
    """SQLite-based agent store.

    Each agent is kept as one JSON document keyed by agent_id. Owner and
    visibility are mirrored into columns so listing does not parse every row.
    """

    def __init__(self, db_path: str) -> None:
        """Initialize the SQLite store."""
        self.db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self) -> None:
        """Create tables if they don't exist."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS agents (
                    agent_id TEXT PRIMARY KEY,
                    owner_id TEXT NOT NULL,
                    is_public INTEGER NOT NULL,
                    document TEXT NOT NULL
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_owner ON agents(owner_id)")
            conn.commit()

    def _owner_of(self, conn: sqlite3.Connection, agent_id: str) -> str | None:
        row = conn.execute("SELECT owner_id FROM agents WHERE agent_id = ?", (agent_id,)).fetchone()
        return row[0] if row else None

    def put(self, agent: AgentConfig, requested_by: str) -> None:
        """Store an agent, overwriting if it exists and the requester owns it."""
        if agent.owner_id != requested_by:
            raise PermissionDeniedError(
                f"User {requested_by} cannot save agent {agent.agent_id} owned by {agent.owner_id}"
            )
        with sqlite3.connect(self.db_path) as conn:
            current_owner = self._owner_of(conn, agent.agent_id)
            if current_owner is not None and current_owner != requested_by:
                raise PermissionDeniedError(
                    f"User {requested_by} cannot modify agent {agent.agent_id}"
                )
            conn.execute(
                """
                INSERT OR REPLACE INTO agents (agent_id, owner_id, is_public, document)
                VALUES (?, ?, ?, ?)
                """,
                (agent.agent_id, agent.owner_id, int(agent.is_public), agent.model_dump_json()),
            )
            conn.commit()

    def get(self, agent_id: str) -> AgentConfig | None:
        """Retrieve an agent by ID."""
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute(
                "SELECT document FROM agents WHERE agent_id = ?", (agent_id,)
            ).fetchone()
        if row is None:
            return None
        return AgentConfig.model_validate_json(row[0])

    def list_visible(self, user_id: str) -> list[AgentConfig]:
        """List the user's own agents plus every public agent."""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                "SELECT document FROM agents WHERE owner_id = ? OR is_public = 1 ORDER BY rowid",
                (user_id,),
            )
            return [AgentConfig.model_validate_json(row[0]) for row in cursor.fetchall()]

    def delete(self, agent_id: str, requested_by: str) -> None:
        """Delete an agent owned by the requester."""
        with sqlite3.connect(self.db_path) as conn:
            owner = self._owner_of(conn, agent_id)
            if owner is None:
                raise AgentNotFoundError(f"Agent not found: {agent_id}")
            if owner != requested_by:
                raise PermissionDeniedError(f"User {requested_by} cannot delete agent {agent_id}")
            conn.execute("DELETE FROM agents WHERE agent_id = ?", (agent_id,))
            conn.commit()

    def count_agents(self) -> int:
        """Count the total number of agents in the store."""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute("SELECT COUNT(agent_id) FROM agents")
            count = cursor.fetchone()
            return count[0] if count else 0
