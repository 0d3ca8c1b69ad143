from typing import Any, List, Optional, Protocol, Sequence, Tuple


class DBAdapter(Protocol):
    """Database session used by one invocation: introspection and execution share it."""

    name: str
    dialect: str

    def fetch_all(
        self, sql: str, params: Optional[Sequence[Any]] = None
    ) -> List[Tuple[Any, ...]]:
        """Run a row-returning statement and return all of its rows."""

    def execute(self, sql: str) -> int:
        """Run a statement for side effect only. Returns the affected row count."""

    def ping(self) -> None:
        """Raise if the session is unusable."""

    def close(self) -> None:
        """Release the underlying connection."""
