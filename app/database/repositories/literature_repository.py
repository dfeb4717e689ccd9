from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from app.database.connection import get_connection
from app.database.models import Literature, LiteratureStatus, NewLiterature
from app.logging.logger import Log
from app.pipeline.exceptions import LiteratureNotFoundError

_COLUMNS = """
    id, original_name, file_path, file_size, file_type, content_length,
    reading_guide, description, tags, status, created_at, updated_at
"""


class LiteratureRepository:
    """Database operations for the literature table."""

    def create(self, literature: NewLiterature) -> int:
        """Insert a literature row and return its generated ID."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO literature
                        (original_name, file_path, file_size, file_type,
                         content_length, status)
                    VALUES (%s, %s, %s, %s, %s, %s)
                    RETURNING id
                    """,
                    (
                        literature.original_name,
                        literature.file_path,
                        literature.file_size,
                        literature.file_type,
                        literature.content_length,
                        int(literature.status),
                    ),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise RuntimeError("INSERT INTO literature returned no id")
        literature_id = int(row[0])
        Log.info(
            f"Created literature {literature_id} for file '{literature.original_name}'"
        )
        return literature_id

    def find_by_id(self, literature_id: int) -> Literature | None:
        """Find a literature row by ID, or None if it does not exist."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM literature WHERE id = %s",
                    (literature_id,),
                )
                row = cur.fetchone()

        if row is None:
            return None

        return Literature(
            id=row["id"],
            original_name=row["original_name"],
            file_path=row["file_path"],
            file_size=row["file_size"],
            file_type=row["file_type"],
            content_length=row["content_length"],
            reading_guide=row["reading_guide"],
            description=row["description"],
            tags=row["tags"],
            status=row["status"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def get_by_id(self, literature_id: int) -> Literature:
        """Find a literature row by ID.

        Raises:
            LiteratureNotFoundError: if no literature with this ID exists.
        """
        literature = self.find_by_id(literature_id)
        if literature is None:
            raise LiteratureNotFoundError(f"Literature {literature_id} not found")
        return literature

    def update_status(self, literature_id: int, status: LiteratureStatus) -> None:
        """Set the pipeline status.

        Raises:
            LiteratureNotFoundError: if no literature with this ID exists.
        """
        self._execute_update(
            literature_id,
            "UPDATE literature SET status = %s, updated_at = NOW() WHERE id = %s",
            (int(status), literature_id),
        )
        Log.info(f"Literature {literature_id} status set to {status.name}")

    def update_reading_guide(self, literature_id: int, reading_guide: str) -> None:
        """Replace the whole reading guide.

        Raises:
            LiteratureNotFoundError: if no literature with this ID exists.
        """
        self._execute_update(
            literature_id,
            """
            UPDATE literature
            SET reading_guide = %s, updated_at = NOW()
            WHERE id = %s
            """,
            (reading_guide, literature_id),
        )
        Log.info(
            f"Literature {literature_id} reading guide saved ({len(reading_guide)} chars)"
        )

    def append_reading_guide(self, literature_id: int, chunk: str) -> None:
        """Append one streamed chunk to the reading guide and commit it.

        The concatenation happens in a single statement, so each call is an
        independent durable write.

        Raises:
            LiteratureNotFoundError: if no literature with this ID exists.
        """
        if not chunk:
            return
        self._execute_update(
            literature_id,
            """
            UPDATE literature
            SET reading_guide = COALESCE(reading_guide, '') || %s,
                updated_at = NOW()
            WHERE id = %s
            """,
            (chunk, literature_id),
        )

    def update_classification(
        self,
        literature_id: int,
        tags: list[str],
        description: str,
    ) -> None:
        """Persist classification tags and description and mark the row completed.

        Tags and description are write-once: values already present are kept.

        Raises:
            LiteratureNotFoundError: if no literature with this ID exists.
        """
        self._execute_update(
            literature_id,
            """
            UPDATE literature
            SET tags = COALESCE(tags, %s),
                description = COALESCE(description, %s),
                status = %s,
                updated_at = NOW()
            WHERE id = %s
            """,
            (Jsonb(tags), description, int(LiteratureStatus.COMPLETED), literature_id),
        )
        Log.info(f"Literature {literature_id} classified with {len(tags)} tags")

    def _execute_update(
        self,
        literature_id: int,
        query: str,
        params: tuple[object, ...],
    ) -> None:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(query, params)
                if cur.rowcount == 0:
                    raise LiteratureNotFoundError(f"Literature {literature_id} not found")
            conn.commit()
