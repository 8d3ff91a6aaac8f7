"""
Schema creation.

Creates the ORM tables, the FTS5 external-content index over
chunks.content with the triggers that keep it in sync, and the sqlite-vec
cosine index used for top-K similarity queries.

Dependencies: sqlalchemy, sqlite-vec (loaded per connection), doclib.boundary.db.base
System role: Database schema initialization
"""

import logging
import re

from sqlalchemy import text
from sqlalchemy.engine import Engine

from doclib.boundary.db.base import Base
import doclib.boundary.db.models  # noqa: F401  (registers tables on Base.metadata)
from doclib.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

FTS_DDL = (
    """
    CREATE VIRTUAL TABLE IF NOT EXISTS chunks_fts USING fts5(
        content,
        content='chunks',
        content_rowid='rowid'
    )
    """,
    """
    CREATE TRIGGER IF NOT EXISTS chunks_fts_ai AFTER INSERT ON chunks BEGIN
        INSERT INTO chunks_fts(rowid, content) VALUES (new.rowid, new.content);
    END
    """,
    """
    CREATE TRIGGER IF NOT EXISTS chunks_fts_ad AFTER DELETE ON chunks BEGIN
        INSERT INTO chunks_fts(chunks_fts, rowid, content)
        VALUES ('delete', old.rowid, old.content);
    END
    """,
    """
    CREATE TRIGGER IF NOT EXISTS chunks_fts_au AFTER UPDATE ON chunks BEGIN
        INSERT INTO chunks_fts(chunks_fts, rowid, content)
        VALUES ('delete', old.rowid, old.content);
        INSERT INTO chunks_fts(rowid, content) VALUES (new.rowid, new.content);
    END
    """,
)

VEC_TABLE = "chunks_vec"

_VEC_DIMENSION = re.compile(r"float\[(\d+)\]")


def vector_index_ddl(dimension: int) -> str:
    """
    vec0 table holding one cosine-indexed vector per chunk.

    Rows are keyed by the implicit rowid of chunks, like chunks_fts.
    """
    return (
        f"CREATE VIRTUAL TABLE IF NOT EXISTS {VEC_TABLE} USING vec0("
        f"chunk_rowid INTEGER PRIMARY KEY, "
        f"embedding float[{int(dimension)}] distance_metric=cosine)"
    )


def create_schema(engine: Engine, dimension: int) -> None:
    """
    Create all tables, the full-text index, its triggers and the vector index.

    Idempotent: safe to call on every start.

    Args:
        engine: Engine from create_sqlite_engine
        dimension: Embedding dimension of the vector index

    Raises:
        ValidationError: If an existing vector index has another dimension
    """
    Base.metadata.create_all(engine)
    with engine.begin() as conn:
        for statement in FTS_DDL:
            conn.execute(text(statement))

        existing = conn.execute(
            text("SELECT sql FROM sqlite_master WHERE type = 'table' AND name = :name"),
            {"name": VEC_TABLE},
        ).scalar_one_or_none()
        if existing is None:
            conn.execute(text(vector_index_ddl(dimension)))
        else:
            match = _VEC_DIMENSION.search(existing)
            if match and int(match.group(1)) != dimension:
                raise ValidationError(
                    "Vector index dimension does not match the configured embedding dimension",
                    field="dimension",
                    details={"expected": dimension, "actual": int(match.group(1))},
                )
    logger.info(f"{__name__}:create_schema - Schema ready (dimension {dimension})")
