import unittest
from unittest.mock import MagicMock

from sqlalchemy import Text, create_engine, event, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from models import Base, MediaItem
from scraper.parsers import MediaTriple, MediaType
from scraper.persistence import MediaPersistence, MediaPersistenceError


def _memory_engine():
    return create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


class MediaPersistenceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = _memory_engine()
        Base.metadata.create_all(self.engine)
        self.session_factory = sessionmaker(bind=self.engine)
        self.statements: list[str] = []

        @event.listens_for(self.engine, "before_cursor_execute")
        def record(conn, cursor, statement, parameters, context, executemany):
            self.statements.append(statement)

    def tearDown(self) -> None:
        self.engine.dispose()

    def _insert_statements(self) -> list[str]:
        return [statement for statement in self.statements if statement.lstrip().upper().startswith("INSERT")]

    def test_empty_batch_short_circuits(self) -> None:
        session_factory = MagicMock()
        persistence = MediaPersistence(session_factory)

        self.assertEqual(persistence.write_all([]), 0)
        session_factory.assert_not_called()

    def test_batch_written_with_single_insert(self) -> None:
        triples = [
            MediaTriple("https://page/1", "https://cdn/1.jpg", MediaType.IMAGE),
            MediaTriple("https://page/1", "https://cdn/2.jpg", MediaType.IMAGE),
            MediaTriple("https://page/2", "https://cdn/clip.mp4", MediaType.VIDEO),
        ]
        persistence = MediaPersistence(self.session_factory)

        written = persistence.write_all(triples)

        self.assertEqual(written, 3)
        self.assertEqual(len(self._insert_statements()), 1)
        with self.session_factory() as session:
            rows = session.execute(select(MediaItem).order_by(MediaItem.id)).scalars().all()
        self.assertEqual(
            [(row.original_url, row.media_url, row.media_type) for row in rows],
            [
                ("https://page/1", "https://cdn/1.jpg", "IMAGE"),
                ("https://page/1", "https://cdn/2.jpg", "IMAGE"),
                ("https://page/2", "https://cdn/clip.mp4", "VIDEO"),
            ],
        )
        self.assertTrue(all(row.created_at is not None for row in rows))
        self.assertEqual(len({row.id for row in rows}), 3)

    def test_large_batch_still_one_statement(self) -> None:
        triples = [
            MediaTriple(f"https://page/{index % 20}", f"https://cdn/{index}.jpg", MediaType.IMAGE)
            for index in range(300)
        ]
        persistence = MediaPersistence(self.session_factory)

        self.assertEqual(persistence.write_all(triples), 300)
        self.assertEqual(len(self._insert_statements()), 1)

    def test_duplicates_are_stored_again(self) -> None:
        triple = MediaTriple("https://page/1", "https://cdn/1.jpg", MediaType.IMAGE)
        persistence = MediaPersistence(self.session_factory)

        persistence.write_all([triple])
        persistence.write_all([triple])

        with self.session_factory() as session:
            count = len(session.execute(select(MediaItem)).scalars().all())
        self.assertEqual(count, 2)

    def test_long_signed_media_url_is_stored_whole(self) -> None:
        signed = "https://cdn.example.com/video.mp4?signature=" + "a" * 3000
        persistence = MediaPersistence(self.session_factory)

        persistence.write_all(
            [
                MediaTriple("https://page/1", signed, MediaType.VIDEO),
                MediaTriple("https://page/1", "https://cdn/poster.jpg", MediaType.IMAGE),
            ]
        )

        self.assertIsInstance(MediaItem.__table__.c.media_url.type, Text)
        with self.session_factory() as session:
            stored = session.execute(select(MediaItem.media_url).order_by(MediaItem.id)).scalars().all()
        self.assertEqual(stored, [signed, "https://cdn/poster.jpg"])

    def test_storage_failure_raises_persistence_error(self) -> None:
        Base.metadata.drop_all(self.engine)
        persistence = MediaPersistence(self.session_factory)

        with self.assertRaises(MediaPersistenceError):
            persistence.write_all([MediaTriple("https://page/1", "https://cdn/1.jpg", MediaType.IMAGE)])


if __name__ == "__main__":
    unittest.main()
