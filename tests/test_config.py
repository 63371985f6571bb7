import unittest

from sqlalchemy import create_engine

from storefront.config import Settings


def make_settings(url: str) -> Settings:
    settings = Settings()
    settings.POSTGRES_CONNECTION_STRING = url
    return settings


class TestDatabaseUrls(unittest.TestCase):

    def test_async_url_uses_asyncpg(self):
        for url in ("postgres://u:p@db:5432/shop", "postgresql://u:p@db:5432/shop"):
            with self.subTest(url=url):
                self.assertEqual(make_settings(url).DATABASE_URL, "postgresql+asyncpg://u:p@db:5432/shop")

    def test_sync_url_for_migrations(self):
        for url in ("postgres://u:p@db:5432/shop", "postgresql+asyncpg://u:p@db:5432/shop"):
            with self.subTest(url=url):
                self.assertEqual(make_settings(url).SYNC_DATABASE_URL, "postgresql://u:p@db:5432/shop")

    def test_sync_driver_is_installed(self):
        # Alembic открывает именно такой движок; драйвер импортируется при создании
        engine = create_engine(make_settings("postgres://u:p@db:5432/shop").SYNC_DATABASE_URL)
        self.assertEqual(engine.dialect.driver, "psycopg2")
        engine.dispose()


if __name__ == "__main__":
    unittest.main()
