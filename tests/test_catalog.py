"""Tests for loading a Catalog through a driver."""

import pytest

from sqlwrap.catalog import Catalog
from sqlwrap.errors import SchemaError, UnresolvedReferenceError
from sqlwrap.types import ColumnDescriptor, ColumnType


class TestCatalogBuild:
    """Tests for Catalog.build with a fake driver."""

    def test_tables_in_driver_order(self, fake_catalog):
        """Test that tables keep the order the driver lists them in."""
        assert fake_catalog.list_tables() == ["user", "blog", "empty"]
        assert len(fake_catalog) == 3
        assert [t.name for t in fake_catalog] == ["user", "blog", "empty"]
        assert fake_catalog.table(1).name == "blog"

    def test_lookup_by_name(self, fake_catalog):
        """Test looking up tables by name."""
        for table in fake_catalog.tables:
            assert fake_catalog.table_by_name(table.name) is table
            assert table.catalog is fake_catalog
        assert "user" in fake_catalog
        assert fake_catalog.table_by_name("missing") is None
        with pytest.raises(KeyError):
            fake_catalog.table_by_name_or_raise("missing")

    def test_column_positions(self, fake_catalog):
        """Test that columns know their position in the table."""
        for table in fake_catalog:
            for i, column in enumerate(table.columns):
                assert table.column(i) is column
                assert column.pos == i
                assert column.table is table
                assert table.column_by_name(column.name) is column

    def test_column_out_of_range(self, fake_catalog):
        """Test error on a column position past the end."""
        blog = fake_catalog.table_by_name("blog")
        with pytest.raises(IndexError):
            blog.column(3)

    def test_primary_index(self, fake_catalog):
        """Test that the primary index is found among the indexes."""
        blog = fake_catalog.table_by_name("blog")

        primaries = [i for i in blog.indexes if i.is_primary]
        assert primaries == [blog.primary]
        assert blog.primary.name == "pk_blog"
        assert [c.name for c in blog.primary.columns] == ["id"]
        assert blog.index_by_name("ix_blog_user").is_unique is False

    def test_auto_increment_column(self, fake_catalog):
        """Test the auto-increment column reported by the driver."""
        assert fake_catalog.table_by_name("user").auto_increment_column.name == "id"
        assert fake_catalog.table_by_name("empty").auto_increment_column is None

    def test_zero_column_table(self, fake_catalog):
        """Test loading a table without columns."""
        empty = fake_catalog.table_by_name("empty")
        assert empty.num_columns == 0
        assert empty.primary is None
        assert empty.indexes == ()

    def test_foreign_key_resolution(self, fake_catalog):
        """Test resolving foreign key columns to referenced tables."""
        blog = fake_catalog.table_by_name("blog")
        user = fake_catalog.table_by_name("user")

        fk = blog.foreign_key_by_name("fk_blog_user")
        assert fk.has_ref_table
        assert fk.ref_table is user
        assert fk.columns == (blog.column_by_name("user_id"),)
        assert fk.ref_columns == (user.column_by_name("id"),)

    def test_auto_increment_not_queried_without_support(self, fake_driver):
        """Test that auto-increment is skipped when the driver lacks it."""
        fake_driver.supports_auto_increment = False
        catalog = Catalog.build(fake_driver, None)
        assert catalog.table_by_name("user").auto_increment_column is None

    def test_table_filter(self, fake_driver):
        """Test that a table filter limits the loaded tables."""
        catalog = Catalog.build(fake_driver, None, table_filter=lambda name: name != "user")

        assert catalog.list_tables() == ["blog", "empty"]
        fk = catalog.table_by_name("blog").foreign_key_by_name("fk_blog_user")
        assert not fk.has_ref_table
        with pytest.raises(UnresolvedReferenceError, match="'user'"):
            fk.ref_table

    def test_missing_ref_column(self, fake_driver):
        """Test error on a foreign key to an unknown column."""
        fake_driver.foreign_keys["blog"]["fk_blog_user"] = (["user_id"], "user", ["uid"])
        catalog = Catalog.build(fake_driver, None)

        fk = catalog.table_by_name("blog").foreign_key_by_name("fk_blog_user")
        with pytest.raises(UnresolvedReferenceError, match="'uid'"):
            fk.ref_columns


class TestCatalogErrors:
    """Inconsistent driver metadata aborts the build."""

    def test_index_on_unknown_column(self, fake_driver):
        """Test error on an index over an unknown column."""
        fake_driver.indexes["user"]["ix_bad"] = (["nope"], False, False)
        with pytest.raises(SchemaError, match="'nope'"):
            Catalog.build(fake_driver, None)

    def test_foreign_key_on_unknown_column(self, fake_driver):
        """Test error on a foreign key from an unknown column."""
        fake_driver.foreign_keys["blog"]["fk_bad"] = (["nope"], "user", ["id"])
        with pytest.raises(SchemaError, match="'nope'"):
            Catalog.build(fake_driver, None)

    def test_unknown_auto_increment_column(self, fake_driver):
        """Test error on an unknown auto-increment column."""
        fake_driver.auto_increment["user"] = "nope"
        with pytest.raises(SchemaError, match="Auto increment"):
            Catalog.build(fake_driver, None)

    def test_two_primary_indexes(self, fake_driver):
        """Test error on a table with two primary indexes."""
        fake_driver.indexes["user"]["pk_other"] = (["name"], True, True)
        with pytest.raises(SchemaError, match="two primary indexes"):
            Catalog.build(fake_driver, None)

    def test_duplicate_column(self, fake_driver):
        """Test error on a repeated column name."""
        column_type = ColumnType("TEXT", "text", nullable=True)
        fake_driver.tables["user"].append(ColumnDescriptor("name", column_type))
        with pytest.raises(SchemaError, match="Duplicate column 'name'"):
            Catalog.build(fake_driver, None)

    def test_foreign_key_length_mismatch(self, fake_driver):
        """Test error on a foreign key with unequal column lists."""
        fake_driver.foreign_keys["blog"]["fk_blog_user"] = (["user_id"], "user", ["id", "name"])
        with pytest.raises(SchemaError, match="referenced columns"):
            Catalog.build(fake_driver, None)


class TestSQLiteCatalog:
    """Catalog loaded from a real SQLite database."""

    def test_tables(self, sqlite_catalog):
        """Test the tables loaded from SQLite."""
        assert sqlite_catalog.list_tables() == ["blog", "tag", "user"]

    def test_columns(self, sqlite_catalog):
        """Test column names and types loaded from SQLite."""
        user = sqlite_catalog.table_by_name("user")

        assert [c.name for c in user.columns] == ["id", "name", "email", "score"]

        name = user.column_by_name("name")
        assert name.type.database_type_name == "VARCHAR"
        assert name.type.data_type == "text"
        assert name.type.nullable is False
        assert name.type.length == 64

        score = user.column_by_name("score")
        assert score.type.data_type == "numeric"
        assert score.type.nullable is True
        assert (score.type.precision, score.type.scale) == (10, 2)

    def test_rowid_primary_key(self, sqlite_catalog):
        """Test an INTEGER PRIMARY KEY as the primary index."""
        user = sqlite_catalog.table_by_name("user")

        assert user.auto_increment_column is user.column_by_name("id")
        assert user.column_by_name("id").type.nullable is False
        assert user.primary.name == "PRIMARY"
        assert user.primary.columns == (user.column_by_name("id"),)

    def test_unique_indexes(self, sqlite_catalog):
        """Test unique indexes loaded from SQLite."""
        user = sqlite_catalog.table_by_name("user")

        assert [i.name for i in user.unique_indexes] == ["user_email"]
        assert user.index_by_name("user_email").columns == (user.column_by_name("email"),)

    def test_composite_primary_key(self, sqlite_catalog):
        """Test a primary key over two columns."""
        tag = sqlite_catalog.table_by_name("tag")

        assert tag.auto_increment_column is None
        assert [c.name for c in tag.primary.columns] == ["blog_id", "name"]
        assert tag.unique_indexes == ()

    def test_foreign_keys(self, sqlite_catalog):
        """Test foreign keys loaded from SQLite."""
        blog = sqlite_catalog.table_by_name("blog")
        tag = sqlite_catalog.table_by_name("tag")

        (blog_fk,) = blog.foreign_keys
        assert blog_fk.name == "fk_blog_0"
        assert blog_fk.ref_table is sqlite_catalog.table_by_name("user")
        assert [c.name for c in blog_fk.ref_columns] == ["id"]

        (tag_fk,) = tag.foreign_keys
        assert tag_fk.ref_table is blog
        assert [c.name for c in tag_fk.ref_columns] == ["id"]

    def test_every_table_consistent(self, sqlite_catalog):
        """Test that every loaded table passes its consistency checks."""
        for table in sqlite_catalog:
            assert sqlite_catalog.table_by_name(table.name) is table
            for i in range(table.num_columns):
                assert table.column(i).pos == i
            primaries = [i for i in table.indexes if i.is_primary]
            if table.primary is not None:
                assert primaries == [table.primary]
            else:
                assert primaries == []
