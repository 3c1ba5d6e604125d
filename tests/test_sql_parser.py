"""Tests for sqlglot-based table reference extraction."""
from sqlexplorer.sql.parser import extract_table_references


def test_extract_qualified_and_bare_tables():
    """Qualified references keep their schema; bare ones get an empty schema."""
    sql = """
    SELECT o.Id, c.Name
    FROM dbo.Orders o
    JOIN Customers c ON o.CustomerId = c.Id
    """
    assert extract_table_references(sql) == [('', 'Customers'), ('dbo', 'Orders')]


def test_extract_bracketed_names():
    """T-SQL bracket quoting is removed."""
    assert extract_table_references("SELECT * FROM [sales].[Order Lines]") == [
        ('sales', 'Order Lines')
    ]


def test_extract_multiple_statements():
    """Every statement is scanned."""
    sql = "UPDATE Orders SET Total = 0; DELETE FROM sales.Lines WHERE Id = 1"
    assert extract_table_references(sql) == [('', 'Orders'), ('sales', 'Lines')]


def test_extract_no_tables():
    """Statements without tables yield an empty list."""
    assert extract_table_references("SELECT 1") == []


def test_extract_deduplicates():
    """A table used twice is listed once."""
    sql = "SELECT * FROM dbo.Orders a JOIN dbo.Orders b ON a.Id = b.ParentId"
    assert extract_table_references(sql) == [('dbo', 'Orders')]


def test_extract_invalid_sql():
    """Unparseable text returns None."""
    assert extract_table_references("SELECT * FROM t WHERE (a = 1") is None
