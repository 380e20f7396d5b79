"""Pull the conditions out of the WHERE clause of a rendered query."""

from __future__ import annotations

import argparse


def get_where_fields(query: str) -> list[str]:
    """The AND-ed conditions after the first WHERE, without their parentheses."""
    parts = query.split("WHERE ")
    if len(parts) == 1:
        return []
    return [field.strip("()") for field in parts[1].split(" AND ")]


def _literal(value) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (int, float)):
        return repr(value)
    text = str(value).replace("'", "''")
    return f"'{text}'"


class _SelectQuery:
    def __init__(self, table: str, alias: str, columns: list[str]) -> None:
        self.table = table
        self.alias = alias
        self.columns = columns
        self.wheres: list[str] = []

    def where(self, condition: str, *args) -> _SelectQuery:
        pieces = condition.split("?")
        values = [_literal(arg) for arg in args]
        text = pieces[0]
        for index, piece in enumerate(pieces[1:]):
            text += (values[index] if index < len(values) else "?") + piece
        self.wheres.append(text)
        return self

    def __str__(self) -> str:
        columns = ", ".join(f'"{self.alias}"."{column}"' for column in self.columns)
        text = f'SELECT {columns} FROM "{self.table}" AS "{self.alias}"'
        if self.wheres:
            text += " WHERE " + " AND ".join(f"({where})" for where in self.wheres)
        return text


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="queryhooks-where-fields",
        description="Print a query and the conditions of its WHERE clause.",
    )
    parser.parse_args(argv)
    query = _SelectQuery("items", "item", ["id"]).where("id > ?", 0).where("id < ?", 10)
    print(query)
    print(get_where_fields(str(query)))
    return 0