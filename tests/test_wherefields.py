from queryhooks.wherefields import get_where_fields, main


def test_fields_of_two_conditions():
    query = 'SELECT "item"."id" FROM "items" AS "item" WHERE (id > 0) AND (id < 10)'
    assert get_where_fields(query) == ["id > 0", "id < 10"]


def test_no_where_clause():
    assert get_where_fields('SELECT "item"."id" FROM "items" AS "item"') == []


def test_single_condition():
    assert get_where_fields("SELECT 1 WHERE (a = b)") == ["a = b"]


def test_main_prints_query_and_fields(capsys):
    assert main([]) == 0
    out = capsys.readouterr().out
    assert "WHERE (id > 0) AND (id < 10)" in out
    assert "'id > 0'" in out
    assert "'id < 10'" in out