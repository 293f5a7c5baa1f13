from obsidian_cortex.core.markdown_tables import is_divider_row, parse_tables, split_table_row


def test_split_table_row():
    assert split_table_row("| a | b |") == ["a", "b"]
    assert split_table_row("a | b") == ["a", "b"]
    assert split_table_row("| a |  |") == ["a", ""]
    assert split_table_row("no pipes here") == []


def test_is_divider_row():
    assert is_divider_row("|---|:---:|")
    assert is_divider_row("--- | ---")
    assert not is_divider_row("| a | b |")
    assert not is_divider_row("---")
    assert not is_divider_row("")


def test_parse_tables_in_document_order():
    body = "\n".join(
        [
            "Intro",
            "",
            "| ID | Status |",
            "|---|---|",
            "| E1 | Open |",
            "| E2 | Done |",
            "",
            "Between",
            "",
            "| Name | Value |",
            "| --- | --- |",
            "| x | 1 |",
            "After the table",
        ]
    )
    tables = parse_tables(body)

    assert [table.headers for table in tables] == [["ID", "Status"], ["Name", "Value"]]
    assert tables[0].rows == [["E1", "Open"], ["E2", "Done"]]
    assert tables[1].rows == [["x", "1"]]


def test_header_without_divider_is_not_a_table():
    assert parse_tables("| ID | Status |\n| E1 | Open |") == []


def test_table_without_rows():
    tables = parse_tables("| ID | Status |\n|---|---|")
    assert len(tables) == 1
    assert tables[0].rows == []
