# tests/unit/test_answers.py
"""Unit tests for developer answer parsing."""

from redoc.ai.types import QAPair
from redoc.answers import (
    developer_supplied_diagram,
    developer_supplied_table,
    parse_rich_response,
)

RICH_ANSWER = """We moved to cookies. See https://example.com/rfc (again: https://example.com/rfc)

```mermaid
flowchart TD
  A --> B
```

```python
def login():
    return True
```

| Option | Pro |
|---|---|
| Cookie | Simple |

That's it."""


class TestParseRichResponse:
    def test_extracts_blocks(self):
        parsed = parse_rich_response(RICH_ANSWER)

        assert parsed.mermaid_blocks == ["```mermaid\nflowchart TD\n  A --> B\n```"]
        assert len(parsed.code_blocks) == 1
        assert parsed.code_blocks[0].language == "python"
        assert parsed.code_blocks[0].code == "def login():\n    return True"
        assert parsed.tables == ["| Option | Pro |\n|---|---|\n| Cookie | Simple |"]
        assert parsed.urls == ["https://example.com/rfc"]

    def test_plain_text_is_leftover(self):
        parsed = parse_rich_response(RICH_ANSWER)
        assert parsed.plain_text.startswith("We moved to cookies.")
        assert parsed.plain_text.endswith("That's it.")
        assert "```" not in parsed.plain_text
        assert "|" not in parsed.plain_text
        assert "\n\n\n" not in parsed.plain_text

    def test_unlabelled_fence(self):
        parsed = parse_rich_response("```\nraw\n```")
        assert parsed.code_blocks[0].language is None
        assert parsed.code_blocks[0].to_markdown() == "```\nraw\n```"

    def test_empty(self):
        parsed = parse_rich_response("")
        assert parsed.plain_text == ""
        assert parsed.tables == []


class TestDeveloperSupplied:
    def test_diagram_and_table_detected(self):
        qa = [QAPair(question="q1", answer="plain"), QAPair(question="q2", answer=RICH_ANSWER)]
        assert developer_supplied_diagram(qa) is True
        assert developer_supplied_table(qa) is True

    def test_none_supplied(self):
        qa = [QAPair(question="q", answer="just words | with a pipe")]
        assert developer_supplied_diagram(qa) is False
        assert developer_supplied_table(qa) is False
