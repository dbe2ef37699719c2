"""Tests for result formatting."""

from embedding_index.formatting import DEFAULT_BUDGET, format_block, render
from embedding_index.vectorstore.models import SearchDocument


def _doc(title: str, description: str, score: float = 0.1) -> SearchDocument:
    return SearchDocument(id=f"{title}-0", title=title, description=description, score=score)


class TestFormatBlock:
    """Tests for format_block."""

    def test_block_layout(self) -> None:
        """Block has an article line and a description line."""
        block = format_block(_doc("Title", "Desc"))
        assert block == "article 1: Title\ndescription: Desc\n"


class TestRender:
    """Tests for render."""

    def test_empty_list(self) -> None:
        """No documents render to an empty string."""
        assert render([]) == ""

    def test_default_budget(self) -> None:
        """Default budget is 7500."""
        assert DEFAULT_BUDGET == 7500

    def test_keeps_ranked_order(self) -> None:
        """Blocks appear in the order given."""
        docs = [_doc("B", "second"), _doc("A", "first")]
        assert render(docs) == (
            "article 1: B\ndescription: second\n"
            "article 1: A\ndescription: first\n"
        )

    def test_never_exceeds_budget(self) -> None:
        """Output length stays within the budget."""
        docs = [_doc(f"T{i}", "x" * 400) for i in range(50)]
        message = render(docs)
        assert 0 < len(message) <= 7500

    def test_skips_oversized_block_and_continues(self) -> None:
        """A block that does not fit is skipped; later blocks still count."""
        small = _doc("small", "s")
        big = _doc("big", "b" * 100)
        tail = _doc("tail", "t")
        budget = len(format_block(small)) + len(format_block(tail)) + 10

        message = render([small, big, tail], budget=budget)

        assert message == format_block(small) + format_block(tail)

    def test_block_exactly_filling_budget_is_included(self) -> None:
        """Reaching the budget exactly is allowed."""
        doc = _doc("T", "D")
        block = format_block(doc)
        assert render([doc], budget=len(block)) == block

    def test_no_mid_block_truncation(self) -> None:
        """Every included block is whole."""
        docs = [_doc(f"T{i}", "y" * (i * 97)) for i in range(40)]
        message = render(docs, budget=2000)
        blocks = {format_block(d) for d in docs}
        pieces = [
            "article 1: " + part
            for part in message.split("article 1: ")
            if part
        ]
        assert pieces
        assert all(piece in blocks for piece in pieces)

    def test_all_fitting_blocks_included(self) -> None:
        """When everything fits, nothing is dropped."""
        docs = [_doc(f"T{i}", "d") for i in range(10)]
        assert render(docs) == "".join(format_block(d) for d in docs)
