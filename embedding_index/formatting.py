"""Bounded text rendering of search results for prompts."""

from collections.abc import Iterable

from embedding_index.vectorstore.models import SearchDocument

DEFAULT_BUDGET = 7500


def format_block(document: SearchDocument) -> str:
    """Text block for one ranked document."""
    return f"article 1: {document.title}\ndescription: {document.description}\n"


def render(documents: Iterable[SearchDocument], budget: int = DEFAULT_BUDGET) -> str:
    """Join document blocks in ranked order without exceeding ``budget``.

    A block that would overflow the budget is skipped whole and scanning
    continues, so a shorter block further down can still be included.

    Args:
        documents: Documents, closest first.
        budget: Maximum length of the returned text.

    Returns:
        The concatenated blocks; empty if nothing fits.
    """
    parts: list[str] = []
    length = 0

    for document in documents:
        block = format_block(document)
        if length + len(block) > budget:
            continue
        parts.append(block)
        length += len(block)

    return "".join(parts)
