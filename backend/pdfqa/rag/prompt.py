"""Context assembly and prompt construction for answer generation."""

from collections.abc import Sequence

from backend.pdfqa.models.docs import SearchResult

CONTEXT_BLOCK_SEPARATOR = "\n\n"

PROMPT_TEMPLATE = """Based on the following context, answer the question. If the answer cannot be found in the context, say so.

Context:
{context}

Question: {question}

Answer:"""


def format_context_block(result: SearchResult) -> str:
    """Render one retrieved chunk as a context block."""
    return f"From {result.filename}:\n{result.content}"


def assemble_context(results: Sequence[SearchResult]) -> str:
    """Concatenate retrieved chunks in the given (similarity) order.

    Returns an empty string for no results.
    """
    return CONTEXT_BLOCK_SEPARATOR.join(format_context_block(r) for r in results)


def build_prompt(question: str, context: str) -> str:
    """Fill the answer prompt template."""
    return PROMPT_TEMPLATE.format(context=context, question=question)


def extract_context(prompt: str) -> str:
    """Recover the context section from a prompt built by build_prompt.

    The first question marker after "Context:" closes the section, so a
    question that itself contains the marker is never read as context.
    Returns an empty string if the prompt does not follow the template.
    """
    _, sep, rest = prompt.partition("Context:\n")
    if not sep:
        return ""
    context, _, _ = rest.partition("\n\nQuestion: ")
    return context.strip()
