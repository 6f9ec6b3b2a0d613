"""docrag rich error messages — actionable feedback.

Every error shown to the user must contain:
  1. What went wrong (clear cause)
  2. The exact action the user should take to fix it

Usage:
    from docrag.cli.errors import err_no_db
    console.print(err_no_db(".docrag.db"))
    raise typer.Exit(1)
"""

from __future__ import annotations

from docrag.rag.llm_client import _PROVIDER_ENV


def err_no_api_key(provider: str) -> str:
    """No API key for *provider*."""
    env_var = _PROVIDER_ENV.get(provider.lower()) or f"{provider.upper()}_API_KEY"
    return (
        f"[red]Error:[/] No API key for '{provider}'.\n"
        f"  Set:  export {env_var}=sk-..."
    )


def err_no_db(db_path: str = ".docrag.db") -> str:
    """No database at *db_path*."""
    return (
        f"[red]Error:[/] No database found at '{db_path}'.\n"
        "  Run:  docrag init"
    )


def err_config(message: str) -> str:
    return (
        f"[red]Error:[/] Invalid configuration.\n"
        f"  {message}\n"
        "  Fix docrag.yaml (or ~/.docrag/config.yaml) and retry."
    )


def err_document_not_found(ref: str) -> str:
    """Document id/name not in the library."""
    return (
        f"[yellow]Document not found:[/] '{ref}' is not in the library.\n"
        "  Run:  docrag status  to see all documents."
    )


def err_unsupported_file(path: str, supported: list[str]) -> str:
    return (
        f"[red]Error:[/] Unsupported file type: '{path}'\n"
        f"  Supported extensions: {', '.join(supported)}"
    )


def err_processing_failed(name: str, reason: str) -> str:
    """A document failed during parse/chunk/embed/index."""
    return (
        f"[red]✗ Processing failed:[/] '{name}'\n"
        f"  {reason}\n"
        "  Fix the cause, then run:  docrag process --retry-failed"
    )


def err_retrieval_failed(reason: str) -> str:
    return (
        f"[red]Error:[/] Retrieval failed — no context was added.\n"
        f"  {reason}"
    )


def warn_no_conversation_documents(conversation_id: str) -> str:
    return (
        f"[yellow]⚠[/] Conversation '{conversation_id}' has no documents attached.\n"
        f"  Run:  docrag attach <document> {conversation_id}"
    )
