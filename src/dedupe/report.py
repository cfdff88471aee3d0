"""Human-readable diagnostics for detected duplicates."""


def format_diagnostic(name: str, requested: str, best: str, installed: str) -> str:
    """Describe one descriptor that would be merged onto another version."""
    return f'Package "{name}" wants {requested} and could get {best}, but got {installed}'
