import re

from atelier.models.schemas import StyleProfile

CLAUSE_DELIMITERS = re.compile(r"[,.;\n]")
FALLBACK_SUMMARY = "the main ideas of the request"


def summarize_prompt(prompt: str) -> str:
    """Lowercased first one or two clauses of the prompt."""
    clauses = [part.strip() for part in CLAUSE_DELIMITERS.split(prompt)]
    clauses = [part for part in clauses if part][:2]
    if not clauses:
        return FALLBACK_SUMMARY
    if len(clauses) == 1:
        return clauses[0].lower()
    return f"{clauses[0].lower()} and {clauses[1].lower()}"


def build_caption(prompt: str, profile: StyleProfile, used_base: bool) -> str:
    summary = summarize_prompt(prompt)
    if used_base:
        return (
            f"I transformed the provided base in the {profile.label} style. "
            f"I highlighted {summary} and preserved the established identity."
        )
    return (
        f"I composed an original piece in {profile.label}, emphasizing {summary}. "
        f"We can keep iterating with new adjustments."
    )
