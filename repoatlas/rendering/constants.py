"""Output locations for generated atlas documents."""

CLAUDE_MD_FILENAME = "CLAUDE.md"
DOCS_DIRNAME = "docs"
REPO_INDEX_FILENAME = "repo-index.md"
REPO_INDEX_RELATIVE_PATH = f"{DOCS_DIRNAME}/{REPO_INDEX_FILENAME}"

OVERVIEW_TEMPLATE = "claude_md.md.j2"
REPO_INDEX_TEMPLATE = "repo_index.md.j2"

TECH_STACK_LIMIT = 5
EMPTY_CELL = "-"
