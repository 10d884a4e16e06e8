"""Shared test fixtures for all test modules."""

from pathlib import Path

import pytest


KICKOFF_ID = "11111111-1111-4111-8111-111111111111"
ROADMAP_ID = "22222222-2222-4222-8222-222222222222"
RELEASE_ID = "33333333-3333-4333-8333-333333333333"
REVIEW_ID = "44444444-4444-4444-8444-444444444444"

PROJECT_PAGE = "\n".join([
    "---",
    "title: Project X",
    "status: active",
    "---",
    "- Kickoff meeting notes",
    f"  id:: {KICKOFF_ID}",
    "\t- TODO Draft the roadmap",
    f"\t  id:: {ROADMAP_ID}",
    "\t  owner:: alice",
    "- DONE [#A] Ship release 1.0",
    f"  id:: {RELEASE_ID}",
    f"- Follow-up from (({KICKOFF_ID}))",
    "",
])

JOURNAL_PAGE = "\n".join([
    "- NOW review pull requests",
    f"  id:: {REVIEW_ID}",
    "- LATER plan sprint",
    "\t- WAITING on design",
    f"\t- See (({ROADMAP_ID})) and ((99999999-9999-4999-8999-999999999999))",
    "",
])


@pytest.fixture
def graph_dir(tmp_path) -> Path:
    """
    Small Logseq graph on disk.

    Layout:
        pages/Project X.md     frontmatter, nested blocks, a task, a reference
        journals/2024_01_15.md tasks and references (one dangling)
        .logseq/metadata.md    must never be visible
    """
    graph = tmp_path / "graph"
    (graph / "pages").mkdir(parents=True)
    (graph / "journals").mkdir()
    (graph / ".logseq").mkdir()

    (graph / "pages" / "Project X.md").write_text(PROJECT_PAGE, encoding="utf-8")
    (graph / "journals" / "2024_01_15.md").write_text(JOURNAL_PAGE, encoding="utf-8")
    (graph / ".logseq" / "metadata.md").write_text("- Draft the roadmap (hidden)\n", encoding="utf-8")
    (graph / ".logseq" / "config.edn").write_text("{:meta/version 1}\n", encoding="utf-8")

    return graph
