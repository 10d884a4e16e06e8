"""Integration tests for SearchService."""

from textwrap import dedent

import pytest

from logseq_blocks import TaskMarker, TaskPriority
from logseek.models.config import MAX_SEARCH_RESULTS
from logseek.services.exceptions import InvalidQueryError
from logseek.services.path_filter import PathFilter
from logseek.services.search import SearchService, make_excerpt


ROADMAP_ID = "22222222-2222-4222-8222-222222222222"
RELEASE_ID = "33333333-3333-4333-8333-333333333333"


class TestMakeExcerpt:
    """Test excerpt windows."""

    def test_short_text_not_truncated(self):
        """Test that text within the radius is returned whole."""
        assert make_excerpt("find the needle here", 9, 15) == "find the needle here"

    def test_truncated_both_sides(self):
        """Test that ... marks cut text on each side."""
        text = "a" * 30 + "needle" + "b" * 30

        excerpt = make_excerpt(text, 30, 36)

        assert excerpt == "..." + "a" * 21 + "needle" + "b" * 21 + "..."

    def test_truncated_right_only(self):
        """Test a match at the start of the text."""
        text = "needle" + "b" * 30

        assert make_excerpt(text, 0, 6) == "needle" + "b" * 21 + "..."


class TestSearch:
    """Test text search."""

    @pytest.mark.asyncio
    async def test_block_match(self, graph_dir):
        """Test that a content match yields a block result."""
        results = await SearchService(graph_dir).search("roadmap")

        assert len(results) == 1
        result = results[0]
        assert result.path == "pages/Project X.md"
        assert result.title == "Project X"
        assert result.block_id == ROADMAP_ID
        assert result.excerpt == "TODO Draft the roadmap"
        assert result.match_count == 1
        assert result.line is None

    @pytest.mark.asyncio
    async def test_case_insensitive_by_default(self, graph_dir):
        """Test that matching ignores case unless asked."""
        service = SearchService(graph_dir)

        assert len(await service.search("ROADMAP")) == 1
        assert await service.search("ROADMAP", case_sensitive=True) == []

    @pytest.mark.asyncio
    async def test_property_match(self, graph_dir):
        """Test that property values are searched, with a content excerpt."""
        results = await SearchService(graph_dir).search("alice")

        assert [r.block_id for r in results] == [ROADMAP_ID]
        assert results[0].excerpt == "TODO Draft the roadmap"

    @pytest.mark.asyncio
    async def test_properties_disabled(self, graph_dir):
        """Test that a property-only hit falls back to a file-level result."""
        results = await SearchService(graph_dir).search("alice", search_block_properties=False)

        assert len(results) == 1
        assert results[0].block_id is None
        assert results[0].line == 9
        assert "owner:: alice" in results[0].excerpt

    @pytest.mark.asyncio
    async def test_frontmatter_match(self, graph_dir):
        """Test that header-only search gives a file-level result with a line number."""
        results = await SearchService(graph_dir).search(
            "active", search_frontmatter=True, search_content=False, search_block_properties=False
        )

        assert len(results) == 1
        result = results[0]
        assert result.block_id is None
        assert result.line == 3
        assert result.excerpt == "...e: Project X\nstatus: active"
        assert result.to_dict()["ln"] == 3

    @pytest.mark.asyncio
    async def test_frontmatter_with_all_zones_runs_into_body(self, graph_dir):
        """Test that the raw-text excerpt is not cut at the closing delimiter."""
        results = await SearchService(graph_dir).search("active", search_frontmatter=True)

        assert len(results) == 1
        assert results[0].line == 3
        assert results[0].excerpt.startswith("...e: Project X\nstatus: active\n---\n- Kickoff")

    @pytest.mark.asyncio
    async def test_frontmatter_not_searched_by_default(self, graph_dir):
        """Test that frontmatter is skipped unless enabled."""
        assert await SearchService(graph_dir).search("active") == []

    @pytest.mark.asyncio
    async def test_all_zones_search_raw_text(self, graph_dir):
        """Test that with every zone enabled, block hits still win."""
        results = await SearchService(graph_dir).search(
            "Project X", search_frontmatter=True, search_content=True, search_block_properties=True
        )

        assert len(results) == 1
        assert results[0].line == 2
        assert results[0].match_count == 1

    @pytest.mark.asyncio
    async def test_no_zones(self, graph_dir):
        """Test that disabling every zone matches nothing."""
        results = await SearchService(graph_dir).search(
            "roadmap", search_content=False, search_frontmatter=False, search_block_properties=False
        )

        assert results == []

    @pytest.mark.asyncio
    async def test_match_count_non_overlapping(self, tmp_path):
        """Test that occurrences are counted without overlap."""
        (tmp_path / "a.md").write_text("- aaaa\n")

        results = await SearchService(tmp_path).search("aa")

        assert results[0].match_count == 2

    @pytest.mark.asyncio
    async def test_other_allowed_extensions_searched(self, tmp_path):
        """Test that .markdown, .txt and configured extensions are searched."""
        (tmp_path / "a.md").write_text("- match md\n")
        (tmp_path / "b.markdown").write_text("- match markdown\n")
        (tmp_path / "c.txt").write_text("- match txt\n")
        (tmp_path / "d.org").write_text("- match org\n")
        (tmp_path / "e.json").write_text("- match json\n")

        default = await SearchService(tmp_path).search("match")
        widened = await SearchService(tmp_path, PathFilter(allowed_extensions=[".org"])).search("match")

        assert [r.path for r in default] == ["a.md", "b.markdown", "c.txt"]
        assert [r.path for r in widened] == ["a.md", "b.markdown", "c.txt", "d.org"]
        assert widened[1].title == "b"

    @pytest.mark.asyncio
    async def test_ignored_files_never_returned(self, graph_dir):
        """Test that .logseq files are not searched."""
        results = await SearchService(graph_dir).search("hidden")

        assert results == []

    @pytest.mark.asyncio
    async def test_custom_filter(self, graph_dir):
        """Test that a configured ignore pattern hides a directory."""
        service = SearchService(graph_dir, PathFilter(ignored_patterns=["pages/**"]))

        assert await service.search("roadmap") == []

    @pytest.mark.asyncio
    async def test_empty_query(self, graph_dir):
        """Test that empty and whitespace queries are rejected."""
        service = SearchService(graph_dir)

        with pytest.raises(InvalidQueryError):
            await service.search("")
        with pytest.raises(InvalidQueryError):
            await service.search("   ")

    @pytest.mark.asyncio
    async def test_query_is_literal(self, tmp_path):
        """Test that regex metacharacters are matched literally."""
        (tmp_path / "a.md").write_text("- cost (est.) $5\n- costs\n")

        results = await SearchService(tmp_path).search("(est.)")

        assert len(results) == 1
        assert results[0].excerpt == "cost (est.) $5"

    @pytest.mark.asyncio
    async def test_results_in_file_then_block_order(self, tmp_path):
        """Test ordering across files and blocks."""
        (tmp_path / "b.md").write_text("- note one\n- note two\n")
        (tmp_path / "a.md").write_text("- note zero\n")

        results = await SearchService(tmp_path).search("note")

        assert [r.excerpt for r in results] == ["note zero", "note one", "note two"]

    @pytest.mark.asyncio
    async def test_limit_capped(self, tmp_path):
        """Test that limits above the hard cap return at most 20 results."""
        (tmp_path / "many.md").write_text("\n".join(f"- match {i}" for i in range(50)))

        results = await SearchService(tmp_path).search("match", limit=50)

        assert len(results) == MAX_SEARCH_RESULTS

    @pytest.mark.asyncio
    async def test_limit_respected_across_files(self, tmp_path):
        """Test that the limit stops the scan mid-file."""
        for name in ("a", "b", "c"):
            (tmp_path / f"{name}.md").write_text("- match\n- match again\n")

        results = await SearchService(tmp_path).search("match", limit=3)

        assert [r.path for r in results] == ["a.md", "a.md", "b.md"]

    @pytest.mark.asyncio
    async def test_limit_below_one(self, tmp_path):
        """Test that a zero limit still returns one result."""
        (tmp_path / "a.md").write_text("- match\n- match\n")

        assert len(await SearchService(tmp_path).search("match", limit=0)) == 1

    @pytest.mark.asyncio
    async def test_unreadable_file_skipped(self, tmp_path):
        """Test that an undecodable file is skipped."""
        (tmp_path / "a.md").write_bytes(b"\xff\xfe- match")
        (tmp_path / "b.md").write_text("- match\n")

        results = await SearchService(tmp_path).search("match")

        assert [r.path for r in results] == ["b.md"]

    @pytest.mark.asyncio
    async def test_long_content_excerpt(self, tmp_path):
        """Test the excerpt window on long block content."""
        content = "x" * 40 + " needle " + "y" * 40
        (tmp_path / "a.md").write_text(f"- {content}\n")

        results = await SearchService(tmp_path).search("needle")

        assert results[0].excerpt == "..." + "x" * 20 + " needle " + "y" * 20 + "..."


class TestSearchTasks:
    """Test task listing."""

    @pytest.mark.asyncio
    async def test_all_tasks(self, graph_dir):
        """Test that every marked block is listed in file order."""
        results = await SearchService(graph_dir).search_tasks()

        assert [(r.path, r.marker) for r in results] == [
            ("journals/2024_01_15.md", TaskMarker.NOW),
            ("journals/2024_01_15.md", TaskMarker.LATER),
            ("journals/2024_01_15.md", TaskMarker.WAIT),
            ("pages/Project X.md", TaskMarker.TODO),
            ("pages/Project X.md", TaskMarker.DONE),
        ]

    @pytest.mark.asyncio
    async def test_priority(self, graph_dir):
        """Test that the priority after the marker is reported."""
        results = await SearchService(graph_dir).search_tasks(markers=["done"])

        assert len(results) == 1
        assert results[0].block_id == RELEASE_ID
        assert results[0].priority == TaskPriority.A
        assert results[0].content == "DONE [#A] Ship release 1.0"

    @pytest.mark.asyncio
    async def test_marker_aliases(self, graph_dir):
        """Test that aliases select the canonical marker."""
        results = await SearchService(graph_dir).search_tasks(markers=["Waiting"])

        assert [r.marker for r in results] == [TaskMarker.WAIT]

    @pytest.mark.asyncio
    async def test_unknown_marker(self, graph_dir):
        """Test that an unknown marker spelling is rejected."""
        with pytest.raises(InvalidQueryError, match="Unknown task marker"):
            await SearchService(graph_dir).search_tasks(markers=["SOMEDAY"])

    @pytest.mark.asyncio
    async def test_path_prefix(self, graph_dir):
        """Test restricting tasks to a directory, leading slash ignored."""
        results = await SearchService(graph_dir).search_tasks(path="/pages/")

        assert {r.path for r in results} == {"pages/Project X.md"}

    @pytest.mark.asyncio
    async def test_limit(self, graph_dir):
        """Test the task cap."""
        results = await SearchService(graph_dir).search_tasks(limit=2)

        assert [r.marker for r in results] == [TaskMarker.NOW, TaskMarker.LATER]

    @pytest.mark.asyncio
    async def test_limit_capped(self, tmp_path):
        """Test that task limits above the hard cap are clamped."""
        (tmp_path / "todo.md").write_text("\n".join(f"- TODO item {i}" for i in range(30)))

        results = await SearchService(tmp_path).search_tasks(limit=100)

        assert len(results) == MAX_SEARCH_RESULTS

    @pytest.mark.asyncio
    async def test_frontmatter_ignored(self, tmp_path):
        """Test that frontmatter lines are never parsed as tasks."""
        (tmp_path / "a.md").write_text(dedent("""\
            ---
            note: "- TODO not a block"
            ---
            - TODO real task
            """))

        results = await SearchService(tmp_path).search_tasks()

        assert [r.content for r in results] == ["TODO real task"]
