"""Unit tests for YAML frontmatter splitting and joining."""

from textwrap import dedent

from logseek.services.frontmatter import join_frontmatter, split_frontmatter


class TestSplitFrontmatter:
    """Test split_frontmatter()."""

    def test_no_frontmatter(self):
        """Test that text without a header is all body."""
        text = "- Just a block\n"

        split = split_frontmatter(text)

        assert split.data == {}
        assert split.body == text
        assert split.block == ""
        assert split.body_offset == 0

    def test_valid_frontmatter(self):
        """Test parsing a mapping header."""
        text = dedent("""\
            ---
            title: Project X
            tags: [work, planning]
            ---
            - First block
            """)

        split = split_frontmatter(text)

        assert split.data == {"title": "Project X", "tags": ["work", "planning"]}
        assert split.body == "- First block\n"
        assert split.header == "title: Project X\ntags: [work, planning]"
        assert text[split.body_offset:] == split.body

    def test_header_offset_points_into_text(self):
        """Test that header_offset locates the header in the original text."""
        text = "---\nstatus: done\n---\n- Block\n"

        split = split_frontmatter(text)

        assert text[split.header_offset:].startswith("status: done")

    def test_empty_header(self):
        """Test that an empty header yields an empty mapping."""
        split = split_frontmatter("---\n---\n- Block\n")

        assert split.data == {}
        assert split.body == "- Block\n"

    def test_invalid_yaml_keeps_text(self):
        """Test that malformed YAML leaves the text untouched."""
        text = "---\ntitle: [unclosed\n---\n- Block\n"

        split = split_frontmatter(text)

        assert split.data == {}
        assert split.body == text

    def test_non_mapping_header_keeps_text(self):
        """Test that a list header is not treated as frontmatter."""
        text = "---\n- a\n- b\n---\n- Block\n"

        split = split_frontmatter(text)

        assert split.data == {}
        assert split.body == text

    def test_dashes_not_at_start(self):
        """Test that a --- block later in the file is not frontmatter."""
        text = "- Block\n---\ntitle: x\n---\n"

        split = split_frontmatter(text)

        assert split.data == {}
        assert split.body == text


class TestJoinFrontmatter:
    """Test join_frontmatter()."""

    def test_join_reuses_original_block(self):
        """Test that the raw header is reused verbatim."""
        text = "---\ntitle:   Spaced   \n---\n- Block\n"
        split = split_frontmatter(text)

        assert join_frontmatter(split.data, split.body, split.block) == text

    def test_join_adds_newline_after_block(self):
        """Test that a header without trailing newline is separated from the body."""
        assert join_frontmatter({"a": 1}, "- Block", "---\na: 1\n---") == "---\na: 1\n---\n- Block"

    def test_join_dumps_new_header(self):
        """Test that a mapping without raw block is dumped as YAML."""
        result = join_frontmatter({"title": "New"}, "- Block")

        assert result == "---\ntitle: New\n---\n- Block"

    def test_join_without_header(self):
        """Test that empty data returns the body alone."""
        assert join_frontmatter({}, "- Block") == "- Block"
