import pytest

from plugins.nav_synthesis.scanner import ContentScanner, split_front_matter


class TestSplitFrontMatter:
    def test_front_matter_and_body(self):
        """Test: YAML between fences is parsed and the rest is the body."""
        fm, body = split_front_matter("---\ntitle: Hello\norder: 2\n---\n# Heading\n")
        assert fm == {"title": "Hello", "order": 2}
        assert body == "# Heading\n"

    def test_no_front_matter(self):
        """Test: Text without fences is all body."""
        fm, body = split_front_matter("# Just a page\n")
        assert fm == {}
        assert body == "# Just a page\n"


class TestContentScanner:
    def test_scan_builds_records(self, tmp_path, engine_config, write_md):
        """Test: Files become records with language, section and folder segments."""
        write_md(
            tmp_path / "en" / "tutorials" / "Billing" / "invoices.md",
            {"title": "Invoices", "canonicalKey": "invoices-doc", "order": 3},
        )
        write_md(tmp_path / "es" / "tutorials" / "Facturacion" / "facturas.mdx", {"title": "Facturas", "slugEN": "invoices-doc"})

        result = ContentScanner(tmp_path, engine_config, languages=["en", "es"]).scan()
        by_lang = {r.language: r for r in result.records}

        assert set(by_lang) == {"en", "es"}
        en = by_lang["en"]
        assert en.section == "tutorials"
        assert en.directory_segments == ("Billing",)
        assert en.file_name_stem == "invoices"
        assert en.relative_path == "en/tutorials/Billing/invoices.md"
        assert en.frontmatter.order == 3
        assert by_lang["es"].frontmatter.canonical_key == "invoices-doc"
        assert result.stats.by_language == {"en": 1, "es": 1}

    def test_unpublished_files_are_skipped(self, tmp_path, engine_config, write_md):
        """Test: Only published content becomes a record."""
        write_md(tmp_path / "en" / "faq" / "Cards" / "a.md", {"title": "A", "canonicalKey": "a", "status": "DRAFT"})
        write_md(tmp_path / "en" / "faq" / "Cards" / "b.md", {"title": "B", "canonicalKey": "b", "status": "PUBLISHED"})
        write_md(tmp_path / "en" / "faq" / "Cards" / "c.md", {"title": "C", "canonicalKey": "c"})

        result = ContentScanner(tmp_path, engine_config, languages=["en"]).scan()
        assert sorted(r.file_name_stem for r in result.records) == ["b", "c"]
        assert result.stats.skipped == 1

    def test_unknown_section_and_missing_language_warn(self, tmp_path, engine_config, write_md):
        """Test: Unknown sections and absent language folders are reported, not fatal."""
        write_md(tmp_path / "en" / "blog" / "post.md", {"title": "Post", "canonicalKey": "post"})

        result = ContentScanner(tmp_path, engine_config).scan()
        messages = [d.message for d in result.diagnostics.warnings]
        assert result.records == []
        assert any("unknown section 'blog'" in m for m in messages)
        assert any("Language directory not found" in m for m in messages)

    def test_section_filter(self, tmp_path, engine_config, write_md):
        """Test: Only requested sections are scanned."""
        write_md(tmp_path / "en" / "faq" / "A" / "a.md", {"title": "A", "canonicalKey": "a"})
        write_md(tmp_path / "en" / "tutorials" / "B" / "b.md", {"title": "B", "canonicalKey": "b"})

        result = ContentScanner(tmp_path, engine_config, languages=["en"], sections=["faq"]).scan()
        assert [r.section for r in result.records] == ["faq"]

    def test_broken_front_matter_warns(self, tmp_path, engine_config):
        """Test: Unparseable YAML skips the file with a warning."""
        path = tmp_path / "en" / "faq" / "A" / "bad.md"
        path.parent.mkdir(parents=True)
        path.write_text("---\ntitle: [unclosed\n---\nbody\n", encoding="utf-8")

        result = ContentScanner(tmp_path, engine_config, languages=["en"]).scan()
        assert result.records == []
        assert len(result.diagnostics.warnings) == 1

    def test_missing_content_dir(self, tmp_path, engine_config):
        """Test: A missing content directory is a setup failure."""
        with pytest.raises(FileNotFoundError):
            ContentScanner(tmp_path / "nope", engine_config).scan()
