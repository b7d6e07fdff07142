import json

import pytest

from plugins.nav_synthesis.config import EngineConfig, load_engine_config
from plugins.nav_synthesis.diagnostics import NavigationInvariantError
from plugins.nav_synthesis.engine import NavigationEngine
from plugins.nav_synthesis.models import CategoryNode, DocumentNode, LANGUAGES
from plugins.nav_synthesis.serializer import build_report, tree_to_dict
from plugins.nav_synthesis.validator import ValidationResult


def walk(nodes):
    for node in nodes:
        yield node
        if isinstance(node, CategoryNode):
            yield from walk(node.children)


class TestNavigationEngine:
    def setup_method(self):
        self.config = load_engine_config()
        self.engine = NavigationEngine(self.config)

    def test_billing_scenario(self, make_record):
        """Test: English and Spanish variants fold into one document under 'billing'."""
        records = [
            make_record("en/tutorials/Billing/invoices.md", key="invoices-doc", title="Invoices"),
            make_record("es/tutorials/Facturacion/facturas.md", key="invoices-doc", title="Facturas"),
        ]
        result = self.engine.generate(records)
        categories = result.tree.section("tutorials").categories

        assert len(categories) == 1
        billing = categories[0]
        assert billing.localized_slug["en"] == "billing"
        assert billing.localized_slug["es"] == "facturacion"
        documents = billing.documents()
        assert len(documents) == 1
        assert documents[0].localized_title == {"en": "Invoices", "es": "Facturas", "pt": ""}
        assert documents[0].localized_slug == {"en": "invoices", "es": "facturas", "pt": ""}
        assert result.validation.valid

    def test_orders_scenario(self, make_record):
        """Test: 'Orders' at the root and under 'Integrations' stay separate."""
        records = [
            make_record("en/tutorials/Orders/create-order.md", title="Create order"),
            make_record("en/tutorials/Integrations/Orders/order-webhooks.md", title="Order webhooks"),
        ]
        result = self.engine.generate(records)
        categories = result.tree.section("tutorials").categories

        assert [c.canonical_path for c in categories] == [("integrations",), ("orders",)]
        nested = categories[0].categories()[0]
        assert nested.canonical_path == ("integrations", "orders")
        assert [d.canonical_key for d in nested.documents()] == ["order-webhooks"]
        assert [d.canonical_key for d in categories[1].documents()] == ["create-order"]

    def test_spanish_only_folder_converges(self, make_record):
        """Test: A Spanish folder with no English counterpart joins the English category."""
        records = [
            make_record("en/tutorials/Orders/create-order.md", title="Create order"),
            make_record("es/tutorials/Pedidos/cancelar-pedido.md", key="cancel-order", title="Cancelar pedido"),
        ]
        categories = self.engine.generate(records).tree.section("tutorials").categories
        assert len(categories) == 1
        assert categories[0].localized_name["es"] == "Pedidos"
        assert sorted(d.canonical_key for d in categories[0].documents()) == ["cancel-order", "create-order"]

    def test_true_duplicate_pruned(self, make_record):
        """Test: Two documents with the same slug in one locale leave one survivor and one diagnostic."""
        records = [
            make_record("en/faq/Payments/refunds.md", key="refund-policy", title="Refund policy"),
            make_record("en/faq/Billing/refunds.md", key="refund-billing", title="Refunds"),
        ]
        result = self.engine.generate(records)
        documents = [n for n in walk(result.tree.section("faq").categories) if isinstance(n, DocumentNode)]

        assert len(documents) == 1
        assert len(result.diagnostics.warnings) == 2
        duplicates = [d for d in result.diagnostics.warnings if "True duplicate" in d.message]
        assert len(duplicates) == 1

    def test_invalid_records_dropped(self, make_record):
        """Test: Records without a title or with an unknown language are skipped with warnings."""
        records = [
            make_record("en/faq/A/ok.md", title="Ok"),
            make_record("en/faq/A/untitled.md", title=""),
            make_record("fr/faq/A/bonjour.md", title="Bonjour"),
        ]
        result = self.engine.generate(records)
        assert len(result.diagnostics.warnings) == 2
        assert result.validation.stats.total_documents == 1

    def test_properties_hold_on_mixed_content(self, make_record):
        """Test: No empty categories and no shared sibling slugs in any locale."""
        records = [
            make_record("en/tutorials/Billing/invoices.md", key="invoices", title="Invoices"),
            make_record("es/tutorials/Facturacion/facturas.md", key="invoices", title="Facturas"),
            make_record("pt/tutorials/Faturamento/faturas.md", key="invoices", title="Faturas"),
            make_record("en/tutorials/Billing/Billing/billing.md", key="billing-guide", title="Billing"),
            make_record("es/tutorials/Envios/envios.md", key="shipping", title="Envíos"),
            make_record("en/tutorials/Shipping/Carriers/carriers.md", key="carriers", title="Carriers"),
            make_record("pt/tutorials/Frete/tabela.md", key="freight", title="Tabela"),
            make_record("en/tutorials/welcome.md", key="welcome", title="Welcome"),
        ]
        result = self.engine.generate(records)

        for section in result.tree.sections:
            for node in walk(section.categories):
                if isinstance(node, CategoryNode):
                    assert node.children
            siblings = [section.categories] + [
                n.children for n in walk(section.categories) if isinstance(n, CategoryNode)
            ]
            for group in siblings:
                categories = [n for n in group if isinstance(n, CategoryNode)]
                for lang in LANGUAGES:
                    slugs = [c.localized_slug[lang] for c in categories if c.localized_slug[lang]]
                    assert len(slugs) == len(set(slugs))
        assert result.validation.valid

    def test_generation_is_deterministic(self, make_record):
        """Test: Input order does not change the output."""
        records = [
            make_record("en/tutorials/Billing/invoices.md", key="invoices", title="Invoices"),
            make_record("es/tutorials/Facturacion/facturas.md", key="invoices", title="Facturas"),
            make_record("en/tutorials/Orders/create.md", key="create", title="Create"),
        ]
        first = tree_to_dict(self.engine.generate(records).tree)
        second = tree_to_dict(self.engine.generate(list(reversed(records))).tree)
        assert first == second

    def test_sections_follow_config_order(self, make_record):
        """Test: Known sections keep their configured order, unknown ones come after."""
        records = [
            make_record("en/zeta/A/z.md", title="Z"),
            make_record("en/faq/A/f.md", title="F"),
            make_record("en/tutorials/A/t.md", title="T"),
        ]
        ids = [s.id for s in self.engine.generate(records).tree.sections]
        assert ids == ["tutorials", "faq", "zeta"]

    def test_tracks_are_numbered_in_order(self, make_record):
        """Test: Track documents follow front matter order and get numbered titles."""
        records = [
            make_record("en/tracks/Start/second.md", title="Second", order=2, trackSlugEN="start"),
            make_record("en/tracks/Start/first.md", title="First", order=1, trackSlugEN="start"),
        ]
        track = self.engine.generate(records).tree.section("tracks").categories[0]
        assert [d.localized_title["en"] for d in track.documents()] == ["1. First", "2. Second"]

    def test_strict_mode_raises_on_invariant_error(self, make_record):
        """Test: Validation errors abort generation in strict mode."""

        class FailingValidator:
            def validate(self, tree):
                return ValidationResult(valid=False, errors=["broken"])

        config = EngineConfig(
            sections=self.config.sections, synonyms=self.config.synonyms, acronyms=self.config.acronyms, strict=True
        )
        with pytest.raises(NavigationInvariantError):
            NavigationEngine(config, validator=FailingValidator()).generate([make_record("en/faq/A/a.md")])

    def test_succeeded_in_strict_mode(self, make_record):
        """Test: Warnings fail the completion status only in strict mode."""
        result = self.engine.generate([make_record("en/faq/A/a.md"), make_record("en/faq/A/b.md", title="")])
        assert result.succeeded()
        assert not result.succeeded(strict=True)

    def test_report(self, make_record):
        """Test: The markdown report carries summary, coverage and diagnostics."""
        records = [
            make_record("en/faq/A/a.md", title="A"),
            make_record("en/faq/A/b.md", title=""),
        ]
        report = build_report(self.engine.generate(records))
        assert report.startswith("# Navigation Generation Report")
        assert "## Language Coverage" in report
        assert "- **EN**: 1/1 (100.0%)" in report
        assert "Missing title" in report
        assert "## Translation Completeness" in report
        assert "| faq | 1 | 100.0% | 0.0% | 0.0% |" in report

    def test_merged_category_avoids_sibling_document_slug(self, make_record, tmp_path):
        """Test: After a merge, a child category never shares a slug with a document next to it."""
        legacy = tmp_path / "en" / "tutorials" / "Legacy"
        legacy.mkdir(parents=True)
        (legacy / "metadata.json").write_text(json.dumps({"name": "Billing"}), encoding="utf-8")
        records = [
            make_record("en/tutorials/Billing/Setup/a.md", key="a", title="A", root=str(tmp_path)),
            make_record("en/tutorials/Legacy/setup.md", key="setup", title="Setup", root=str(tmp_path)),
        ]
        result = self.engine.generate(records)
        categories = result.tree.section("tutorials").categories

        assert len(categories) == 1
        billing = categories[0]
        category_slugs = {c.localized_slug["en"] for c in billing.categories()}
        document_slugs = {d.localized_slug["en"] for d in billing.documents()}
        assert document_slugs == {"setup"}
        assert category_slugs == {"setup-category"}
        assert category_slugs & document_slugs == set()
        assert result.validation.valid

    def test_quoted_order_is_reported(self, make_record):
        """Test: A non-numeric order is ignored with a warning naming the file."""
        result = self.engine.generate([make_record("en/faq/A/intro.md", order="2")])
        warnings = [d for d in result.diagnostics.warnings if "non-numeric order" in d.message]

        assert len(warnings) == 1
        assert warnings[0].context["order"] == "2"
        assert result.tree.section("faq").categories[0].documents()[0].order is None
