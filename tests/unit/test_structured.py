"""
Testes unitários para leitura de metadados estruturados.
"""

import pytest

from pricewatch.scrapers.structured import (
    StructuredProduct,
    merge_structured,
    parse_availability_token,
    parse_json_ld,
    parse_meta_tags,
)
from tests.fixtures.html_samples import (
    AMAZON_JSON_LD,
    BREADCRUMB_ONLY_JSON_LD,
    MALFORMED_JSON_LD,
    NYKAA_JSON_LD_GRAPH,
    OPEN_GRAPH_META,
    PRODUCT_WITHOUT_OFFERS_JSON_LD,
)


class TestParseAvailabilityToken:
    """Testes para parse_availability_token."""

    @pytest.mark.parametrize("value,expected", [
        ("https://schema.org/InStock", True),
        ("http://schema.org/LimitedAvailability", True),
        ("instock", True),
        ("https://schema.org/OutOfStock", False),
        ("SoldOut", False),
        ("out of stock", False),
        ("https://schema.org/Discontinued", False),
        ("qualquer coisa", None),
        ("", None),
        (None, None),
        (1, None),
    ])
    def test_tokens(self, value, expected):
        assert parse_availability_token(value) is expected


class TestParseJsonLd:
    """Testes para parse_json_ld."""

    def test_produto_simples(self):
        result = parse_json_ld([AMAZON_JSON_LD])

        assert result.title == "Apple iPhone 15 (128 GB) - Black"
        assert result.price == 69900.0
        assert result.availability is True

    def test_produto_dentro_de_graph_com_low_price(self):
        result = parse_json_ld([NYKAA_JSON_LD_GRAPH])

        assert result.title == "Lakme 9 to 5 Primer + Matte Lipstick"
        assert result.price == 499.0
        assert result.availability is False

    def test_ignora_blocos_invalidos_e_sem_produto(self):
        result = parse_json_ld([MALFORMED_JSON_LD, BREADCRUMB_ONLY_JSON_LD, "", AMAZON_JSON_LD])
        assert result.price == 69900.0

    def test_produto_sem_oferta(self):
        result = parse_json_ld([PRODUCT_WITHOUT_OFFERS_JSON_LD])

        assert result.title == "Produto sem oferta"
        assert result.price == 0.0
        assert result.availability is None

    def test_nenhum_produto(self):
        result = parse_json_ld([BREADCRUMB_ONLY_JSON_LD])
        assert result.is_empty


class TestParseMetaTags:
    """Testes para parse_meta_tags."""

    def test_open_graph(self):
        result = parse_meta_tags(OPEN_GRAPH_META)

        assert result.title == "Roadster Men Slim Fit Casual Shirt"
        assert result.price == 1299.0
        assert result.availability is True

    def test_sem_meta(self):
        assert parse_meta_tags({}).is_empty


class TestMergeStructured:
    """Testes para merge_structured."""

    def test_primeiro_valor_nao_vazio_vence(self):
        json_ld = StructuredProduct(title="Do JSON-LD", price=0.0, availability=None)
        meta = StructuredProduct(title="Do og:title", price=1299.0, availability=False)

        merged = merge_structured(json_ld, meta)

        assert merged.title == "Do JSON-LD"
        assert merged.price == 1299.0
        assert merged.availability is False

    def test_disponibilidade_false_nao_e_sobrescrita(self):
        merged = merge_structured(
            StructuredProduct(availability=False),
            StructuredProduct(availability=True),
        )
        assert merged.availability is False
