"""
Leitura de metadados estruturados de páginas de produto.
JSON-LD (schema.org Product) e meta tags Open Graph são tentados antes dos seletores CSS.
"""

import json
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from pricewatch.pipeline.cleaners import clean_price


# Sufixos de schema.org/ItemAvailability
_IN_STOCK_MARKERS = ("instock", "limitedavailability", "onlineonly", "instoreonly")
_OUT_OF_STOCK_MARKERS = ("outofstock", "soldout", "discontinued", "preorder", "presale")


@dataclass
class StructuredProduct:
    """Dados de produto obtidos de metadados estruturados."""

    title: Optional[str] = None
    price: float = 0.0
    availability: Optional[bool] = None

    @property
    def is_empty(self) -> bool:
        return not self.title and not self.price and self.availability is None


def parse_availability_token(value: Any) -> Optional[bool]:
    """
    Interpreta um valor de disponibilidade estruturado.

    Exemplos:
        "https://schema.org/InStock" -> True
        "http://schema.org/OutOfStock" -> False
        "instock" -> True
        "qualquer coisa" -> None
    """
    if not value or not isinstance(value, str):
        return None

    token = value.strip().lower().rsplit("/", 1)[-1].replace(" ", "").replace("_", "")

    if token in _OUT_OF_STOCK_MARKERS or token.startswith("outof"):
        return False
    if token in _IN_STOCK_MARKERS:
        return True
    return None


def _iter_json_ld_nodes(data: Any) -> Iterable[dict]:
    """Percorre nós JSON-LD, incluindo listas e @graph."""
    if isinstance(data, list):
        for item in data:
            yield from _iter_json_ld_nodes(item)
    elif isinstance(data, dict):
        yield data
        if "@graph" in data:
            yield from _iter_json_ld_nodes(data["@graph"])


def _is_product_node(node: dict) -> bool:
    node_type = node.get("@type")
    if isinstance(node_type, list):
        return "Product" in node_type
    return node_type == "Product"


def _first_offer(offers: Any) -> Optional[dict]:
    if isinstance(offers, list):
        return next((o for o in offers if isinstance(o, dict)), None)
    if isinstance(offers, dict):
        return offers
    return None


def parse_json_ld(blocks: Iterable[str]) -> StructuredProduct:
    """
    Extrai título, preço e disponibilidade do primeiro nó Product encontrado.

    Blocos com JSON inválido são ignorados.

    Args:
        blocks: Conteúdo textual das tags <script type="application/ld+json">

    Returns:
        StructuredProduct (vazio se nenhum Product for encontrado)
    """
    for block in blocks:
        if not block or not block.strip():
            continue
        try:
            data = json.loads(block)
        except (json.JSONDecodeError, TypeError):
            continue

        for node in _iter_json_ld_nodes(data):
            if not _is_product_node(node):
                continue

            result = StructuredProduct(title=node.get("name") or None)

            offer = _first_offer(node.get("offers"))
            if offer:
                raw_price = offer.get("price")
                if raw_price in (None, ""):
                    raw_price = offer.get("lowPrice")
                result.price = clean_price(raw_price)
                result.availability = parse_availability_token(offer.get("availability"))

            return result

    return StructuredProduct()


def parse_meta_tags(meta: dict[str, Optional[str]]) -> StructuredProduct:
    """
    Extrai dados de meta tags (og:title, product:price:amount, product:availability).

    Args:
        meta: Mapa property -> content

    Returns:
        StructuredProduct com os campos encontrados
    """
    return StructuredProduct(
        title=meta.get("og:title") or None,
        price=clean_price(meta.get("product:price:amount")),
        availability=parse_availability_token(meta.get("product:availability")),
    )


def merge_structured(*sources: StructuredProduct) -> StructuredProduct:
    """Combina fontes estruturadas; o primeiro valor não vazio de cada campo vence."""
    merged = StructuredProduct()
    for source in sources:
        if not merged.title and source.title:
            merged.title = source.title
        if not merged.price and source.price:
            merged.price = source.price
        if merged.availability is None and source.availability is not None:
            merged.availability = source.availability
    return merged
