import json
from pathlib import Path

from pydantic import TypeAdapter

from common.config import config
from common.logging import get_logger
from models.shipping import ProductDimension

logger = get_logger(__name__)

_DIMENSIONS = TypeAdapter(list[ProductDimension])


class DimensionCatalog:
    """In-memory store of product shipping dimensions and their static prices."""

    def __init__(self, dimensions: list[ProductDimension] | None = None):
        self._by_id: dict[int, ProductDimension] = {d.id: d for d in dimensions or []}

    @classmethod
    def from_file(cls, path: str | Path) -> "DimensionCatalog":
        """Load dimension records from a JSON list, e.g. an export of the product_dimensions table."""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        dimensions = _DIMENSIONS.validate_python(data)
        logger.info(f"Loaded {len(dimensions)} product dimensions from {path}")
        return cls(dimensions)

    @classmethod
    def from_config(cls) -> "DimensionCatalog":
        if not config.product_dimensions_file:
            logger.warning("No product_dimensions_file configured, static prices limited to custom dimensions")
            return cls()
        return cls.from_file(config.product_dimensions_file)

    def add(self, dimension: ProductDimension) -> None:
        self._by_id[dimension.id] = dimension

    def get(self, dimension_id: int) -> ProductDimension | None:
        return self._by_id.get(dimension_id)

    def for_product(self, product_id: int) -> list[ProductDimension]:
        return [d for d in self._by_id.values() if d.product_id == product_id]
