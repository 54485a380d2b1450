from .demo import (  # noqa: F401
    bootstrap_factory,
    describe_product,
    rename_product,
    run_demo,
    seed_sample_data,
)
from .models import Product, catalog_metadata  # noqa: F401

__all__ = [
    "Product",
    "bootstrap_factory",
    "catalog_metadata",
    "describe_product",
    "rename_product",
    "run_demo",
    "seed_sample_data",
]
