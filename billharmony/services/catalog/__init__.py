from billharmony.services.catalog.loader import (
    ReferenceCatalog,
    build_catalog,
    get_default_catalog,
    load_catalog,
)

__all__ = ["ReferenceCatalog", "build_catalog", "get_default_catalog", "load_catalog"]
