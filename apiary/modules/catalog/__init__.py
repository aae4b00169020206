from apiary.modules.catalog.data import DEFAULT_BEE_SPECIES
from apiary.modules.catalog.service import SpeciesCatalogService

__all__ = ["DEFAULT_BEE_SPECIES", "SpeciesCatalogService"]
