# services/resolver.py
import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

@dataclass
class ReferenceCache:
    """Reference ids resolved during one run, keyed by natural identity"""
    vendors: dict = field(default_factory=dict)
    manufacturers: dict = field(default_factory=dict)

class ReferenceResolver:
    """Get-or-create for vendors and manufacturers with a per-run cache"""

    def __init__(self, db_manager, cache=None):
        self.db = db_manager
        self.cache = cache if cache is not None else ReferenceCache()
        self.vendors_created = 0
        self.manufacturers_created = 0

    def resolve_vendor(self, site_source):
        """
        Resolve the vendor for a site source, creating it on first sight

        Args:
            site_source (str): SiteSource column, also the vendor name

        Returns:
            str: vendor_id
        """
        if site_source in self.cache.vendors:
            return self.cache.vendors[site_source]

        try:
            vendor_id, created = self.db.get_or_create_vendor(site_source, site_source)
        except Exception as e:
            logger.error(f"Error resolving vendor '{site_source}': {str(e)}")
            raise

        if created:
            self.vendors_created += 1
            logger.info(f"Created vendor '{site_source}' ({vendor_id})")

        self.cache.vendors[site_source] = vendor_id
        return vendor_id

    def resolve_manufacturer(self, manufacturer_id, manufacturer_name):
        """
        Resolve a manufacturer by id, creating it with the given name on first sight

        The name of an existing manufacturer is left untouched.

        Returns:
            str: manufacturer_id
        """
        if manufacturer_id in self.cache.manufacturers:
            return self.cache.manufacturers[manufacturer_id]

        try:
            resolved_id, created = self.db.get_or_create_manufacturer(manufacturer_id, manufacturer_name)
        except Exception as e:
            logger.error(f"Error resolving manufacturer '{manufacturer_id}': {str(e)}")
            raise

        if created:
            self.manufacturers_created += 1
            logger.info(f"Created manufacturer '{manufacturer_name}' ({resolved_id})")

        self.cache.manufacturers[manufacturer_id] = resolved_id
        return resolved_id
