class CollectionNames:
    """Names of the MongoDB collections used by the service."""

    METADATA_CACHE = "metadata_cache"
