"""Signs Maven artifacts into bundles and publishes them via the Portal Publisher API."""
