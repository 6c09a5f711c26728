from inquiry_resolution.config.settings import Settings  # noqa: F401
