class ContentError(Exception):
    """Base class for content lookup and rendering failures."""


class ContentNotFoundError(ContentError):
    """No document resolves for a slug in the requested or fallback locales."""

    def __init__(self, slug: str, locale: str):
        self.slug = slug
        self.locale = locale
        super().__init__(f"No article '{slug}' for locale '{locale}' or its fallbacks")


class ComponentPropsError(ContentError):
    """A registered component tag carries props that cannot be parsed or used."""

    def __init__(self, component: str, detail: str):
        self.component = component
        self.detail = detail
        super().__init__(f"<{component}>: {detail}")
