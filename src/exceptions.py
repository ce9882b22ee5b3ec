class TechNewsError(Exception):
    pass


class ValidationError(TechNewsError):
    pass


class InvalidCategory(ValidationError):
    def __init__(self, category):
        self.category = category
        super().__init__(f"Invalid category: {category!r}")


class AdapterError(TechNewsError):
    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"{source}: {message}")


class ClassificationSkip(TechNewsError):
    pass


class PersistenceError(TechNewsError):
    pass


class UpstreamUnavailable(TechNewsError):
    pass
