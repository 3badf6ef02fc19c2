class MarcError(Exception):
    pass


class InvalidStructure(MarcError):
    """Direct payload is missing or has a mistyped leader or fields."""


class UnrecognizedFormat(MarcError):
    """No registered codec claims the raw input."""


class UnknownFormat(MarcError):
    """A serialization was requested under a name nobody registered."""


class ParseError(MarcError):
    pass


class SerializeError(MarcError):
    pass


class RegistryFrozen(MarcError):
    pass


class InvalidFilterRule(MarcError):
    pass
