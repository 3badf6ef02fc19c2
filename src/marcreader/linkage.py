class Linkage:
    """Parsed contents of a linking subfield ($6).

    The linking subfield has the form ``tag[-occurrence][/script[/orientation]]``,
    e.g. ``880-02/(3/r``. Missing parts are empty strings.
    """

    def __init__(self, field: str, occurrence: str = '', script: str = '', orientation: str = '') -> None:
        self.field = field
        self.occurrence = occurrence
        self.script = script
        self.orientation = orientation

    def copy(self) -> 'Linkage':
        return Linkage(self.field, self.occurrence, self.script, self.orientation)

    def as_dict(self) -> dict[str, str]:
        return {
            'field': self.field,
            'occurrence': self.occurrence,
            'script': self.script,
            'orientation': self.orientation
        }

    def __eq__(self, other) -> bool:
        if not isinstance(other, Linkage):
            return NotImplemented
        return self.as_dict() == other.as_dict()

    def __repr__(self) -> str:
        return f"Linkage({self.field!r}, {self.occurrence!r}, {self.script!r}, {self.orientation!r})"


def parse_linkage_field(link: str) -> Linkage:
    link_parts = link.split('/', 2)
    target_parts = link_parts[0].split('-')
    return Linkage(
        target_parts[0],
        target_parts[1] if len(target_parts) > 1 else '',
        link_parts[1] if len(link_parts) > 1 else '',
        link_parts[2] if len(link_parts) > 2 else ''
    )
