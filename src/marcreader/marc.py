from __future__ import annotations

import typing

if typing.TYPE_CHECKING:
    from marcreader.linkage import Linkage


class VariableField:
    def __init__(self, tag: str) -> None:
        self.tag = tag

    def copy(self) -> VariableField:
        raise NotImplementedError


class ControlField(VariableField):
    def __init__(self, tag: str, data: str) -> None:
        super().__init__(tag)
        self.data = data

    def copy(self) -> ControlField:
        return ControlField(self.tag, self.data)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ControlField):
            return NotImplemented
        return self.tag == other.tag and self.data == other.data

    def __repr__(self) -> str:
        return f"ControlField({self.tag!r}, {self.data!r})"

    def __str__(self) -> str:
        return f"{self.tag} {self.data}"


class SubField:
    def __init__(self, code: str, data: str) -> None:
        self.code = code
        self.data = data

    def copy(self) -> SubField:
        return SubField(self.code, self.data)

    def __eq__(self, other) -> bool:
        if not isinstance(other, SubField):
            return NotImplemented
        return self.code == other.code and self.data == other.data

    def __repr__(self) -> str:
        return f"SubField({self.code!r}, {self.data!r})"

    def __str__(self) -> str:
        return f"${self.code}{self.data}"


class DataField(VariableField):
    def __init__(self, tag: str, ind1: str, ind2: str, subfields: list[SubField] | None = None) -> None:
        super().__init__(tag)
        self.ind1 = ind1
        self.ind2 = ind2
        self.subfields: list[SubField] = [] if subfields is None else subfields

    def copy(self) -> DataField:
        return DataField(self.tag, self.ind1, self.ind2, [subfield.copy() for subfield in self.subfields])

    def __getitem__(self, key) -> list[SubField] | None:
        res = [subfield for subfield in self.subfields if subfield.code == key]
        return res if len(res) > 0 else None

    def __contains__(self, key) -> bool:
        for subfield in self.subfields:
            if subfield.code == key:
                return True

        return False

    def __eq__(self, other) -> bool:
        if not isinstance(other, DataField):
            return NotImplemented
        if type(self) is not type(other):
            return False
        return (self.tag, self.ind1, self.ind2, self.subfields) == (other.tag, other.ind1, other.ind2, other.subfields)

    def __repr__(self) -> str:
        return f"DataField({self.tag!r}, {self.ind1!r}, {self.ind2!r}, {self.subfields!r})"

    def __str__(self) -> str:
        res = f"{self.tag} {self.ind1}{self.ind2}"
        for subfield in self.subfields:
            res += str(subfield)
        return res


class LinkedField(DataField):
    """A data field returned by a linkage lookup, with its parsed link."""

    def __init__(self, tag: str, ind1: str, ind2: str, subfields: list[SubField], link: Linkage) -> None:
        super().__init__(tag, ind1, ind2, subfields)
        self.link = link

    def copy(self) -> LinkedField:
        return LinkedField(self.tag, self.ind1, self.ind2, [subfield.copy() for subfield in self.subfields], self.link.copy())

    def __eq__(self, other) -> bool:
        result = super().__eq__(other)
        if result is not True:
            return result
        return self.link == other.link

    def __repr__(self) -> str:
        return f"LinkedField({self.tag!r}, {self.ind1!r}, {self.ind2!r}, {self.subfields!r}, {self.link!r})"


Field = ControlField | DataField
