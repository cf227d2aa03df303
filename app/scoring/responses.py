"""
scoring/responses.py

Response Document model consumed by every calculator.

A lever is in exactly one of three states:
    UNANSWERED                     - no response object at all
    LeverResponse(applicable=False) - explicitly not relevant to the respondent
    LeverResponse(present=True|False|None) - applicable; None is a malformed answer

UNANSWERED and present=None both score as applicable-but-absent; only the
Confidence Estimator tells them apart from an explicit answer.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple, Union

from app.models.enumerations import Module


@dataclass(frozen=True)
class LeverResponse:
    """One respondent answer for a lever."""
    present: Optional[bool] = None
    applicable: bool = True

    def __post_init__(self):
        # An inapplicable lever is never present
        if not self.applicable and self.present:
            object.__setattr__(self, "present", False)

    @property
    def is_present(self) -> bool:
        return self.applicable and self.present is True

    @property
    def is_answered(self) -> bool:
        return not self.applicable or self.present is not None

    @classmethod
    def from_value(cls, value: Any) -> "LeverResponse":
        """Build from a wire value; anything unexpected reads as absent."""
        if not isinstance(value, Mapping):
            return cls()
        present = value.get("present")
        return cls(
            present=present if isinstance(present, bool) else None,
            applicable=value.get("applicable") is not False,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"present": self.present, "applicable": self.applicable}


class _Unanswered:
    """Sentinel type for a lever with no response object."""

    __slots__ = ()
    present = None
    applicable = True
    is_present = False
    is_answered = False

    def __repr__(self) -> str:
        return "UNANSWERED"

    def __reduce__(self):
        return "UNANSWERED"


UNANSWERED = _Unanswered()

LeverAnswer = Union[LeverResponse, _Unanswered]


class ResponseDocument:
    """Immutable module → lever → LeverResponse mapping for one respondent."""

    __slots__ = ("_modules",)

    def __init__(self, modules: Optional[Mapping[Module, Mapping[str, LeverResponse]]] = None):
        frozen = {
            Module(module): MappingProxyType(dict(levers))
            for module, levers in (modules or {}).items()
        }
        object.__setattr__(self, "_modules", MappingProxyType(frozen))

    def __setattr__(self, name, value):
        raise AttributeError("ResponseDocument is immutable")

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "ResponseDocument":
        """
        Build from the wire shape {module: {lever: {present, applicable}}}.

        Unknown modules and non-mapping module values are ignored.
        """
        modules: Dict[Module, Dict[str, LeverResponse]] = {}
        for key, levers in (data or {}).items():
            try:
                module = Module(key)
            except ValueError:
                continue
            if not isinstance(levers, Mapping):
                continue
            modules[module] = {
                str(lever): LeverResponse.from_value(value)
                for lever, value in levers.items()
            }
        return cls(modules)

    def get(self, module: Module, lever: str) -> LeverAnswer:
        return self._modules.get(module, {}).get(lever, UNANSWERED)

    def module(self, module: Module) -> Mapping[str, LeverResponse]:
        return self._modules.get(module, MappingProxyType({}))

    def modules(self) -> Iterator[Tuple[Module, Mapping[str, LeverResponse]]]:
        return iter(self._modules.items())

    def is_present(self, module: Module, lever: str) -> bool:
        return self.get(module, lever).is_present

    def is_absent(self, module: Module, lever: str) -> bool:
        """Applicable and not present (unanswered counts as absent)."""
        answer = self.get(module, lever)
        return answer.applicable and not answer.is_present

    def to_dict(self) -> Dict[str, Dict[str, Dict[str, Any]]]:
        return {
            module.value: {lever: resp.to_dict() for lever, resp in levers.items()}
            for module, levers in self._modules.items()
        }

    def __eq__(self, other) -> bool:
        if not isinstance(other, ResponseDocument):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"ResponseDocument({self.to_dict()!r})"
