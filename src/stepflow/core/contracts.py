"""
Contracts - Validated Data Shapes

A Contract wraps a Pydantic model and adds what the workflow engine needs
on top of plain model validation:

  - validate() never raises; it returns a ContractResult holding either the
    normalized value or the list of violations
  - contracts are open by default (unknown fields are carried through) and
    can be closed explicitly
  - non-finite numbers are rejected everywhere in the value
  - structural compatibility between two contracts can be checked without
    any value, so that workflows are rejected when they are committed

Example:
    class Article(BaseModel):
        content: str
        type: Literal["article", "blog", "social"] = "article"

    contract = Contract(Article)
    result = contract.validate({"content": "hello"})
    if result.ok:
        print(result.value)          # {"content": "hello", "type": "article"}
    else:
        print(result.violations)
"""

import logging
import math
import re
import types
from dataclasses import dataclass
from typing import (
    Annotated,
    Any,
    Dict,
    Iterator,
    List,
    Literal,
    Mapping,
    Optional,
    Tuple,
    Type,
    Union,
    get_args,
    get_origin,
)

from pydantic import BaseModel, ConfigDict, Field, ValidationError, create_model
from pydantic.fields import FieldInfo

from .types import Violation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContractResult:
    """Outcome of Contract.validate()."""

    value: Optional[Dict[str, Any]] = None
    model: Optional[BaseModel] = None
    violations: Tuple[Violation, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.violations


def violations_from_error(error: ValidationError) -> List[Violation]:
    """
    Convert a Pydantic ValidationError into Violation records.

    Args:
        error: Pydantic ValidationError

    Returns:
        One Violation per reported error, path taken from the error location
    """
    violations = []
    for err in error.errors():
        path = tuple(err.get("loc", ()))
        msg = err.get("msg", "invalid value")
        violations.append(Violation(path=path, reason=f"{msg} [{err.get('type', 'unknown')}]"))
    return violations


def _non_finite(value: Any, path: Tuple[Any, ...] = ()) -> Iterator[Violation]:
    if isinstance(value, float):
        if not math.isfinite(value):
            yield Violation(path=path, reason=f"number must be finite, got {value}")
    elif isinstance(value, Mapping):
        for key, item in value.items():
            yield from _non_finite(item, path + (key,))
    elif isinstance(value, (list, tuple, set, frozenset)):
        for index, item in enumerate(value):
            yield from _non_finite(item, path + (index,))


class Contract:
    """
    Immutable structural schema with a total validator.

    Args:
        model: Pydantic model describing the shape
        name: Display name (defaults to the model class name)
        closed: Reject fields the model does not declare
        strict: Reject wrong primitive types instead of coercing them ("5" is
            not an int, True is not an int); int still widens to float.
            Pass strict=False for Pydantic lax mode
        keyed: Marks a fan-in mapping; consumers must declare the same keys
    """

    __slots__ = ("model", "name", "closed", "strict", "keyed")

    def __init__(
        self,
        model: Type[BaseModel],
        *,
        name: Optional[str] = None,
        closed: bool = False,
        strict: bool = True,
        keyed: bool = False,
    ):
        if not (isinstance(model, type) and issubclass(model, BaseModel)):
            raise TypeError(f"Contract requires a pydantic model class, got {model!r}")
        closed = closed or model.model_config.get("extra") == "forbid"
        object.__setattr__(self, "model", self._derive(model, closed, strict))
        object.__setattr__(self, "name", name or model.__name__)
        object.__setattr__(self, "closed", closed)
        object.__setattr__(self, "strict", strict)
        object.__setattr__(self, "keyed", keyed)

    def __setattr__(self, key: str, value: Any) -> None:
        raise AttributeError(f"Contract {self.name} is immutable")

    def __delattr__(self, key: str) -> None:
        raise AttributeError(f"Contract {self.name} is immutable")

    @staticmethod
    def _derive(model: Type[BaseModel], closed: bool, strict: bool) -> Type[BaseModel]:
        """Subclass the model with the contract's extra-field, coercion and finiteness policy."""
        extra = "forbid" if closed else "allow"

        class Derived(model):
            model_config = ConfigDict(
                extra=extra, strict=strict, allow_inf_nan=False, populate_by_name=True
            )

        Derived.__name__ = model.__name__
        Derived.__qualname__ = model.__qualname__
        Derived.__doc__ = model.__doc__
        return Derived

    @classmethod
    def define(
        cls,
        name: str,
        *,
        closed: bool = False,
        strict: bool = True,
        **fields: Any,
    ) -> "Contract":
        """
        Build a contract from field definitions.

        Example:
            Contract.define("Query", text=(str, ...), limit=(int, 10))
        """
        return cls(create_model(name, **fields), closed=closed, strict=strict)

    @classmethod
    def fan_in(
        cls,
        name: str,
        outputs: Mapping[str, "Contract"],
        required: bool = True,
    ) -> "Contract":
        """
        Contract of a fan-in mapping: one field per child id.

        Args:
            name: Contract name
            outputs: child id -> child output contract, in declaration order
            required: False for branch stages, where arms may not run
        """
        fields: Dict[str, Any] = {}
        for index, (key, contract) in enumerate(outputs.items()):
            default = ... if required else None
            fields[f"child_{index}"] = (contract.model, Field(default, alias=key))
        model_name = re.sub(r"\W+", "_", name).strip("_") or "FanIn"
        model = create_model(model_name, __config__=ConfigDict(populate_by_name=True), **fields)
        return cls(model, name=name, keyed=True)

    @property
    def fields(self) -> Dict[str, FieldInfo]:
        """Declared fields keyed by their external name (alias when set)."""
        return _external_fields(self.model)

    @property
    def required_fields(self) -> List[str]:
        return [key for key, info in self.fields.items() if info.is_required()]

    def json_schema(self) -> Dict[str, Any]:
        return self.model.model_json_schema(by_alias=True)

    def validate(self, value: Any) -> ContractResult:
        """
        Validate a value. Never raises.

        Args:
            value: dict-like payload or a Pydantic model instance

        Returns:
            ContractResult with the normalized dict or the violations
        """
        if isinstance(value, BaseModel):
            value = value.model_dump(by_alias=True)

        try:
            instance = self.model.model_validate(value, strict=self.strict or None)
        except ValidationError as e:
            return ContractResult(violations=tuple(violations_from_error(e)))
        except Exception as e:
            # Custom validators may raise non-ValueError exceptions
            logger.debug(f"[{self.name}] validator raised {type(e).__name__}: {e}")
            return ContractResult(
                violations=(Violation(path=(), reason=f"{type(e).__name__}: {e}"),)
            )

        normalized = instance.model_dump(by_alias=True)
        problems = tuple(_non_finite(normalized))
        if problems:
            return ContractResult(violations=problems)
        return ContractResult(value=normalized, model=instance)

    def __repr__(self) -> str:
        flags = []
        if self.closed:
            flags.append("closed")
        if self.keyed:
            flags.append("keyed")
        suffix = f" ({', '.join(flags)})" if flags else ""
        return f"Contract({self.name}: {', '.join(self.fields)}){suffix}"


def as_contract(schema: Any) -> Contract:
    """Accept either a Contract or a Pydantic model class."""
    if isinstance(schema, Contract):
        return schema
    if isinstance(schema, type) and issubclass(schema, BaseModel):
        return Contract(schema)
    raise TypeError(f"Expected a Contract or pydantic model class, got {schema!r}")


# =============================================================================
# STRUCTURAL COMPATIBILITY - checked at commit time
# =============================================================================

def _external_fields(model: Type[BaseModel]) -> Dict[str, FieldInfo]:
    return {info.alias or name: info for name, info in model.model_fields.items()}


def _is_model(tp: Any) -> bool:
    return isinstance(tp, type) and issubclass(tp, BaseModel)


def _is_union(tp: Any) -> bool:
    origin = get_origin(tp)
    return origin is Union or origin is types.UnionType


def _strip(tp: Any) -> Any:
    while get_origin(tp) is Annotated:
        tp = get_args(tp)[0]
    return tp


def _type_name(tp: Any) -> str:
    if isinstance(tp, type) and not get_args(tp):
        return tp.__name__
    return repr(tp).replace("typing.", "")


def check_compatibility(producer: Contract, consumer: Contract) -> List[str]:
    """
    Check that every value satisfying `producer` can be fed to `consumer`.

    Args:
        producer: Output contract of the upstream stage (or workflow input)
        consumer: Input contract of the downstream stage (or workflow output)

    Returns:
        Human-readable problems; empty when compatible
    """
    produced = producer.fields
    expected = consumer.fields

    if producer.keyed and set(produced) != set(expected):
        return [
            f"{consumer.name} must declare exactly the fan-in keys "
            f"{sorted(produced)}, but declares {sorted(expected)}"
        ]

    problems = _field_problems(produced, expected, consumer.closed, consumer.name, ())
    if consumer.closed and not producer.closed:
        problems.append(
            f"{consumer.name} is closed but {producer.name} is open and may pass "
            f"undeclared fields through"
        )
    return problems


def _field_problems(
    produced: Dict[str, FieldInfo],
    expected: Dict[str, FieldInfo],
    closed: bool,
    consumer_name: str,
    prefix: Tuple[str, ...],
) -> List[str]:
    problems = []
    for key, info in expected.items():
        location = ".".join(prefix + (key,))
        if key not in produced:
            if info.is_required():
                problems.append(f"field {location!r} required by {consumer_name} is never produced")
            continue
        problem = _type_problem(produced[key].annotation, info.annotation, prefix + (key,))
        if problem:
            problems.append(f"field {location!r}: {problem}")

    if closed:
        unexpected = sorted(set(produced) - set(expected))
        if unexpected:
            location = ".".join(prefix) or consumer_name
            problems.append(f"{location} is closed but would receive fields {unexpected}")
    return problems


def _type_problem(produced: Any, expected: Any, path: Tuple[str, ...]) -> Optional[str]:
    produced = _strip(produced)
    expected = _strip(expected)

    if expected is Any or produced is Any or produced == expected:
        return None

    if _is_union(produced):
        for option in get_args(produced):
            problem = _type_problem(option, expected, path)
            if problem:
                return f"{_type_name(produced)} may not fit {_type_name(expected)} ({problem})"
        return None

    if _is_union(expected):
        for option in get_args(expected):
            if _type_problem(produced, option, path) is None:
                return None
        return f"{_type_name(produced)} is not assignable to {_type_name(expected)}"

    if get_origin(produced) is Literal:
        values = get_args(produced)
        if get_origin(expected) is Literal:
            outside = [v for v in values if v not in get_args(expected)]
            if outside:
                return f"values {outside} are outside {_type_name(expected)}"
            return None
        for v in values:
            if _type_problem(type(v), expected, path):
                return f"{_type_name(produced)} is not assignable to {_type_name(expected)}"
        return None

    if get_origin(expected) is Literal:
        return f"{_type_name(produced)} is wider than {_type_name(expected)}"

    if _is_model(produced) and _is_model(expected):
        closed = expected.model_config.get("extra") == "forbid"
        problems = _field_problems(
            _external_fields(produced),
            _external_fields(expected),
            closed,
            expected.__name__,
            path,
        )
        return "; ".join(problems) or None

    if expected is float and produced is int:
        return None

    p_origin, e_origin = get_origin(produced), get_origin(expected)
    if p_origin is not None or e_origin is not None:
        p_base = p_origin or produced
        e_base = e_origin or expected
        if not (isinstance(p_base, type) and isinstance(e_base, type) and issubclass(p_base, e_base)):
            return f"{_type_name(produced)} is not assignable to {_type_name(expected)}"
        p_args = [a for a in get_args(produced) if a is not Ellipsis]
        e_args = [a for a in get_args(expected) if a is not Ellipsis]
        for p_arg, e_arg in zip(p_args, e_args):
            problem = _type_problem(p_arg, e_arg, path)
            if problem:
                return problem
        return None

    if isinstance(produced, type) and isinstance(expected, type):
        if issubclass(produced, expected):
            return None

    return f"{_type_name(produced)} is not assignable to {_type_name(expected)}"
