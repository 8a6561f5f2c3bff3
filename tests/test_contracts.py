"""Tests for Contract validation and build-time compatibility."""

import math
from typing import Any, List, Literal, Optional

import pytest
from pydantic import BaseModel, Field

from stepflow.core.contracts import Contract, as_contract, check_compatibility


class Article(BaseModel):
    content: str
    type: Literal["article", "blog", "social"] = "article"


class Scored(BaseModel):
    score: float


class TestValidate:
    """Tests for Contract.validate()."""

    def test_valid_value_is_normalized_with_defaults(self):
        result = Contract(Article).validate({"content": "hello"})
        assert result.ok
        assert result.value == {"content": "hello", "type": "article"}
        assert isinstance(result.model, Article)

    def test_missing_required_field(self):
        result = Contract(Article).validate({})
        assert not result.ok
        assert result.value is None
        assert [v.path for v in result.violations] == [("content",)]

    def test_wrong_primitive_type(self):
        result = Contract(Article).validate({"content": 5})
        assert not result.ok
        assert result.violations[0].path == ("content",)

    def test_value_outside_enumeration(self):
        result = Contract(Article).validate({"content": "x", "type": "poem"})
        assert not result.ok
        assert result.violations[0].path == ("type",)

    @pytest.mark.parametrize("bad", [math.inf, -math.inf, math.nan])
    def test_non_finite_number_rejected(self, bad):
        result = Contract(Scored).validate({"score": bad})
        assert not result.ok

    def test_non_finite_number_in_carried_field_rejected(self):
        result = Contract(Article).validate({"content": "x", "ratio": math.nan})
        assert not result.ok
        assert result.violations[0].path == ("ratio",)

    def test_open_contract_carries_unknown_fields(self):
        result = Contract(Article).validate({"content": "x", "author": "me"})
        assert result.ok
        assert result.value["author"] == "me"

    def test_closed_contract_rejects_unknown_fields(self):
        result = Contract(Article, closed=True).validate({"content": "x", "author": "me"})
        assert not result.ok
        assert result.violations[0].path == ("author",)

    def test_model_instance_accepted(self):
        result = Contract(Article).validate(Article(content="x", type="blog"))
        assert result.ok
        assert result.value == {"content": "x", "type": "blog"}

    @pytest.mark.parametrize("value", ["text", None, 42, ["content"]])
    def test_never_raises_on_non_mapping(self, value):
        result = Contract(Article).validate(value)
        assert not result.ok
        assert result.violations

    @pytest.mark.parametrize("value", ["5", True, 5.5])
    def test_int_field_not_coerced(self, value):
        count = Contract.define("Count", n=(int, ...))
        result = count.validate({"n": value})
        assert not result.ok
        assert result.violations[0].path == ("n",)

    def test_numeric_string_not_coerced_to_float(self):
        price = Contract.define("Price", x=(float, ...))
        assert not price.validate({"x": "3.5"}).ok
        assert price.validate({"x": 3}).value == {"x": 3.0}

    def test_nested_model_fields_are_strict(self):
        class Inner(BaseModel):
            n: int

        outer = Contract.define("Outer", inner=(Inner, ...))
        assert not outer.validate({"inner": {"n": "5"}}).ok
        assert outer.validate({"inner": {"n": 5}}).value == {"inner": {"n": 5}}

    def test_lax_mode_is_opt_in(self):
        lax = Contract.define("Count", n=(int, ...), strict=False)
        assert lax.validate({"n": "5"}).value == {"n": 5}

    def test_aliases_key_the_normalized_value(self):
        class Keyed(BaseModel):
            weather: str = Field(..., alias="fetch-weather")

        result = Contract(Keyed).validate({"fetch-weather": "sunny"})
        assert result.ok
        assert result.value == {"fetch-weather": "sunny"}


class TestContract:
    """Tests for Contract construction helpers."""

    def test_define_builds_contract(self):
        contract = Contract.define("Query", text=(str, ...), limit=(int, 10))
        assert contract.name == "Query"
        assert contract.required_fields == ["text"]
        assert contract.validate({"text": "a"}).value == {"text": "a", "limit": 10}

    def test_contract_is_immutable(self):
        contract = Contract(Article)
        with pytest.raises(AttributeError):
            contract.name = "Other"

    def test_forbid_config_closes_contract(self):
        class Closed(BaseModel, extra="forbid"):
            a: int

        assert Contract(Closed).closed

    def test_fan_in_contract_is_keyed_by_child_id(self):
        fan_in = Contract.fan_in("F", {"fetch-weather": Contract(Scored), "b": Contract(Article)})
        assert fan_in.keyed
        assert list(fan_in.fields) == ["fetch-weather", "b"]
        assert fan_in.required_fields == ["fetch-weather", "b"]

    def test_as_contract(self):
        contract = Contract(Article)
        assert as_contract(contract) is contract
        assert as_contract(Article).name == "Article"
        with pytest.raises(TypeError):
            as_contract({"content": str})

    def test_json_schema(self):
        schema = Contract(Article).json_schema()
        assert "content" in schema["properties"]


class TestCompatibility:
    """Tests for check_compatibility()."""

    def test_identical_contracts(self):
        assert check_compatibility(Contract(Article), Contract(Article)) == []

    def test_missing_required_field(self):
        producer = Contract.define("P", a=(str, ...))
        consumer = Contract.define("C", a=(str, ...), b=(int, ...))
        problems = check_compatibility(producer, consumer)
        assert len(problems) == 1
        assert "'b'" in problems[0]

    def test_missing_optional_field_is_fine(self):
        producer = Contract.define("P", a=(str, ...))
        consumer = Contract.define("C", a=(str, ...), b=(int, 0))
        assert check_compatibility(producer, consumer) == []

    def test_int_widens_to_float(self):
        producer = Contract.define("P", n=(int, ...))
        consumer = Contract.define("C", n=(float, ...))
        assert check_compatibility(producer, consumer) == []
        assert check_compatibility(consumer, producer)

    def test_optional_is_not_assignable_to_required_type(self):
        producer = Contract.define("P", a=(Optional[str], ...))
        consumer = Contract.define("C", a=(str, ...))
        assert check_compatibility(producer, consumer)
        assert check_compatibility(consumer, producer) == []

    def test_literal_subset(self):
        narrow = Contract.define("N", t=(Literal["a"], ...))
        wide = Contract.define("W", t=(Literal["a", "b"], ...))
        text = Contract.define("S", t=(str, ...))
        assert check_compatibility(narrow, wide) == []
        assert check_compatibility(wide, narrow)
        assert check_compatibility(wide, text) == []
        assert check_compatibility(text, wide)

    def test_containers_checked_by_argument(self):
        ints = Contract.define("I", xs=(List[int], ...))
        strs = Contract.define("S", xs=(List[str], ...))
        anys = Contract.define("A", xs=(List[Any], ...))
        assert check_compatibility(ints, strs)
        assert check_compatibility(ints, anys) == []

    def test_nested_models_checked_recursively(self):
        class Inner(BaseModel):
            x: int

        class OtherInner(BaseModel):
            x: int
            y: str

        producer = Contract.define("P", inner=(Inner, ...))
        consumer = Contract.define("C", inner=(OtherInner, ...))
        problems = check_compatibility(producer, consumer)
        assert problems
        assert "inner.y" in problems[0]

    def test_closed_consumer_rejects_extra_fields(self):
        producer = Contract.define("P", a=(str, ...), b=(str, ...))
        consumer = Contract.define("C", a=(str, ...), closed=True)
        problems = check_compatibility(producer, consumer)
        assert problems
        assert "'b'" in problems[0]

    def test_closed_consumer_needs_closed_producer(self):
        consumer = Contract.define("C", a=(str, ...), closed=True)
        open_producer = Contract.define("P", a=(str, ...))
        closed_producer = Contract.define("Q", a=(str, ...), closed=True)

        problems = check_compatibility(open_producer, consumer)
        assert len(problems) == 1
        assert "P is open" in problems[0]
        assert check_compatibility(closed_producer, consumer) == []

    def test_open_consumer_accepts_open_producer(self):
        producer = Contract.define("P", a=(str, ...), b=(str, ...))
        consumer = Contract.define("C", a=(str, ...))
        assert check_compatibility(producer, consumer) == []

    def test_keyed_producer_requires_same_key_set(self):
        fan_in = Contract.fan_in("F", {"a": Contract(Scored), "b": Contract(Scored)})
        partial = Contract.define("C", a=(Any, ...))
        exact = Contract.define("E", a=(Any, ...), b=(Any, ...))
        assert check_compatibility(fan_in, partial)
        assert check_compatibility(fan_in, exact) == []
