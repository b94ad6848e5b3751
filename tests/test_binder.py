"""Tests for finch.binding.binder — collect-all parameter binding."""

from dataclasses import dataclass

import pytest

from finch.auth.claims import Claims
from finch.binding.binder import FailureReason, ParameterBinder
from finch.config import EngineConfig
from finch.declarations import ALL, ParameterSpec
from finch.errors import BindingError
from finch.http.request import Request


@dataclass
class NewItem:
    name: str
    price: float


@pytest.fixture
def binder() -> ParameterBinder:
    return ParameterBinder()


class TestQuery:
    async def test_required_page_missing(self, binder: ParameterBinder) -> None:
        specs = [ParameterSpec.query("page", int, required=True)]
        result = await binder.bind(specs, Request.build("GET", "/items"))

        assert not result.ok
        failure = result.failures[0]
        assert failure.reason is FailureReason.MISSING
        assert result.validations == {"page": "Required query parameter 'page' is missing"}

    async def test_page_not_an_int(self, binder: ParameterBinder) -> None:
        specs = [ParameterSpec.query("page", int, required=True)]
        result = await binder.bind(specs, Request.build("GET", "/items?page=abc"))

        assert result.failures[0].reason is FailureReason.INVALID_TYPE
        assert result.validations == {"page": "Parameter 'page' must be of type int"}

    async def test_page_coerced(self, binder: ParameterBinder) -> None:
        specs = [ParameterSpec.query("page", int, required=True)]
        result = await binder.bind(specs, Request.build("GET", "/items?page=2"))
        assert result.arguments == {"page": 2}

    async def test_blank_value_is_present(self, binder: ParameterBinder) -> None:
        specs = [ParameterSpec.query("page", int)]
        result = await binder.bind(specs, Request.build("GET", "/items?page="))
        assert result.failures[0].reason is FailureReason.INVALID_TYPE

    async def test_optional_uses_declared_default(self, binder: ParameterBinder) -> None:
        specs = [ParameterSpec.query("size", int, default=25)]
        result = await binder.bind(specs, Request.build("GET", "/items"))
        assert result.arguments == {"size": 25}

    async def test_none_is_a_valid_default(self, binder: ParameterBinder) -> None:
        specs = [ParameterSpec.query("q", str, default=None)]
        result = await binder.bind(specs, Request.build("GET", "/items"))
        assert result.arguments == {"q": None}

    @pytest.mark.parametrize(
        ("hint", "expected"),
        [(bool, False), (int, 0), (float, 0.0), (str, ""), (list, [])],
    )
    async def test_optional_without_default_gets_empty_value(
        self, binder: ParameterBinder, hint: type, expected: object
    ) -> None:
        result = await binder.bind([ParameterSpec.query("x", hint)], Request.build("GET", "/"))
        assert result.arguments == {"x": expected}

    async def test_all(self, binder: ParameterBinder) -> None:
        result = await binder.bind([ParameterSpec.query(ALL)], Request.build("GET", "/?a=1&b=2"))
        assert result.arguments == {"query": {"a": "1", "b": "2"}}

    async def test_list_collects_repeated_values(self, binder: ParameterBinder) -> None:
        result = await binder.bind([ParameterSpec.query("tag", list)], Request.build("GET", "/?tag=a&tag=b"))
        assert result.arguments == {"tag": ["a", "b"]}


class TestPathAndHeader:
    async def test_two_captures(self, binder: ParameterBinder) -> None:
        specs = [ParameterSpec.path("a"), ParameterSpec.path("b")]
        request = Request.build("GET", "/x/y")
        result = await binder.bind(specs, request, path_params={"a": "x", "b": "y"})
        assert result.arguments == {"a": "x", "b": "y"}

    async def test_path_coerced(self, binder: ParameterBinder) -> None:
        result = await binder.bind(
            [ParameterSpec.path("id", int)], Request.build("GET", "/items/7"), path_params={"id": "7"}
        )
        assert result.arguments == {"id": 7}

    async def test_path_all(self, binder: ParameterBinder) -> None:
        result = await binder.bind(
            [ParameterSpec.path(ALL)],  # type: ignore[arg-type]
            Request.build("GET", "/x/y"),
            path_params={"a": "x", "b": "y"},
        )
        assert result.arguments == {"path_params": {"a": "x", "b": "y"}}

    async def test_header_case_insensitive(self, binder: ParameterBinder) -> None:
        request = Request.build("GET", "/", headers={"x-tenant-id": "acme"})
        result = await binder.bind([ParameterSpec.header("X-Tenant-ID", required=True)], request)
        assert result.arguments == {"x_tenant_id": "acme"}

    async def test_header_all_lowercased(self, binder: ParameterBinder) -> None:
        request = Request.build("GET", "/", headers={"X-A": "1"})
        result = await binder.bind([ParameterSpec.header(ALL)], request)
        assert result.arguments == {"headers": {"x-a": "1"}}

    async def test_missing_header(self, binder: ParameterBinder) -> None:
        result = await binder.bind([ParameterSpec.header("X-Tenant", required=True)], Request.build("GET", "/"))
        assert result.validations == {"x_tenant": "Required header parameter 'X-Tenant' is missing"}


class TestBody:
    async def test_whole_json_body(self, binder: ParameterBinder) -> None:
        request = Request.build("POST", "/items", json={"name": "pen", "price": 2})
        result = await binder.bind([ParameterSpec.body()], request)
        assert result.arguments == {"body": {"name": "pen", "price": 2}}

    async def test_named_field(self, binder: ParameterBinder) -> None:
        request = Request.build("POST", "/items", json={"name": "pen", "price": "2.5"})
        specs = [ParameterSpec.body("name", str), ParameterSpec.body("price", float)]
        result = await binder.bind(specs, request)
        assert result.arguments == {"name": "pen", "price": 2.5}

    async def test_dataclass_body(self, binder: ParameterBinder) -> None:
        request = Request.build("POST", "/items", json={"name": "pen", "price": 2})
        result = await binder.bind([ParameterSpec.body(type_hint=NewItem, argument="item")], request)
        assert result.arguments == {"item": NewItem("pen", 2.0)}

    async def test_empty_body_is_absent(self, binder: ParameterBinder) -> None:
        result = await binder.bind([ParameterSpec.body()], Request.build("POST", "/items"))
        assert result.validations == {"body": "Required body parameter '*' is missing"}

    async def test_optional_body_absent(self, binder: ParameterBinder) -> None:
        result = await binder.bind([ParameterSpec.body(required=False)], Request.build("POST", "/items"))
        assert result.arguments == {"body": {}}

    async def test_json_without_content_type(self, binder: ParameterBinder) -> None:
        request = Request.build("POST", "/items", body=b'{"a": 1}')
        result = await binder.bind([ParameterSpec.body()], request)
        assert result.arguments == {"body": {"a": 1}}

    async def test_vendor_json(self, binder: ParameterBinder) -> None:
        request = Request.build(
            "POST", "/items", body=b'{"a": 1}', headers={"content-type": "application/vnd.api+json"}
        )
        assert (await binder.bind([ParameterSpec.body()], request)).arguments == {"body": {"a": 1}}

    async def test_malformed_json_fails_every_body_param(self, binder: ParameterBinder) -> None:
        request = Request.build(
            "POST", "/items", body=b"{not json", headers={"content-type": "application/json"}
        )
        specs = [ParameterSpec.body("name", str), ParameterSpec.body("price", float)]
        result = await binder.bind(specs, request)

        assert {f.reason for f in result.failures} == {FailureReason.MALFORMED_BODY}
        assert set(result.validations) == {"name", "price"}

    async def test_form_body(self, binder: ParameterBinder) -> None:
        request = Request.build(
            "POST",
            "/items",
            body=b"name=pen&price=3",
            headers={"content-type": "application/x-www-form-urlencoded"},
        )
        specs = [ParameterSpec.body("name", str), ParameterSpec.body("price", int)]
        result = await binder.bind(specs, request)
        assert result.arguments == {"name": "pen", "price": 3}

    async def test_unsupported_content_type(self, binder: ParameterBinder) -> None:
        request = Request.build("POST", "/items", body=b"<x/>", headers={"content-type": "application/xml"})
        result = await binder.bind([ParameterSpec.body()], request)
        assert result.failures[0].reason is FailureReason.MALFORMED_BODY

    async def test_field_of_non_object_body(self, binder: ParameterBinder) -> None:
        request = Request.build("POST", "/items", json=[1, 2])
        result = await binder.bind([ParameterSpec.body("name", str)], request)
        assert result.failures[0].reason is FailureReason.MALFORMED_BODY

    async def test_body_too_large(self) -> None:
        binder = ParameterBinder(EngineConfig(max_content_length=8))
        request = Request.build("POST", "/items", json={"name": "a long name"})
        result = await binder.bind([ParameterSpec.body()], request)
        assert "exceeds 8 bytes" in result.validations["body"]

    async def test_null_field_is_absent(self, binder: ParameterBinder) -> None:
        request = Request.build("POST", "/items", json={"note": None})
        result = await binder.bind([ParameterSpec.body("note", str, required=False)], request)
        assert result.arguments == {"note": ""}

    async def test_null_body_is_missing(self, binder: ParameterBinder) -> None:
        request = Request.build(
            "POST", "/items", body=b"null", headers={"content-type": "application/json"}
        )
        result = await binder.bind([ParameterSpec.body()], request)

        assert result.failures[0].reason is FailureReason.MISSING
        assert result.validations == {"body": "Required body parameter '*' is missing"}

    async def test_null_body_optional(self, binder: ParameterBinder) -> None:
        request = Request.build("POST", "/items", body=b" null ")
        result = await binder.bind([ParameterSpec.body(required=False)], request)
        assert result.arguments == {"body": {}}



class TestContext:
    async def test_named_and_all(self, binder: ParameterBinder) -> None:
        claims = Claims({"sub": "u1"})
        context = {"claims": claims, "request_id": "r1"}
        specs = [ParameterSpec.context("claims"), ParameterSpec.context(ALL)]
        result = await binder.bind(specs, Request.build("GET", "/"), context=context)
        assert result.arguments["claims"] is claims
        assert result.arguments["context"] == context


class TestCollectAll:
    async def test_every_failure_reported(self, binder: ParameterBinder) -> None:
        specs = [
            ParameterSpec.query("page", int, required=True),
            ParameterSpec.query("size", int),
            ParameterSpec.header("X-Tenant", required=True),
            ParameterSpec.query("q", str),
        ]
        result = await binder.bind(specs, Request.build("GET", "/?size=big&q=pens"))

        assert set(result.validations) == {"page", "size", "x_tenant"}
        assert result.arguments == {"q": "pens"}

    async def test_raise_for_failures(self, binder: ParameterBinder) -> None:
        result = await binder.bind([ParameterSpec.query("page", int, required=True)], Request.build("GET", "/"))
        with pytest.raises(BindingError) as exc_info:
            result.raise_for_failures()
        assert exc_info.value.validations == result.validations
