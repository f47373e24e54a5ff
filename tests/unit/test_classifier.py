"""Unit tests for governability classification and parameter roles."""

import pytest

from movegov.analyzers.classifier import (
    assign_role,
    base_type_name,
    classify,
    classify_functions,
    compute_signals,
    find_function_body,
    normalize_type_key,
    strip_reference,
)
from movegov.analyzers.scanner import scan_contract
from movegov.config import CatalogConfig, ClassifierConfig
from movegov.models.contract import FunctionInfo, ParameterInfo
from movegov.models.governance import ClassificationPolicy, ParameterRole

STRICT = ClassificationPolicy.STRICT
BROAD = ClassificationPolicy.BROAD


def make_function(
    name: str,
    params: list[tuple[str, str]],
    body: str | None = "state.value = v;",
    is_entry: bool = True,
) -> FunctionInfo:
    """Build a FunctionInfo from (name, type) pairs."""
    return FunctionInfo(
        name=name,
        parameters=[ParameterInfo(n, t) for n, t in params],
        is_entry=is_entry,
        body=body,
    )


class TestComputeSignals:
    """Tests for the individual classification signals."""

    def test_keyword_and_mutation(self) -> None:
        """Test a setter that assigns a field."""
        signals = compute_signals(make_function("set_fee", [("state", "&mut State")]))

        assert signals.has_keyword
        assert signals.has_state_mutation
        assert not signals.requires_capability
        assert signals.parameter_count == 1

    def test_capability_by_type(self) -> None:
        """Test a ``Cap`` typed parameter is a capability guard."""
        function = make_function("set_fee", [("cap", "&AdminCap"), ("state", "&mut State")])

        assert compute_signals(function).requires_capability

    def test_capability_by_name(self) -> None:
        """Test an ``admin`` named parameter is a capability guard."""
        function = make_function("set_fee", [("admin", "address")])

        assert compute_signals(function).requires_capability

    def test_governance_context(self) -> None:
        """Test a governance-typed parameter sets the governance signal."""
        function = make_function("rotate", [("system", "&mut GovernanceSystem")])

        assert compute_signals(function).has_governance_context

    def test_mutating_call(self) -> None:
        """Test a known framework mutation call."""
        function = make_function(
            "register_item", [("r", "&mut Registry")], body="table::add(&mut r.items, 1, 2)"
        )

        signals = compute_signals(function)

        assert signals.has_mutating_call
        assert signals.has_state_mutation

    def test_empty_body_has_no_mutation(self) -> None:
        """Test an empty body observes no mutation."""
        signals = compute_signals(make_function("set_fee", [], body=""))

        assert not signals.has_state_mutation

    def test_mut_borrow_alone_is_not_mutation(self) -> None:
        """Test a bare ``&mut`` argument to a local helper is not a write."""
        signals = compute_signals(make_function("set_fee", [], body="bump(&mut counter)"))

        assert not signals.has_state_mutation

    def test_missing_body_counts_as_mutation(self) -> None:
        """Test descriptor functions (no body, no source) are not penalised."""
        signals = compute_signals(make_function("set_fee", [], body=None))

        assert signals.has_state_mutation
        assert not signals.has_mutating_call

    def test_body_from_source(self) -> None:
        """Test the body is looked up in the source when absent."""
        source = "public entry fun set_fee(s: &mut S, f: u64) { s.fee = f; }"
        function = make_function("set_fee", [("s", "&mut S"), ("f", "u64")], body=None)

        assert compute_signals(function, source).has_state_mutation

    def test_policy_vocabulary(self) -> None:
        """Test ``enable`` is only a keyword under the broad vocabulary."""
        function = make_function("enable_trading", [])

        assert not compute_signals(function, policy=STRICT).has_keyword
        assert compute_signals(function, policy=BROAD).has_keyword


class TestStrictPolicy:
    """Tests for the strict policy."""

    def test_simple_setter(self) -> None:
        """Test an entry setter with a value parameter."""
        function = make_function("set_value", [("app", "&mut AppObject"), ("v", "u64")])

        assert classify(function, policy=STRICT) is True

    def test_requires_entry(self) -> None:
        """Test strict rejects non-entry functions."""
        function = make_function("set_value", [("app", "&mut AppObject")], is_entry=False)

        assert classify(function, policy=STRICT) is False

    def test_rejects_capability_guard(self) -> None:
        """Test strict skips functions already gated by a capability."""
        function = make_function("set_value", [("_cap", "&AdminCap"), ("app", "&mut AppObject")])

        assert classify(function, policy=STRICT) is False

    def test_rejects_getters(self) -> None:
        """Test getter prefixes are never governable."""
        function = make_function("get_value", [("app", "&AppObject")])

        assert classify(function, policy=STRICT) is False

    def test_parameter_limit(self) -> None:
        """Test the configured parameter ceiling."""
        params = [(f"p{i}", "u64") for i in range(6)]
        function = make_function("set_many", params)

        assert classify(function, policy=STRICT) is False
        assert classify(function, policy=STRICT, config=ClassifierConfig(max_parameters=6))

    def test_mutation_required(self) -> None:
        """Test a keyword alone does not qualify."""
        function = make_function("set_value", [], body="")

        assert classify(function, policy=STRICT) is False

    def test_mutating_call_without_keyword(self) -> None:
        """Test a framework mutation call qualifies without a keyword."""
        function = make_function(
            "payout", [("r", "address")], body="transfer::public_transfer(coin, r);"
        )

        assert classify(function, policy=STRICT) is True

    def test_is_pure(self) -> None:
        """Test repeated classification gives the same answer."""
        function = make_function("set_value", [("app", "&mut AppObject")])

        assert [classify(function) for _ in range(3)] == [True, True, True]


class TestBroadPolicy:
    """Tests for the broad policy."""

    def test_superset_of_strict(self) -> None:
        """Test everything strict accepts, broad accepts."""
        function = make_function("set_value", [("app", "&mut AppObject")])

        assert classify(function, policy=BROAD) is True

    def test_accepts_capability_guarded_keyword(self) -> None:
        """Test broad accepts a capability-guarded setter."""
        function = make_function("update_price", [("_cap", "&AdminCap"), ("s", "&mut Store")])

        assert classify(function, policy=STRICT) is False
        assert classify(function, policy=BROAD) is True

    def test_governance_context(self) -> None:
        """Test a governance parameter qualifies a non-keyword function."""
        function = make_function(
            "rotate", [("gov", "&mut GovernanceSystem")], is_entry=False
        )

        assert classify(function, policy=BROAD) is True

    def test_entry_with_mutation(self) -> None:
        """Test an entry function with mutation and no keyword."""
        function = make_function("donate", [("c", "&mut Campaign")])

        assert classify(function, policy=STRICT) is False
        assert classify(function, policy=BROAD) is True

    def test_rejects_getters(self) -> None:
        """Test getters stay excluded under broad."""
        function = make_function("is_paused", [("gov", "&GovernanceSystem")])

        assert classify(function, policy=BROAD) is False

    def test_rejects_non_entry_without_signals(self) -> None:
        """Test a plain helper with no keyword and no governance context."""
        function = make_function("compute", [("x", "u64")], is_entry=False)

        assert classify(function, policy=BROAD) is False


class TestClassifyFunctions:
    """Tests for classifying a whole scan."""

    def test_counter_contract(self, counter_source: str) -> None:
        """Test the counter fixture under strict."""
        facts = scan_contract(counter_source)

        governable = classify_functions(facts, STRICT)

        assert [f.name for f in governable] == ["increment", "set_value"]
        assert facts.find_function("get_value").governance_candidate is False
        assert facts.find_function("increment").governance_candidate is True

    def test_admin_cap_contract(self, admin_cap_source: str) -> None:
        """Test capability-guarded functions flip between policies."""
        assert classify_functions(scan_contract(admin_cap_source), STRICT) == []

        broad = classify_functions(scan_contract(admin_cap_source), BROAD)

        assert [f.name for f in broad] == ["update_price", "toggle_pause"]

    def test_getters_only(self, getters_only_source: str) -> None:
        """Test a contract with no governable function."""
        facts = scan_contract(getters_only_source)

        assert classify_functions(facts, BROAD) == []


class TestFindFunctionBody:
    """Tests for body lookup by name."""

    def test_finds_body(self) -> None:
        """Test the body of a named function."""
        source = "fun a() { x = 1; }\npublic fun b(v: u64): u64 { v }"

        assert find_function_body(source, "b") == " v "

    def test_missing_function(self) -> None:
        """Test an unknown name."""
        assert find_function_body("fun a() {}", "zzz") is None


class TestParameterRoles:
    """Tests for parameter role assignment."""

    @pytest.mark.parametrize(
        ("type_text", "expected"),
        [
            ("&mut TxContext", ParameterRole.CONTEXT),
            ("&mut tx_context::TxContext", ParameterRole.CONTEXT),
            ("&Clock", ParameterRole.CLOCK),
            ("&mut GovernanceSystem", ParameterRole.GOVERNANCE_SYSTEM),
            ("&mut Counter", ParameterRole.MAIN_STATE),
            ("&mut counter::Counter", ParameterRole.MAIN_STATE),
            ("&AdminCap", ParameterRole.AUXILIARY_OBJECT),
            ("&mut Registry", ParameterRole.AUXILIARY_OBJECT),
            ("TreasuryCap<SUI>", ParameterRole.AUXILIARY_OBJECT),
            ("u64", ParameterRole.VALUE),
            ("vector<u8>", ParameterRole.VALUE),
            ("address", ParameterRole.VALUE),
        ],
    )
    def test_roles(self, type_text: str, expected: ParameterRole) -> None:
        """Test the role for each kind of parameter type."""
        assert assign_role(ParameterInfo("p", type_text), "Counter") is expected

    def test_custom_governance_type(self) -> None:
        """Test governance system type names come from config."""
        config = CatalogConfig(governance_system_types=("Dao",))

        role = assign_role(ParameterInfo("dao", "&mut Dao"), "Counter", config)

        assert role is ParameterRole.GOVERNANCE_SYSTEM

    def test_reserved_roles(self) -> None:
        """Test which roles are stripped from the variant payload."""
        assert ParameterRole.CONTEXT.is_reserved
        assert ParameterRole.MAIN_STATE.is_reserved
        assert not ParameterRole.AUXILIARY_OBJECT.is_reserved
        assert not ParameterRole.VALUE.is_reserved


class TestTypeHelpers:
    """Tests for type text helpers."""

    def test_strip_reference(self) -> None:
        """Test reference markers are removed."""
        assert strip_reference("&mut Foo") == "Foo"
        assert strip_reference("& Foo") == "Foo"
        assert strip_reference("Foo") == "Foo"

    def test_base_type_name(self) -> None:
        """Test generics and module paths are removed."""
        assert base_type_name("&mut 0x2::coin::Coin<SUI>") == "Coin"
        assert base_type_name("Table<ID, Item>") == "Table"

    def test_normalize_type_key(self) -> None:
        """Test shared and mutable references share a key."""
        assert normalize_type_key("&AdminCap") == normalize_type_key("&mut AdminCap")
        assert normalize_type_key("&mut Table<ID, Item>") == "table<id,item>"
