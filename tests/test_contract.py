import typing

import pytest
from storage_interfaces import (
    MISSING,
    IAuditLog,
    IBroken,
    IDataStorage,
    IDefaults,
    IVarArgs,
    IWithProperty,
    NotAnInterface,
)

from zorro.contract import describe_contract, is_interface, type_name
from zorro.errors import ContractError, ExitCode


def test_protocol_methods_in_declaration_order():
    contract = describe_contract(IDataStorage)
    assert contract.name == "IDataStorage"
    assert [m.name for m in contract.methods] == [
        "get_count", "get_name", "add_user", "get_raw", "last_seen", "get_ratio", "is_admin",
    ]
    assert all(m.declaring_type_name == "IDataStorage" for m in contract.methods)


def test_canonical_signature_lists_typed_parameters():
    contract = describe_contract(IDataStorage)
    by_name = {m.name: m for m in contract.methods}
    assert by_name["get_count"].canonical_signature == "IDataStorage.get_count()"
    assert by_name["add_user"].canonical_signature == "IDataStorage.add_user(int user_id, str name)"
    assert by_name["add_user"].is_void
    assert by_name["last_seen"].return_type_name == "datetime"


def test_abc_contract_includes_inherited_abstract_methods_only():
    contract = describe_contract(IAuditLog)
    sigs = [m.canonical_signature for m in contract.methods]
    assert sigs == ["IReportStore.total()", "IAuditLog.count_events(str kind)"]


def test_abstract_property_is_not_a_contract_method():
    contract = describe_contract(IWithProperty)
    assert [m.name for m in contract.methods] == ["count"]


@pytest.mark.parametrize("obj", [NotAnInterface, NotAnInterface(), len, "IDataStorage"])
def test_non_interfaces_rejected(obj):
    assert not is_interface(obj)
    with pytest.raises(ContractError, match="Only interfaces allowed") as ei:
        describe_contract(obj)
    assert ei.value.exit_code == ExitCode.CONFIG_INVALID
    assert ei.value.problem.code == "ZORRO_NOT_AN_INTERFACE"


def test_variadic_parameters_rejected():
    with pytest.raises(ContractError, match="plain positional parameter"):
        describe_contract(IVarArgs)


def test_unannotated_members_default_to_any():
    class IUntyped(typing.Protocol):
        def fetch(self, key): ...

    (m,) = describe_contract(IUntyped).methods
    assert m.canonical_signature == "IUntyped.fetch(Any key)"
    assert m.return_type is typing.Any


def test_type_name_rendering():
    assert type_name(int) == "int"
    assert type_name(None) == "None"
    assert type_name(typing.Dict[str, int]) == "Dict[str, int]"
    assert type_name(typing.List[str]) == "List[str]"


def test_class_name_with_space_is_kept_verbatim():
    (m,) = describe_contract(IBroken).methods
    assert m.canonical_signature == "IBroken.lookup(Bad Name key)"


def test_parameter_defaults_are_captured_but_not_part_of_the_file_name():
    find, label = describe_contract(IDefaults).methods
    assert find.canonical_signature == "IDefaults.find(int user_id)"
    assert find.parameters[0].default == 0
    assert label.parameters[0].default is MISSING
    assert not describe_contract(IDataStorage).methods[1].parameters[0].has_default
