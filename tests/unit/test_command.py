import sys
import threading
from typing import Annotated

import pytest

from cmdletdoc import (
    ALL_PARAMETER_SETS,
    Command,
    ComputedParameter,
    DeclaredParameter,
    InstantiationError,
    MalformedOutputTypeError,
    MissingDeclarationError,
    NullInputError,
    ParameterAttribute,
    RuntimeDefinedParameter,
    RuntimeDefinedParameterDictionary,
    UnresolvableMemberError,
    cmdlet,
    output_type,
)

Zebra = type("Type", (), {"__module__": "Zebra"})
Alpha = type("Type", (), {"__module__": "Alpha"})


@cmdlet("Get", "Nothing")
class GetNothing:
    pass


@cmdlet("Get", "Item")
class GetItem:
    path: Annotated[str, ParameterAttribute(parameter_set_name="A", mandatory=True)]
    force: Annotated[bool, ParameterAttribute()] = False
    not_a_parameter: int = 0


class _Counter:
    def __init__(self):
        self.calls = 0
        self.lock = threading.Lock()

    def __call__(self, command_type):
        with self.lock:
            self.calls += 1
        return command_type()


@cmdlet("New", "Thing")
class NewThing:
    name: Annotated[str, ParameterAttribute()]

    class Bag:
        size: Annotated[int, ParameterAttribute(parameter_set_name="Sized")]
        ignored: str = ""

    class _PrivateBag:
        label: Annotated[str, ParameterAttribute()]

    def get_dynamic_parameters(self):
        parameters = RuntimeDefinedParameterDictionary()
        parameters.add(
            RuntimeDefinedParameter(name="Kind", parameter_type=str, attributes=[ParameterAttribute()])
        )
        parameters.add(RuntimeDefinedParameter(name="Hidden", parameter_type=str, attributes=[]))
        return parameters


def test_name_verb_noun():
    command = Command(GetItem)
    assert command.verb == "Get"
    assert command.noun == "Item"
    assert command.name == "Get-Item"
    assert command.command_type is GetItem


def test_null_type_raises_null_input():
    with pytest.raises(NullInputError):
        Command(None)


def test_undeclared_type_raises_missing_declaration():
    class Plain:
        pass

    with pytest.raises(MissingDeclarationError):
        Command(Plain)


def test_declaration_is_not_inherited():
    class Derived(GetItem):
        pass

    with pytest.raises(MissingDeclarationError):
        Command(Derived)


def test_no_output_types():
    assert Command(GetNothing).output_types == ()


def test_output_types_deduplicated_and_sorted():
    @cmdlet("Get", "Zoo")
    @output_type(Zebra, Alpha)
    @output_type(Zebra)
    class GetZoo:
        pass

    assert Command(GetZoo).output_types == (Alpha, Zebra)


def test_output_types_resolve_names():
    @cmdlet("Get", "Names")
    @output_type("collections.OrderedDict", "str")
    class GetNames:
        pass

    import collections

    assert Command(GetNames).output_types == (str, collections.OrderedDict)


def test_empty_output_type_declaration_names_command():
    @cmdlet("Get", "Broken")
    @output_type()
    class GetBroken:
        pass

    command = Command(GetBroken)
    with pytest.raises(MalformedOutputTypeError, match="GetBroken"):
        _ = command.output_types


def test_unresolved_output_type_names_reference():
    @cmdlet("Get", "Missing")
    @output_type("no_such_module.NoSuchType")
    class GetMissing:
        pass

    with pytest.raises(MalformedOutputTypeError, match="no_such_module.NoSuchType"):
        _ = Command(GetMissing).output_types


@pytest.mark.parametrize("reference", ["", ".Thing", "collections:"])
def test_malformed_output_type_names_are_unresolved(reference):
    @cmdlet("Get", "Relative")
    @output_type(reference)
    class GetRelative:
        pass

    with pytest.raises(MalformedOutputTypeError, match="Could not find type"):
        _ = Command(GetRelative).output_types


def test_parameterless_command_has_only_all_sets():
    command = Command(GetNothing)
    assert command.parameters == ()
    assert command.parameter_set_names == (ALL_PARAMETER_SETS,)
    assert command.get_parameters(ALL_PARAMETER_SETS) == ()


def test_get_parameters_by_set():
    command = Command(GetItem)
    names = [p.name for p in command.parameters]
    assert names == ["path", "force"]
    assert [p.name for p in command.get_parameters("A")] == ["path", "force"]
    assert [p.name for p in command.get_parameters("B")] == ["force"]
    assert [p.name for p in command.get_parameters(ALL_PARAMETER_SETS)] == ["path", "force"]
    assert set(command.parameter_set_names) == {"A", ALL_PARAMETER_SETS}


def test_declared_nested_and_computed_parameters_in_order():
    command = Command(NewThing)
    parameters = command.parameters

    assert [p.name for p in parameters] == ["name", "size", "label", "Kind"]
    assert all(isinstance(p, DeclaredParameter) for p in parameters[:3])
    assert isinstance(parameters[3], ComputedParameter)
    assert parameters[1].owner_type is NewThing.Bag
    assert parameters[2].owner_type is NewThing._PrivateBag
    assert "Sized" in command.parameter_set_names


def test_nested_bags_ignored_without_dynamic_capability():
    @cmdlet("Get", "Static")
    class GetStatic:
        name: Annotated[str, ParameterAttribute()]

        class Bag:
            size: Annotated[int, ParameterAttribute()]

    assert [p.name for p in Command(GetStatic).parameters] == ["name"]


@pytest.mark.parametrize("provided", [None, {"Kind": "not a runtime dictionary"}, []])
def test_other_provider_results_contribute_nothing(provided):
    @cmdlet("Get", "Odd")
    class GetOdd:
        name: Annotated[str, ParameterAttribute()]

        def get_dynamic_parameters(self):
            return provided

    assert [p.name for p in Command(GetOdd).parameters] == ["name"]


def test_instance_factory_can_be_stubbed():
    class Stub:
        def get_dynamic_parameters(self):
            parameters = RuntimeDefinedParameterDictionary()
            parameters.add(
                RuntimeDefinedParameter(name="Stubbed", parameter_type=int, attributes=[ParameterAttribute()])
            )
            return parameters

    @cmdlet("Get", "Unbuildable")
    class GetUnbuildable:
        def __init__(self, required):
            self.required = required

        def get_dynamic_parameters(self):  # pragma: no cover - replaced by the stub
            raise AssertionError

    command = Command(GetUnbuildable, instance_factory=lambda command_type: Stub())
    assert [p.name for p in command.parameters] == ["Stubbed"]


def test_instantiation_failure_is_fatal():
    @cmdlet("Get", "Unbuildable")
    class GetUnbuildable:
        name: Annotated[str, ParameterAttribute()]

        def __init__(self, required):
            self.required = required

        def get_dynamic_parameters(self):  # pragma: no cover
            return None

    command = Command(GetUnbuildable)
    with pytest.raises(InstantiationError, match="GetUnbuildable"):
        _ = command.parameters


def test_provider_failure_is_fatal_and_not_retried():
    counter = _Counter()

    @cmdlet("Get", "Failing")
    class GetFailing:
        def get_dynamic_parameters(self):
            raise RuntimeError("boom")

    command = Command(GetFailing, instance_factory=counter)
    with pytest.raises(InstantiationError, match="boom"):
        _ = command.parameters
    with pytest.raises(InstantiationError):
        _ = command.parameters
    assert counter.calls == 1


def test_unresolvable_member_aborts_parameters():
    @cmdlet("Get", "Forward")
    class GetForward:
        good: Annotated[str, ParameterAttribute()]
        bad: Annotated["DefinitelyMissingType", ParameterAttribute()]

    with pytest.raises(UnresolvableMemberError, match="bad"):
        _ = Command(GetForward).parameters


CHECKING_ONLY_SOURCE = """
from __future__ import annotations

from typing import TYPE_CHECKING, Annotated

from cmdletdoc import AliasAttribute, ParameterAttribute, cmdlet

if TYPE_CHECKING:
    from decimal import Decimal


@cmdlet("Get", "Price")
class GetPrice:
    name: Annotated[str, ParameterAttribute()]
    cache: Decimal | None = None
    rounding: Annotated[Decimal, AliasAttribute("r")] = None

    @property
    def total(self) -> Decimal:
        raise NotImplementedError


@cmdlet("Set", "Price")
class SetPrice:
    amount: Annotated[Decimal, ParameterAttribute()]
"""


@pytest.fixture
def checking_only_module(tmp_path, monkeypatch):
    name = "cmdletdoc_checking_only"
    (tmp_path / f"{name}.py").write_text(CHECKING_ONLY_SOURCE)
    monkeypatch.syspath_prepend(str(tmp_path))
    sys.modules.pop(name, None)
    yield __import__(name)
    sys.modules.pop(name, None)


def test_type_checking_only_annotations_on_non_parameters_are_skipped(checking_only_module):
    command = Command(checking_only_module.GetPrice)
    assert [p.name for p in command.parameters] == ["name"]
    assert command.parameters[0].parameter_type is str


def test_type_checking_only_annotation_on_parameter_is_unresolvable(checking_only_module):
    with pytest.raises(UnresolvableMemberError, match="amount"):
        _ = Command(checking_only_module.SetPrice).parameters


def test_runtime_parameter_without_type_is_unresolvable():
    @cmdlet("Get", "Untyped")
    class GetUntyped:
        def get_dynamic_parameters(self):
            parameters = RuntimeDefinedParameterDictionary()
            parameters.add(RuntimeDefinedParameter(name="Untyped", attributes=[ParameterAttribute()]))
            return parameters

    with pytest.raises(UnresolvableMemberError, match="Untyped"):
        _ = Command(GetUntyped).parameters


def test_lazy_results_are_identity_stable():
    command = Command(GetItem)
    assert command.parameters is command.parameters
    assert command.output_types is command.output_types


def test_concurrent_access_instantiates_once():
    counter = _Counter()
    command = Command(NewThing, instance_factory=counter)
    barrier = threading.Barrier(8)
    results = []

    def read():
        barrier.wait()
        results.append(command.parameters)

    threads = [threading.Thread(target=read) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert counter.calls == 1
    assert len(results) == 8
    assert all(result is results[0] for result in results)


def test_concurrent_output_types_are_computed_once(monkeypatch):
    import cmdletdoc.domain.command as command_module

    calls = []
    lock = threading.Lock()
    resolve = command_module.resolve_type_reference

    def counting_resolve(reference):
        with lock:
            calls.append(str(reference))
        return resolve(reference)

    monkeypatch.setattr(command_module, "resolve_type_reference", counting_resolve)

    @cmdlet("Get", "Many")
    @output_type(Zebra, "str", Alpha)
    class GetMany:
        pass

    command = Command(GetMany)
    barrier = threading.Barrier(8)
    results = []

    def read():
        barrier.wait()
        results.append(command.output_types)

    threads = [threading.Thread(target=read) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(calls) == 3
    assert len(results) == 8
    assert all(result is results[0] for result in results)
    assert results[0] == (Alpha, Zebra, str)


def test_exit_during_instantiation_is_an_instantiation_error():
    counter = _Counter()

    @cmdlet("Get", "Exiting")
    class GetExiting:
        def __init__(self):
            sys.exit(2)

        def get_dynamic_parameters(self):  # pragma: no cover
            return None

    command = Command(GetExiting, instance_factory=counter)
    for _ in range(2):
        with pytest.raises(InstantiationError, match="GetExiting"):
            _ = command.parameters
    assert counter.calls == 1


def test_exit_inside_provider_is_an_instantiation_error():
    @cmdlet("Get", "Quitting")
    class GetQuitting:
        def get_dynamic_parameters(self):
            raise SystemExit("provider quit")

    with pytest.raises(InstantiationError, match="provider quit"):
        _ = Command(GetQuitting).parameters
