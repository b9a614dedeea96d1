import sys
import textwrap
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

SAMPLE_MODULE = "sample_cmdlets"

SAMPLE_SOURCE = '''
from enum import Enum
from typing import Annotated

from cmdletdoc import (
    AliasAttribute,
    ParameterAttribute,
    RuntimeDefinedParameter,
    RuntimeDefinedParameterDictionary,
    cmdlet,
    output_type,
)


class Color(Enum):
    RED = 1
    BLUE = 2


class Widget:
    pass


@cmdlet("Get", "Widget", default_parameter_set_name="ByName")
@output_type(Widget)
class GetWidget:
    name: Annotated[str, ParameterAttribute(parameter_set_name="ByName", mandatory=True, position=0)]
    id: Annotated[int, ParameterAttribute(parameter_set_name="ById", mandatory=True)]
    color: Annotated[Color, ParameterAttribute(), AliasAttribute("c")] = Color.RED


@cmdlet("Set", "Widget")
class SetWidget:
    value: Annotated[str, ParameterAttribute(value_from_pipeline=True)]

    class Extra:
        force: Annotated[bool, ParameterAttribute()] = False

    def get_dynamic_parameters(self):
        parameters = RuntimeDefinedParameterDictionary()
        parameters.add(RuntimeDefinedParameter(name="Mode", parameter_type=str, attributes=[ParameterAttribute()]))
        return parameters


class NotACommand:
    pass
'''

BROKEN_MODULE = "broken_cmdlets"

BROKEN_SOURCE = '''
from typing import Annotated

from cmdletdoc import ParameterAttribute, cmdlet, output_type


@cmdlet("Add", "Gadget")
class AddGadget:
    name: Annotated[str, ParameterAttribute()]


@cmdlet("Remove", "Gadget")
@output_type()
class RemoveGadget:
    pass
'''


def _install_module(tmp_path, monkeypatch, name, source):
    (tmp_path / f"{name}.py").write_text(textwrap.dedent(source))
    monkeypatch.syspath_prepend(str(tmp_path))
    sys.modules.pop(name, None)


@pytest.fixture
def sample_module(tmp_path, monkeypatch):
    """Import name of a module holding well-formed command classes."""
    _install_module(tmp_path, monkeypatch, SAMPLE_MODULE, SAMPLE_SOURCE)
    yield SAMPLE_MODULE
    sys.modules.pop(SAMPLE_MODULE, None)


@pytest.fixture
def broken_module(tmp_path, monkeypatch):
    """Import name of a module where one command has a malformed output type."""
    _install_module(tmp_path, monkeypatch, BROKEN_MODULE, BROKEN_SOURCE)
    yield BROKEN_MODULE
    sys.modules.pop(BROKEN_MODULE, None)
