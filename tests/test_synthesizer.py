import pytest
from storage_interfaces import (
    AUDIT_LOG_TEMPLATES,
    COLLIDE_TEMPLATES,
    DATA_STORAGE_TEMPLATES,
    DEFAULTS_TEMPLATES,
    MISSING,
    IAuditLog,
    ICollide,
    IDataStorage,
    IDefaults,
    IGeometry,
    write_templates,
)

from zorro.config import ZorroConfig
from zorro.contract import describe_contract
from zorro.errors import UnsupportedReturnTypeError
from zorro.synthesizer import generated_class_name, synthesize
from zorro.templates import resolve_templates
from zorro.types import TemplateText


def _synth(interface, templates, tmp_path, **cfg):
    write_templates(tmp_path, templates)
    config = ZorroConfig(template_dir=str(tmp_path), **cfg)
    contract = describe_contract(interface)
    return synthesize(contract, resolve_templates(contract, config), config)


def test_generated_class_name_strips_one_marker():
    assert generated_class_name("IDataStorage") == "DataStorage"
    assert generated_class_name("IIndex") == "Index"
    assert generated_class_name("Storage") == "Storage"
    assert generated_class_name("I") == "I"
    assert generated_class_name("RepoDataStorage", marker="Repo") == "DataStorage"


def test_one_method_per_descriptor_separated_by_blank_lines(tmp_path):
    source = _synth(IDataStorage, DATA_STORAGE_TEMPLATES, tmp_path)
    assert source.class_name == "DataStorage"
    assert source.body.count("    def ") == 7
    assert source.body.count("\n\n    def ") == 6
    assert "    def add_user(self, user_id: int, name: str) -> None:" in source.body
    assert "{'user_id': user_id, 'name': name}" in source.body


def test_void_methods_do_not_fetch(tmp_path):
    source = _synth(IDataStorage, DATA_STORAGE_TEMPLATES, tmp_path)
    add_user = [block for block in source.body.split("\n\n") if "def add_user" in block][0]
    assert "with _closing(self._connection.cursor()) as _cursor:" in add_user
    assert "fetchone" not in add_user
    assert "return" not in add_user


def test_imports_are_minimal_and_deduplicated(tmp_path):
    source = _synth(IDataStorage, DATA_STORAGE_TEMPLATES, tmp_path)
    assert source.imports == [
        "from builtins import bool as _bool, float as _float, int as _int, str as _str",
        "from contextlib import closing as _closing",
        "from zorro.converters import to_datetime as _to_datetime",
    ]
    assert source.references == {"IDataStorage": IDataStorage}
    assert source.interface_name == "IDataStorage"

    audit = _synth(IAuditLog, AUDIT_LOG_TEMPLATES, tmp_path)
    assert audit.imports == [
        "from builtins import int as _int",
        "from contextlib import closing as _closing",
        "from zorro.converters import to_decimal as _to_decimal",
    ]
    assert audit.class_name == "AuditLog"


def test_generated_names_step_around_parameter_names(tmp_path):
    source = _synth(ICollide, COLLIDE_TEMPLATES, tmp_path)
    assert source.imports == [
        "from builtins import int as _int_",
        "from contextlib import closing as _closing_",
    ]
    by_cursor, shadowed = source.body.split("\n\n")
    assert "as _cursor_:" in by_cursor
    assert "{'_cursor': _cursor}" in by_cursor
    assert "_row_ = _cursor.fetchone()" in shadowed
    assert "return _int_(_result_)" in shadowed


def test_defaults_are_bound_as_references(tmp_path):
    source = _synth(IDefaults, DEFAULTS_TEMPLATES, tmp_path)
    assert "def find(self, user_id: int = _default_find_user_id) -> int:" in source.body
    assert source.references["_default_find_user_id"] == 0
    assert source.references["_default_label_marker"] is MISSING
    assert source.interface_name == "IDefaults"


def test_unsupported_return_type_fails_before_any_source(tmp_path):
    contract = describe_contract(IGeometry)
    template = TemplateText(
        descriptor=contract.methods[0],
        path=tmp_path / "IGeometry.origin().sql",
        raw="SELECT 1",
        escaped="'SELECT 1'",
    )
    with pytest.raises(UnsupportedReturnTypeError):
        synthesize(contract, [template])


def test_template_quotes_are_embedded_safely(tmp_path):
    templates = dict(DATA_STORAGE_TEMPLATES)
    templates["IDataStorage.get_count()"] = "SELECT COUNT(*) FROM users WHERE name <> 'it''s \"x\"'"
    source = _synth(IDataStorage, templates, tmp_path)
    assert repr(templates["IDataStorage.get_count()"]) in source.body
