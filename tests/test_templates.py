import ast

import pytest
from storage_interfaces import DATA_STORAGE_TEMPLATES, IDataStorage, write_templates

from zorro.config import ZorroConfig
from zorro.contract import describe_contract
from zorro.errors import TemplateNotFoundError
from zorro.templates import (
    escape_template,
    required_templates,
    resolve_templates,
    template_filename,
    template_path,
)


def test_template_filename_is_canonical_signature_plus_extension():
    m = describe_contract(IDataStorage).methods[1]
    assert template_filename(m) == "IDataStorage.get_name(int user_id).sql"
    assert template_filename(m, ".tsql") == "IDataStorage.get_name(int user_id).tsql"


def test_template_path_uses_configured_directory(tmp_path):
    m = describe_contract(IDataStorage).methods[0]
    cfg = ZorroConfig(template_dir=str(tmp_path))
    assert template_path(m, cfg) == tmp_path / "IDataStorage.get_count().sql"


def test_resolve_loads_all_templates_in_contract_order(tmp_path):
    write_templates(tmp_path, DATA_STORAGE_TEMPLATES)
    contract = describe_contract(IDataStorage)
    templates = resolve_templates(contract, ZorroConfig(template_dir=str(tmp_path)))
    assert [t.descriptor for t in templates] == list(contract.methods)
    assert templates[0].raw == "SELECT COUNT(*) FROM users"


def test_missing_template_aborts_whole_contract(tmp_path):
    partial = dict(DATA_STORAGE_TEMPLATES)
    partial.pop("IDataStorage.last_seen(int user_id)")
    write_templates(tmp_path, partial)

    with pytest.raises(TemplateNotFoundError) as ei:
        resolve_templates(describe_contract(IDataStorage), ZorroConfig(template_dir=str(tmp_path)))
    assert ei.value.signature == "IDataStorage.last_seen(int user_id)"
    assert ei.value.problem.code == "ZORRO_TEMPLATE_NOT_FOUND"


def test_escaped_text_is_a_python_literal_of_the_raw_text():
    raw = "SELECT 'it''s' AS a, \"quoted\" AS b, 'C:\\path' AS c\n"
    escaped = escape_template(raw)
    assert ast.literal_eval(escaped) == raw


def test_required_templates_reports_existence(tmp_path):
    write_templates(tmp_path, {"IDataStorage.get_count()": "SELECT 1"})
    statuses = required_templates(describe_contract(IDataStorage), ZorroConfig(template_dir=str(tmp_path)))
    assert len(statuses) == 7
    assert statuses[0].exists
    assert not any(s.exists for s in statuses[1:])
