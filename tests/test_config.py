import sys
from pathlib import Path

import pytest

from zorro.config import ZorroConfig, load_config, program_dir


def test_defaults():
    cfg = ZorroConfig()
    assert cfg.template_extension == ".sql"
    assert cfg.interface_marker == "I"
    assert cfg.param_prefixes == "@:?"


def test_load_yaml(tmp_path: Path):
    p = tmp_path / "zorro.yaml"
    p.write_text(
        "template_dir: queries\ninterface_marker: Repo\nparam_prefixes: '@'\nlog_level: debug\n",
        encoding="utf-8",
    )
    cfg = load_config(str(p))
    assert cfg.template_dir == "queries"
    assert cfg.interface_marker == "Repo"
    assert cfg.param_prefixes == "@"
    assert cfg.log_level == "DEBUG"
    assert cfg.resolve_template_dir() == Path("queries")


def test_load_json(tmp_path: Path):
    p = tmp_path / "zorro.json"
    p.write_text('{"template_extension": ".tsql"}', encoding="utf-8")
    assert load_config(str(p)).template_extension == ".tsql"


def test_non_mapping_rejected(tmp_path: Path):
    p = tmp_path / "zorro.yaml"
    p.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError, match="must be a YAML/JSON object"):
        load_config(str(p))


def test_template_dir_defaults_to_program_directory(monkeypatch, tmp_path: Path):
    script = tmp_path / "app.py"
    monkeypatch.setattr(sys, "argv", [str(script)])
    assert program_dir() == tmp_path.resolve()
    assert ZorroConfig().resolve_template_dir() == tmp_path.resolve()


def test_empty_param_prefixes_rejected(tmp_path: Path):
    p = tmp_path / "zorro.yaml"
    p.write_text("param_prefixes: ''\n", encoding="utf-8")
    with pytest.raises(ValueError, match="param_prefixes"):
        load_config(str(p))
    with pytest.raises(ValueError, match="param_prefixes"):
        ZorroConfig.from_dict({"param_prefixes": None})
