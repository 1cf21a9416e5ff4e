"""Tests for the command-line entrypoint."""

from __future__ import annotations

import json
import logging

import pytest

from storyscale.__main__ import main


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(f"""
llm:
  providers: {{}}
quality:
  threshold: 70
logging:
  level: "WARNING"
  file: "{tmp_path / 'logs' / 'cli.log'}"
""")
    monkeypatch.setenv("CONFIG_PATH", str(cfg_path))
    for var in ("AUTH_DN_NO", "AUTH_FINANSAVISEN_NO"):
        monkeypatch.delenv(var, raising=False)

    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield tmp_path
    for handler in root.handlers[len(handlers):]:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def _write_request(tmp_path, **overrides):
    data = {
        "topic": "Bærekraftig shipping i Norge",
        "content_type": "article",
        "output_language": "no",
        "audience": "ledere",
        "cultural_context": {"market": "norway", "industry": "energy"},
    }
    data.update(overrides)
    path = tmp_path / "request.json"
    path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
    return str(path)


def test_no_command_prints_usage(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main([])
    assert exc_info.value.code == 1
    assert "generate, route, classify, sources, assess" in capsys.readouterr().out


def test_missing_argument(cli_env, capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(["classify"])
    assert exc_info.value.code == 1
    assert "classify <request.json>" in capsys.readouterr().out


def test_classify(cli_env, capsys):
    main(["classify", _write_request(cli_env)])
    out = json.loads(capsys.readouterr().out)
    assert out["strategy"] == "norwegian_first"
    assert out["classification"]["requires_cultural_adaptation"] is True


def test_route(cli_env, capsys):
    main(["route", _write_request(cli_env)])
    out = json.loads(capsys.readouterr().out)
    assert out["strategy"] == "norwegian_first"
    assert out["primary"]
    assert out["international"] == []


def test_sources(cli_env, capsys):
    main(["sources", "international"])
    lines = capsys.readouterr().out.splitlines()
    assert lines[0].startswith("Domain")
    assert len(lines) == 2 + 8


def test_assess(cli_env, capsys):
    text = cli_env / "draft.txt"
    text.write_text(
        "Vi er best i markedet og alltid den ledende aktøren.\n\nKontakt oss i dag.",
        encoding="utf-8",
    )
    main(["assess", str(text), "social", "no"])
    out = json.loads(capsys.readouterr().out)
    assert 0 <= out["assessment"]["overall"] <= 100
    assert out["cultural_check"]["violations"]
    assert isinstance(out["meets_threshold"], bool)


def test_generate_invalid_request_exits_2(cli_env, capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(["generate", _write_request(cli_env, topic="")])
    assert exc_info.value.code == 2
    out = json.loads(capsys.readouterr().out)
    assert out["code"] == "VALIDATION_FAILED"
    assert out["context"]["reasons"] == ["topic: must not be empty"]
