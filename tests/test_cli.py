import json

import pytest

from tablegraph.cli.main import app, create_parser


@pytest.fixture
def base_args(tmp_path, database_url):
    return ["--config", str(tmp_path / "missing.yaml"), "--database-url", database_url]


def test_query(base_args, capsys):
    exit_code = app([*base_args, "query", "main", "Item", "{ Item(id: 1) { name, ownerId { name } } }"])

    assert exit_code == 0
    assert json.loads(capsys.readouterr().out) == {"Item": {"name": "widget", "ownerId": {"name": "bob"}}}


def test_query_with_variables(base_args, capsys):
    exit_code = app([
        *base_args,
        "query", "main", "Item", "query ($id: Int!) { Item(id: $id) { name } }",
        "--variables", '{"id": 2}',
    ])

    assert exit_code == 0
    assert json.loads(capsys.readouterr().out) == {"Item": {"name": "gadget"}}


def test_query_unknown_table(base_args, capsys):
    exit_code = app([*base_args, "query", "main", "Nope", "{ Nope { id } }"])

    assert exit_code == 1
    assert "query: Nope" in capsys.readouterr().err


def test_query_error_shows_location(base_args, capsys):
    exit_code = app([*base_args, "query", "main", "Item", "{ Item(id: 1) { price } }"])

    assert exit_code == 1
    assert "(line 1, column 17)" in capsys.readouterr().err


def test_sdl(base_args, capsys):
    exit_code = app([*base_args, "sdl", "main", "Item"])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "type Query" in out
    assert "links: [Link!]" in out


def test_no_command(capsys):
    assert app([]) == 0
    assert "serve" in capsys.readouterr().out


def test_serve_arguments():
    args = create_parser().parse_args(["serve", "--port", "9000"])
    assert args.host == "127.0.0.1"
    assert args.port == 9000
