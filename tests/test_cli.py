"""Tests for the command-line interface."""

import json

import pytest

from pngdb import PngDatabase
from pngdb.cli import main, parse_schema_arg


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("PNGDB_FILE", "PNGDB_WIDTH", "PNGDB_HEIGHT", "PNGDB_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("pngdb.cli.load_dotenv", lambda: None)


def run(path, *args):
    main(["--file", str(path), *args])


class TestParseSchemaArg:
    def test_field_list(self):
        assert parse_schema_arg("name:string, age:number").fields == {"name": "string", "age": "number"}

    def test_malformed_pairs_skipped(self):
        assert parse_schema_arg("name:string,broken,a:b:c").fields == {"name": "string"}

    def test_json_object(self):
        assert parse_schema_arg('{"name": "string"}').fields == {"name": "string"}


class TestCommands:
    def test_create(self, tmp_path, capsys):
        path = tmp_path / "db.png"
        run(path, "create", "--width", "32", "--height", "16", "--schema", "name:string")
        assert "Created database" in capsys.readouterr().out

        db = PngDatabase.load(path)
        assert db.dimensions == (32, 16)
        assert db.schema.fields == {"name": "string"}

    def test_create_uses_env_dimensions(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PNGDB_WIDTH", "12")
        monkeypatch.setenv("PNGDB_HEIGHT", "7")
        path = tmp_path / "db.png"
        run(path, "create", "--schema", "a:string")
        assert PngDatabase.load(path).dimensions == (12, 7)

    def test_file_from_env(self, tmp_path, monkeypatch, capsys):
        path = tmp_path / "env.png"
        monkeypatch.setenv("PNGDB_FILE", str(path))
        main(["sample"])
        assert path.exists()

    def test_insert_and_query(self, tmp_path, capsys):
        path = tmp_path / "db.png"
        run(path, "create", "--schema", "name:string,age:number")
        run(path, "insert", "--x", "3", "--y", "4", "--data", '{"name": "Carol", "age": 41}')
        capsys.readouterr()

        run(path, "query", "WHERE age > 40")
        out = capsys.readouterr().out
        assert "Found 1 result(s):" in out
        assert "Position (3, 4):" in out
        assert '"Carol"' in out

    def test_query_no_results(self, tmp_path, capsys):
        path = tmp_path / "db.png"
        run(path, "sample")
        capsys.readouterr()
        run(path, "query", "WHERE age > 99")
        assert capsys.readouterr().out.strip() == "No results found"

    def test_query_json(self, tmp_path, capsys):
        path = tmp_path / "db.png"
        run(path, "sample")
        capsys.readouterr()
        run(path, "query", "WHERE age > 28", "--json")
        assert json.loads(capsys.readouterr().out) == [
            {"x": 10, "y": 20, "data": {"name": "Alice", "age": 30}},
        ]

    def test_list(self, tmp_path, capsys):
        path = tmp_path / "db.png"
        run(path, "sample")
        capsys.readouterr()
        run(path, "list")
        out = capsys.readouterr().out
        assert f"Database: {path} (256x256)" in out
        assert "Rows: 2" in out
        assert 'Position (50, 60): {"name":"Bob","age":25}' in out

    def test_list_json(self, tmp_path, capsys):
        path = tmp_path / "db.png"
        run(path, "sample")
        capsys.readouterr()
        run(path, "list", "--json")
        assert len(json.loads(capsys.readouterr().out)) == 2

    def test_import(self, tmp_path, capsys):
        config = tmp_path / "rows.yaml"
        config.write_text(
            "width: 8\n"
            "height: 8\n"
            "schema: {name: string}\n"
            "rows:\n"
            "  - {x: 1, y: 1, data: {name: one}}\n"
            "  - {x: 2, y: 2, data: {name: two}}\n"
            "  - {x: 99, y: 1, data: {name: outside}}\n"
        )
        path = tmp_path / "db.png"
        run(path, "import", str(config))
        assert "Imported 2 row(s), skipped 1" in capsys.readouterr().out

        db = PngDatabase.load(path)
        assert db.dimensions == (8, 8)
        assert [r.data["name"] for r in db.rows] == ["one", "two"]

    def test_import_appends_to_existing(self, tmp_path, capsys):
        path = tmp_path / "db.png"
        run(path, "sample")
        config = tmp_path / "rows.yaml"
        config.write_text("rows:\n  - {x: 0, y: 0, data: {name: Zed, age: 1}}\n")
        run(path, "import", str(config))
        assert len(PngDatabase.load(path)) == 3


class TestErrors:
    def test_out_of_bounds_insert(self, tmp_path, capsys):
        path = tmp_path / "db.png"
        run(path, "create", "--width", "4", "--height", "4", "--schema", "a:string")
        with pytest.raises(SystemExit) as exc_info:
            run(path, "insert", "--x", "4", "--y", "0", "--data", "{}")
        assert exc_info.value.code == 1
        assert "out of bounds" in capsys.readouterr().out
        assert len(PngDatabase.load(path)) == 0

    def test_bad_query(self, tmp_path, capsys):
        path = tmp_path / "db.png"
        run(path, "sample")
        capsys.readouterr()
        with pytest.raises(SystemExit):
            run(path, "query", 'WHERE name > "A"')
        assert capsys.readouterr().out.startswith("Error:")

    def test_missing_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            run(tmp_path / "missing.png", "list")
        assert exc_info.value.code == 1
        assert "does not exist" in capsys.readouterr().out

    def test_bad_import_config(self, tmp_path, capsys):
        with pytest.raises(SystemExit):
            run(tmp_path / "db.png", "import", str(tmp_path / "nope.yaml"))
        assert "Config file not found" in capsys.readouterr().out

    def test_import_bad_dimensions(self, tmp_path, capsys):
        config = tmp_path / "rows.yaml"
        config.write_text("width: wide\nrows:\n  - {x: 0, y: 0, data: {a: 1}}\n")
        with pytest.raises(SystemExit) as exc_info:
            run(tmp_path / "db.png", "import", str(config))
        assert exc_info.value.code == 1
        assert "Error: 'width' must be a positive integer" in capsys.readouterr().out
        assert not (tmp_path / "db.png").exists()
