"""Test JSON schema export for host-facing records."""

import json
from pathlib import Path

import pytest

from backend.pdfqa.models import RAGResponse
from scripts.export_schemas import main as export_schemas


@pytest.fixture
def schemas_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the export inside a temporary working directory."""
    monkeypatch.chdir(tmp_path)
    export_schemas()
    return tmp_path / "docs" / "schemas"


def test_schemas_exist(schemas_dir: Path) -> None:
    """Test that one schema file is written per record type."""
    names = sorted(p.name for p in schemas_dir.iterdir())

    assert names == [
        "Document.schema.json",
        "DocumentSummary.schema.json",
        "RAGResponse.schema.json",
    ]


def test_rag_response_schema_matches_model(schemas_dir: Path) -> None:
    """Test that the exported schema is the model's schema and lists its fields."""
    schema = json.loads((schemas_dir / "RAGResponse.schema.json").read_text())

    assert schema == RAGResponse.model_json_schema()
    assert set(schema["properties"]) == {"answer", "sources"}
    assert schema["required"] == ["answer"]
