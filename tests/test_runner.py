"""Tests for the analysis runner."""

import logging

from discard_engine.config import EngineConfig
from discard_engine.runner import analyze_document, analyze_file, analyze_paths, analyze_source
from discard_engine.csharp_resolver import StaticSymbolResolver

from tests.trees import CSharpTreeBuilder

SOURCE = """class C
{
    int GetValue() => 1;
    bool Process() => true;

    void Run()
    {
        GetValue();
        Process();
    }
}
"""


class TestRunner:

    def setup_method(self):
        self.b = CSharpTreeBuilder()

    def test_analyze_document_with_explicit_resolver(self):
        document = self.b.document(
            self.b.statement(self.b.call("Process"), trailing="\n"),
            self.b.statement(self.b.call("GetValue"), trailing="\n"),
        )
        resolver = StaticSymbolResolver({"GetValue": "int", "Process": "void"})

        diagnostics = analyze_document(document, resolver)

        assert [d.target.text for d in diagnostics] == ["GetValue()"]

    def test_rule_selection(self):
        document = self.b.document(self.b.statement(self.b.call("GetValue")))
        resolver = StaticSymbolResolver({"GetValue": "int"})

        assert analyze_document(document, resolver, EngineConfig(enabled_rules=["Discard*"]))
        assert analyze_document(document, resolver, EngineConfig(enabled_rules=["Other*"])) == []

    def test_per_file_limit(self):
        document = self.b.document(
            *[self.b.statement(self.b.call("GetValue"), trailing="\n") for _ in range(4)]
        )
        resolver = StaticSymbolResolver({"GetValue": "int"})

        diagnostics = analyze_document(document, resolver, EngineConfig(max_findings_per_file=2))

        assert len(diagnostics) == 2

    def test_default_config_reports_every_finding(self):
        document = self.b.document(
            *[self.b.statement(self.b.call("GetValue"), trailing="\n") for _ in range(75)]
        )
        resolver = StaticSymbolResolver({"GetValue": "int"})

        diagnostics = analyze_document(document, resolver)

        assert len(diagnostics) == 75

    def test_dropped_findings_are_logged(self, caplog):
        document = self.b.document(
            *[self.b.statement(self.b.call("GetValue"), trailing="\n") for _ in range(4)]
        )
        resolver = StaticSymbolResolver({"GetValue": "int"})

        with caplog.at_level(logging.WARNING, logger="discard_rules.discard_return_value"):
            analyze_document(document, resolver, EngineConfig(max_findings_per_file=1))

        assert "Dropping 3 of 4 findings" in caplog.text

    def test_analyze_source(self):
        diagnostics = analyze_source(SOURCE, "C.cs")
        assert [d.target.text for d in diagnostics] == ["GetValue()", "Process()"]
        assert all(d.file == "C.cs" for d in diagnostics)

    def test_analyze_file_keeps_line_endings(self, tmp_path):
        path = tmp_path / "C.cs"
        path.write_bytes(SOURCE.replace("\n", "\r\n").encode("utf-8"))

        diagnostics = analyze_file(str(path))

        assert len(diagnostics) == 2
        assert diagnostics[0].target.document.text == SOURCE.replace("\n", "\r\n")

    def test_analyze_paths_in_parallel(self, tmp_path):
        for name in ("A", "B", "C"):
            (tmp_path / f"{name}.cs").write_text(SOURCE)

        sequential = analyze_paths([str(tmp_path)], EngineConfig(jobs=1))
        parallel = analyze_paths([str(tmp_path)], EngineConfig(jobs=3))

        assert len(parallel) == 6
        assert [(d.file, d.span) for d in parallel] == [(d.file, d.span) for d in sequential]
        assert parallel[0].file.endswith("A.cs")

    def test_analyze_paths_total_limit(self, tmp_path):
        for name in ("A", "B"):
            (tmp_path / f"{name}.cs").write_text(SOURCE)

        diagnostics = analyze_paths([str(tmp_path)], EngineConfig(max_total_findings=3))

        assert len(diagnostics) == 3

    def test_unreadable_file_is_skipped(self, tmp_path, caplog):
        (tmp_path / "A.cs").write_text(SOURCE)
        (tmp_path / "Bad.cs").write_bytes(b"class \xff\xfe {}")

        with caplog.at_level(logging.WARNING, logger="discard_engine.runner"):
            diagnostics = analyze_paths([str(tmp_path)])

        assert len(diagnostics) == 2
        assert "Bad.cs" in caplog.text
