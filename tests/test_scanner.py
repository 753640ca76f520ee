import logging

from easyaudit.config import ScanConfiguration
from easyaudit.fixability import StaticFixability
from easyaudit.result import Finding, Occurrence
from easyaudit.rules.registry import PROCESSORS, ProcessorRegistry, RegistryDiagnostic, build_registry
from easyaudit.rules.registry_usage import RegistryUsageProcessor
from easyaudit.rules.unused_modules import UnusedModulesProcessor
from easyaudit.scanner import Scanner, scan, split_tool_suggestions

CURRENT_BLOCK = """
<?php
namespace Acme\\Widget\\Block;

use Magento\\Framework\\ObjectManagerInterface;

class Current
{
    public function __construct(
        \\Magento\\Framework\\Registry $registry,
        ObjectManagerInterface $objectManager
    ) {
        $this->objectManager = $objectManager;
    }
}
"""

USELESS_IMPORT = "magento.code.useless-object-manager-import"
REGISTRY_RULE = "magento.code.use-of-registry"


def test_registry_contains_every_processor_in_identifier_order():
    registry = build_registry()

    assert len(registry.processors) == len(PROCESSORS) == 20
    assert registry.identifiers == sorted(registry.identifiers)
    assert registry.diagnostics == []


def test_failing_factory_becomes_diagnostic():
    def broken():
        raise RuntimeError("boom")

    registry = build_registry([UnusedModulesProcessor, broken, RegistryUsageProcessor])

    assert registry.identifiers == ["unusedModules", "use_of_registry"]
    assert registry.diagnostics == [RegistryDiagnostic(processor="broken", error="boom")]


def test_scan_reports_findings_and_separates_tool_suggestions(write_tree, tmp_path):
    write_tree({"app/code/Acme/Widget/Block/Current.php": CURRENT_BLOCK})

    result = scan(ScanConfiguration.build(tmp_path))

    assert result.errors == []
    assert REGISTRY_RULE in result.report.findings
    assert USELESS_IMPORT not in result.report.findings
    assert result.tool_suggestions == {USELESS_IMPORT: 1}
    assert result.report.metadata.scan_path == str(ScanConfiguration.build(tmp_path).root)
    assert result.exit_code() == 2


def test_fixable_only_runs_fixable_processors(write_tree, tmp_path, caplog):
    write_tree({"app/code/Acme/Widget/Block/Current.php": CURRENT_BLOCK})
    config = ScanConfiguration.build(tmp_path, fixable_only=True)

    with caplog.at_level(logging.INFO, logger="easyaudit.scanner"):
        result = Scanner(config, StaticFixability(["use_of_registry"])).run()

    assert list(result.report.findings) == [REGISTRY_RULE]
    assert result.tool_suggestions == {}
    assert "Skipping replaceObjectManager: not fixable" in caplog.text


def test_processors_without_matching_files_are_skipped(write_tree, tmp_path, caplog):
    write_tree({"app/code/Acme/Widget/Block/Current.php": CURRENT_BLOCK})
    scanner = Scanner(
        ScanConfiguration.build(tmp_path),
        registry_factory=lambda: build_registry([UnusedModulesProcessor, RegistryUsageProcessor]),
    )

    with caplog.at_level(logging.INFO, logger="easyaudit.scanner"):
        result = scanner.run()

    assert "Skipping unusedModules: no xml files" in caplog.text
    assert "Running use_of_registry" in caplog.text
    assert list(result.report.findings) == [REGISTRY_RULE]
    assert isinstance(scanner.registry, ProcessorRegistry)


def test_empty_tree_yields_empty_report(tmp_path):
    result = scan(ScanConfiguration.build(tmp_path))

    assert result.errors == ["No files found to scan."]
    assert list(result.report.findings) == []
    assert result.exit_code() == 0


def test_invalid_root_is_reported(tmp_path):
    result = scan(ScanConfiguration.build(tmp_path / "missing"))

    assert len(result.errors) == 1
    assert "is not a valid directory or file" in result.errors[0]
    assert result.passed


def test_split_tool_suggestions_counts_occurrences():
    occurrences = (Occurrence(file="A.php"), Occurrence(file="B.php"))
    imports = Finding(
        rule_id=USELESS_IMPORT, name="n", short_description="s", long_description="l", occurrences=occurrences
    )
    other = Finding(rule_id="helpers", name="n", short_description="s", long_description="l", occurrences=occurrences)

    kept, suggestions = split_tool_suggestions([imports, other])

    assert kept == [other]
    assert suggestions == {USELESS_IMPORT: 2}
