from easyaudit.rules.advanced_block_vs_viewmodel import AdvancedBlockVsViewModelProcessor
from easyaudit.rules.escaper import DeprecatedEscaperProcessor
from easyaudit.rules.helpers import HelpersProcessor
from easyaudit.severity import Severity

TEMPLATE = "app/code/Acme/Widget/view/frontend/templates/product.phtml"


def test_this_in_template_is_an_error(write_tree, scan_context):
    write_tree({TEMPLATE: "<div>\n<?= $this->getProductName() ?>\n<?= $this->getChildHtml('x') ?>\n</div>\n"})
    processor = AdvancedBlockVsViewModelProcessor()

    processor.process(scan_context())

    [occurrence] = processor.occurrences("thisToBlock")
    assert occurrence.start_line == 2
    assert occurrence.severity is Severity.ERROR
    assert "$this->getProductName(" in occurrence.message
    assert processor.found_count == 1


def test_data_crunch_needs_three_block_getters(write_tree, scan_context):
    write_tree(
        {
            TEMPLATE: """
            <?= $block->getPrice() ?>
            <?= $block->getSku() ?>
            <?php if ($block->isSaleable()): ?>
            <?= $block->getChildHtml() ?>
            <?php endif; ?>
            """,
            "app/code/Acme/Widget/view/frontend/templates/vm.phtml": """
            <?php $viewModel = $block->getViewModel(); ?>
            <?= $block->getPrice() ?><?= $block->getSku() ?><?= $block->getName() ?>
            """,
        }
    )
    processor = AdvancedBlockVsViewModelProcessor()

    processor.process(scan_context())

    [occurrence] = processor.occurrences("dataCrunchInPhtml")
    assert occurrence.file.endswith("product.phtml")
    assert "3 data retrieval calls" in occurrence.message
    assert [finding.rule_id for finding in processor.report()] == ["dataCrunchInPhtml"]


def test_escaper_severity_depends_on_receiver(write_tree, scan_context):
    write_tree(
        {
            TEMPLATE: """
            <a href="<?= $block->escapeUrl($url) ?>">
            <?= $this->escapeHtml($label) ?>
            <?= $escaper->escapeHtml($ok) ?>
            </a>
            """
        }
    )
    processor = DeprecatedEscaperProcessor()

    processor.process(scan_context())

    occurrences = processor.occurrences("useEscaper")
    assert [(o.start_line, o.severity) for o in occurrences] == [(1, Severity.WARNING), (2, Severity.ERROR)]
    assert "$escaper->escapeUrl()" in occurrences[0].message


HELPER = """
<?php
namespace Acme\\Widget\\Helper;

use Magento\\Framework\\App\\Helper\\AbstractHelper;

class {name} extends AbstractHelper
{{
}}
"""


def test_helpers_used_in_templates_are_errors(write_tree, scan_context):
    write_tree(
        {
            "app/code/Acme/Widget/Helper/Data.php": HELPER.format(name="Data"),
            "app/code/Acme/Widget/Helper/Unused.php": HELPER.format(name="Unused"),
            "app/code/Acme/Widget/Test/Unit/Helper/Fake.php": HELPER.format(name="Fake"),
            TEMPLATE: "<?= $this->helper('Acme\\Widget\\Helper\\Data')->format($x) ?>\n",
        }
    )
    processor = HelpersProcessor()

    processor.process(scan_context())

    [used] = processor.occurrences("helpersInsteadOfViewModels")
    assert used.file.endswith("Helper/Data.php")
    assert used.start_line == 6
    assert used.metadata["templates"][0].endswith("product.phtml")
    [unused] = processor.occurrences("extensionOfAbstractHelper")
    assert unused.file.endswith("Helper/Unused.php")
    assert processor.found_count == 2


def test_ignored_core_helpers_are_not_tracked(write_tree, scan_context):
    write_tree({TEMPLATE: "<?= $this->helper('Magento\\Catalog\\Helper\\Output')->x() ?>\n"})
    processor = HelpersProcessor()

    processor.process(scan_context())

    assert processor.found_count == 0
    assert processor.report() == []
