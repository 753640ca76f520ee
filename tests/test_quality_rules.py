import logging
import os

from easyaudit.rules.block_viewmodel_ratio import BlockViewModelRatioProcessor
from easyaudit.rules.cacheable import CacheableProcessor
from easyaudit.rules.collection_in_loop import CollectionInLoopProcessor
from easyaudit.rules.count_on_collection import RULE_ID, CountOnCollectionProcessor
from easyaudit.rules.hard_written_sql import HardWrittenSqlProcessor, truncate_sql
from easyaudit.rules.payment_abstract_method import PaymentAbstractMethodProcessor
from easyaudit.rules.unused_modules import UnusedModulesProcessor, parse_module_statuses
from easyaudit.severity import Severity

MODULE = "app/code/Acme/Widget/"

REPORT = """
<?php
namespace Acme\\Widget\\Model;

class Report
{
    public function fetch($connection)
    {
        $rows = $connection->query("SELECT entity_id FROM catalog_product_entity");
        $connection->query("UPDATE sales_order SET status = 'done'");
        return $rows;
    }
}
"""


def test_hard_written_sql(write_tree, scan_context):
    write_tree({MODULE + "Model/Report.php": REPORT, MODULE + "Setup/Patch/Data/Fix.php": REPORT})
    processor = HardWrittenSqlProcessor()

    processor.process(scan_context())

    [select] = processor.occurrences("magento.code.hard-written-sql-select")
    assert select.file.endswith("Model/Report.php")
    assert select.start_line == 8
    assert select.severity is Severity.ERROR
    assert select.message.startswith('Hard-written SELECT query detected: "SELECT entity_id FROM".')

    [update] = processor.occurrences("magento.code.hard-written-sql-update")
    assert update.start_line == 9
    assert update.severity is Severity.WARNING

    assert processor.found_count == 2
    assert [finding.rule_id for finding in processor.report()] == [
        "magento.code.hard-written-sql-select",
        "magento.code.hard-written-sql-update",
    ]


def test_commented_sql_is_ignored(write_tree, scan_context):
    write_tree(
        {
            MODULE + "Model/Quiet.php": """
            <?php
            // SELECT * FROM sales_order
            /* DELETE FROM sales_order */
            class Quiet
            {
            }
            """
        }
    )
    processor = HardWrittenSqlProcessor()

    processor.process(scan_context())

    assert processor.found_count == 0


def test_truncate_sql():
    assert truncate_sql("SELECT   a\n   FROM b") == "SELECT a FROM b"
    long_query = "SELECT " + ", ".join(f"column_{i}" for i in range(20)) + " FROM t"
    truncated = truncate_sql(long_query)
    assert len(truncated) == 80
    assert truncated.endswith("...")


def test_loading_inside_loops(write_tree, scan_context):
    write_tree(
        {
            MODULE + "Model/Loader.php": """
            <?php
            namespace Acme\\Widget\\Model;

            class Loader
            {
                public function loadAll(array $ids)
                {
                    foreach ($ids as $id) {
                        $item = $this->repository->getById($id);
                        $this->product->load($id);
                    }
                }
            }
            """
        }
    )
    processor = CollectionInLoopProcessor()

    processor.process(scan_context())

    occurrences = processor.occurrences("magento.performance.collection-in-loop")
    assert sorted(o.start_line for o in occurrences) == [9, 10]
    assert any(o.message.startswith("Repository ->getById() call inside loop") for o in occurrences)


def test_nested_loops_report_each_load_once(write_tree, scan_context):
    write_tree(
        {
            MODULE + "Model/Nested.php": """
            <?php
            class Nested
            {
                public function run($groups)
                {
                    foreach ($groups as $group) {
                        foreach ($group as $id) {
                            $this->model->load($id);
                        }
                    }
                }
            }
            """
        }
    )
    processor = CollectionInLoopProcessor()

    processor.process(scan_context())

    assert [o.start_line for o in processor.occurrences("magento.performance.collection-in-loop")] == [8]


ITEMS_BLOCK = """
<?php
namespace Acme\\Widget\\Block;

use Acme\\Widget\\Model\\ResourceModel\\Item\\CollectionFactory;

class Items
{
    public function __construct(CollectionFactory $collectionFactory)
    {
        $this->collectionFactory = $collectionFactory;
    }

    public function getItems()
    {
        $collection = $this->collectionFactory->create();
        return $collection;
    }

    public function hasItems()
    {
        $items = $this->collectionFactory->create();
        return count($items) > 0;
    }
}
"""

ITEMS_TEMPLATE = """
<?php
/** @var \\Acme\\Widget\\Block\\Items $block */
$items = $block->getItems();
?>
<?php if (count($items)): ?>
<p><?= $block->getItems()->count() ?></p>
<?php endif; ?>
"""


def test_count_on_collection_in_classes_and_templates(write_tree, scan_context):
    write_tree(
        {
            MODULE + "Block/Items.php": ITEMS_BLOCK,
            MODULE + "view/frontend/templates/items.phtml": ITEMS_TEMPLATE,
        }
    )
    processor = CountOnCollectionProcessor()

    processor.process(scan_context())

    occurrences = processor.occurrences(RULE_ID)
    in_class = [o for o in occurrences if o.file.endswith("Items.php")]
    in_template = [o for o in occurrences if o.file.endswith("items.phtml")]

    assert [o.start_line for o in in_class] == [22]
    assert in_class[0].metadata == {"variable": "$items"}
    assert [o.start_line for o in in_template] == [5, 6]
    assert "$block->getItems()->getSize()" in in_template[1].message
    assert processor.found_count == 3


def test_template_without_block_annotation_is_ignored(write_tree, scan_context):
    write_tree(
        {
            MODULE + "Block/Items.php": ITEMS_BLOCK,
            MODULE + "view/frontend/templates/items.phtml": ITEMS_TEMPLATE.replace("@var", "@see"),
        }
    )
    processor = CountOnCollectionProcessor()

    processor.process(scan_context())

    assert all(o.file.endswith("Items.php") for o in processor.occurrences(RULE_ID))


def test_uncacheable_blocks(write_tree, scan_context):
    write_tree(
        {
            MODULE + "view/frontend/layout/default.xml": """
            <?xml version="1.0"?>
            <page>
                <body>
                    <referenceContainer name="content">
                        <block class="Acme\\Widget\\Block\\Items" name="acme.items" cacheable="false"/>
                        <block class="Acme\\Widget\\Block\\Account" name="acme.customer.info" cacheable="false"/>
                        <block class="Acme\\Widget\\Block\\Promo" name="acme.promo"/>
                    </referenceContainer>
                </body>
            </page>
            """
        }
    )
    processor = CacheableProcessor()

    processor.process(scan_context())

    [occurrence] = processor.occurrences("useCacheable")
    assert occurrence.start_line == 5
    assert "'acme.items'" in occurrence.message
    assert occurrence.severity is Severity.NOTE


def test_block_viewmodel_ratio(write_tree, scan_context):
    write_tree(
        {
            MODULE + "Block/One.php": "<?php\nclass One {}\n",
            MODULE + "Block/Two.php": "<?php\nclass Two {}\n",
            MODULE + "Model/Thing.php": "<?php\nclass Thing {}\n",
            "app/code/Acme/Lean/ViewModel/View.php": "<?php\nclass View {}\n",
            "app/code/Acme/Lean/Block/Only.php": "<?php\nclass Only {}\n",
        }
    )
    processor = BlockViewModelRatioProcessor()
    context = scan_context()

    processor.process(context)

    [occurrence] = processor.occurrences("blockViewModelRatio")
    assert occurrence.file == os.path.join(context.config.root, "app", "code", "Acme", "Widget")
    assert occurrence.start_line == 1
    assert occurrence.metadata == {"module": "Acme_Widget", "ratio": 0.67, "blockCount": 2, "totalCount": 3}
    assert "(66.7%)" in occurrence.message


def test_payment_methods_extending_abstract_method(write_tree, scan_context):
    payment = """
    <?php
    namespace Acme\\Widget\\Model\\Payment;

    class Cash extends \\Magento\\Payment\\Model\\Method\\AbstractMethod
    {
    }
    """
    write_tree({MODULE + "Model/Payment/Cash.php": payment, MODULE + "Test/Unit/FakeMethod.php": payment})
    processor = PaymentAbstractMethodProcessor()

    processor.process(scan_context())

    [occurrence] = processor.occurrences("extensionOfAbstractMethod")
    assert occurrence.file.endswith("Model/Payment/Cash.php")
    assert occurrence.start_line == 4
    assert occurrence.severity is Severity.ERROR


CONFIG_PHP = """
<?php
return [
    'modules' => [
        'Magento_Store' => 1,
        'Acme_Widget' => 0,
        'Acme_Other' => 1,
    ],
];
"""


def _module_xml(name):
    return f"""
    <?xml version="1.0"?>
    <config>
        <module name="{name}"/>
    </config>
    """


def test_disabled_modules_still_present(write_tree, scan_context):
    write_tree(
        {
            "app/etc/config.php": CONFIG_PHP,
            MODULE + "etc/module.xml": _module_xml("Acme_Widget"),
            "app/code/Acme/Other/etc/module.xml": _module_xml("Acme_Other"),
        }
    )
    processor = UnusedModulesProcessor()

    processor.process(scan_context())

    [occurrence] = processor.occurrences("unusedModules")
    assert occurrence.file.endswith("Acme/Widget/etc/module.xml")
    assert occurrence.start_line == 3
    assert occurrence.metadata == {"module": "Acme_Widget"}
    assert occurrence.message == "Module 'Acme_Widget' is disabled in app/etc/config.php but still present in codebase."


def test_unused_modules_skipped_without_config(write_tree, scan_context, caplog):
    write_tree({MODULE + "etc/module.xml": _module_xml("Acme_Widget")})
    processor = UnusedModulesProcessor()

    with caplog.at_level(logging.INFO, logger="easyaudit.rules.unused_modules"):
        processor.process(scan_context())

    assert processor.found_count == 0
    assert "skipping unused modules check" in caplog.text


def test_parse_module_statuses():
    assert parse_module_statuses(CONFIG_PHP) == {"Magento_Store": 1, "Acme_Widget": 0, "Acme_Other": 1}
    assert parse_module_statuses("<?php return array('modules' => array('A_B' => 0));") == {"A_B": 0}
    assert parse_module_statuses("<?php return [];") is None
