import os

from easyaudit.collector import classify, collect_files
from easyaudit.config import ScanConfiguration

TREE = {
    "app/code/Acme/Widget/etc/di.xml": "<config/>",
    "app/code/Acme/Widget/etc/frontend/di.xml": "<config/>",
    "app/code/Acme/Widget/etc/module.xml": "<config/>",
    "app/code/Acme/Widget/Model/Item.PHP": "<?php\n",
    "app/code/Acme/Widget/view/frontend/templates/item.phtml": "<?php\n",
    "app/code/Acme/Widget/view/frontend/web/js/item.js": "define([]);",
    "app/code/Acme/Widget/Test/Unit/ItemTest.php": "<?php\n",
    "app/code/Acme/Widget/Tests/ItemTest.php": "<?php\n",
    "app/code/Acme/Widget/README.md": "# readme",
    "app/code/Acme/Widget/composer.json": "{}",
    "node_modules/lib/index.js": "",
}


def test_files_are_bucketed_by_type(write_tree, tmp_path):
    write_tree(TREE)
    root = str(tmp_path.resolve())

    result = collect_files(ScanConfiguration.build(tmp_path))
    buckets = result.classification.to_dict()

    assert result.errors == []
    assert buckets["di"] == [
        os.path.join(root, "app/code/Acme/Widget/etc/di.xml"),
        os.path.join(root, "app/code/Acme/Widget/etc/frontend/di.xml"),
    ]
    assert buckets["xml"] == [os.path.join(root, "app/code/Acme/Widget/etc/module.xml")]
    assert os.path.join(root, "app/code/Acme/Widget/Model/Item.PHP") in buckets["php"]
    assert os.path.join(root, "app/code/Acme/Widget/Test/Unit/ItemTest.php") in buckets["php"]
    assert len(buckets["phtml"]) == 1
    assert len(buckets["js"]) == 1


def test_excluded_dirs_and_files_never_collected(write_tree, tmp_path):
    write_tree(TREE)

    classification = collect_files(ScanConfiguration.build(tmp_path)).classification

    for path in classification.all_files():
        parts = path.split(os.sep)
        assert "Tests" not in parts
        assert "node_modules" not in parts
        assert os.path.basename(path) not in ("README.md", "composer.json")


def test_excluded_extensions_keep_no_bucket(write_tree, tmp_path):
    write_tree(TREE)

    classification = collect_files(ScanConfiguration.build(tmp_path, excluded_extensions=["js"])).classification

    assert "js" not in classification
    assert classification.files("js") == []


def test_empty_buckets_are_retained(write_tree, tmp_path):
    write_tree({"a.php": "<?php\n"})

    classification = collect_files(ScanConfiguration.build(tmp_path)).classification

    assert "phtml" in classification
    assert classification["phtml"] == []


def test_exclude_patterns_match_exact_paths_only(write_tree, tmp_path):
    write_tree({"a.php": "<?php\n", "b.php": "<?php\n"})
    root = str(tmp_path.resolve())
    config = ScanConfiguration.build(tmp_path, exclude=f"{root}/a.php,a")

    files = collect_files(config).classification.files("php")

    assert files == [os.path.join(root, "b.php")]


def test_single_file_root(write_tree, tmp_path):
    write_tree({"etc/di.xml": "<config/>"})

    result = collect_files(ScanConfiguration.build(tmp_path / "etc" / "di.xml"))

    assert result.classification.files("di") == [str((tmp_path / "etc" / "di.xml").resolve())]


def test_invalid_root_reports_single_error(tmp_path):
    result = collect_files(ScanConfiguration.build(tmp_path / "missing"))

    assert len(result.errors) == 1
    assert "is not a valid directory or file" in result.errors[0]
    assert result.classification.is_empty()


def test_empty_tree_reports_no_files(write_tree, tmp_path):
    write_tree({"notes.txt": "nothing to see"})

    result = collect_files(ScanConfiguration.build(tmp_path))

    assert result.errors == ["No files found to scan."]


def test_classify_lowercases_extension(tmp_path):
    config = ScanConfiguration.build(tmp_path)

    assert classify("/x/Foo.XML", config) == "xml"
    assert classify("/x/etc/adminhtml/di.xml", config) == "di"
    assert classify("/x/foo.txt", config) is None
