import pytest

from easyaudit.config import (
    ALLOWED_EXTENSIONS,
    ConfigError,
    ScanConfiguration,
    load_config_file,
    split_list,
)


def test_split_list_trims_and_drops_blanks():
    assert split_list(" a, b ,, c ") == ("a", "b", "c")
    assert split_list(["a,b", "c"]) == ("a", "b", "c")
    assert split_list(None) == ()


def test_build_normalizes_root_and_extensions(tmp_path):
    config = ScanConfiguration.build(tmp_path, exclude="/x/a.php, /x/b.php", excluded_extensions=[".JS", "phtml"])

    assert config.root == str(tmp_path.resolve())
    assert config.allowed_extensions == ("php", "xml", "di")
    assert config.exclude_patterns == ("/x/a.php", "/x/b.php")
    assert "node_modules" in config.excluded_dirs
    assert "composer.json" in config.excluded_files


def test_build_defaults(tmp_path):
    config = ScanConfiguration.build(tmp_path, extra_excluded_dirs=["generated"])

    assert config.allowed_extensions == ALLOWED_EXTENSIONS
    assert "generated" in config.excluded_dirs
    assert config.fixable_only is False


def test_load_config_file(tmp_path):
    path = tmp_path / "easyaudit.yaml"
    path.write_text(
        "exclude: /a.php, /b.php\n"
        "exclude_ext: [js]\n"
        "excluded_dirs:\n  - generated\n"
        "fixable_rules: [aroundToBeforePlugin]\n",
        encoding="utf-8",
    )

    config = load_config_file(path)

    assert config == {
        "exclude": ("/a.php", "/b.php"),
        "exclude_ext": ("js",),
        "excluded_dirs": ("generated",),
        "fixable_rules": ("aroundToBeforePlugin",),
    }


def test_load_config_file_missing(tmp_path):
    assert load_config_file(tmp_path / "absent.yaml") == {}


@pytest.mark.parametrize(
    "content",
    [
        "- just\n- a list\n",
        "unknown_key: 1\n",
        "exclude_ext: 5\n",
        "exclude: [unclosed\n",
    ],
)
def test_load_config_file_rejects_bad_content(tmp_path, content):
    path = tmp_path / "bad.yaml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config_file(path)
